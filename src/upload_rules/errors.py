"""アップロードルールの例外定義

検証失敗（ファイルが制約を満たさない）は例外ではなく False で表す。
ここで定義する例外は、設定ミス・不正な入力・実行環境の不備を表す。
"""

from __future__ import annotations


class UploadRuleError(Exception):
    """アップロードルール例外の基底クラス"""


class DisabledExtensionError(UploadRuleError):
    """内容検査に必要な機能が実行環境で利用できない場合のエラー

    「ファイルがポリシーで拒否された」と「サーバーが検査できない」を
    区別するため、False を返さずにこの例外を送出する。

    Attributes:
        extension: 利用できない機能の名前
        message: 下位レイヤーの診断メッセージ
    """

    def __init__(self, extension: str, message: str = "") -> None:
        self.extension = extension
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"{extension} が利用できません{detail}")


class RuleConfigurationError(UploadRuleError, ValueError):
    """ルール設定が不正な場合のエラー"""


class InvalidUploadError(UploadRuleError, ValueError):
    """ファイルレコードが不正な場合のエラー"""
