"""ルールテーブルによるアップロード検証

フレームワークへのグローバル登録の代わりに、名前付きルールのテーブルを
UploadValidator に明示的に渡す。
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from src.upload_rules import rules
from src.upload_rules.config import (
    AllowedExtensions,
    AllowedMimeTypes,
    DimensionConstraints,
    SizeLimit,
)
from src.upload_rules.errors import DisabledExtensionError, RuleConfigurationError
from src.upload_rules.upload import UploadLike, as_upload

logger = logging.getLogger(__name__)

Rule = Callable[[UploadLike, Any, Any], bool]

# 既定のルールテーブル: 名前 -> (ルール関数, 設定の変換関数)
RULES: Mapping[str, tuple[Rule, Callable[[Any], Any]]] = {
    "filesize": (rules.filesize, SizeLimit.coerce),
    "extension": (rules.extension, AllowedExtensions.coerce),
    "mimetype": (rules.mimetype, AllowedMimeTypes.coerce),
    "dimensions": (rules.dimensions, DimensionConstraints.coerce),
}


class RuleOutcome(enum.Enum):
    """ルール実行結果（合格・不合格・実行環境エラー）"""

    PASSED = "passed"
    FAILED = "failed"
    ENVIRONMENT_ERROR = "environment_error"


def evaluate(
    rule: Rule,
    value: UploadLike,
    config: Any,
    context: Any = None,
) -> RuleOutcome:
    """ルールを1つ実行し、結果を RuleOutcome で返す

    DisabledExtensionError は ENVIRONMENT_ERROR として返す。
    """
    try:
        passed = rule(value, config, context)
    except DisabledExtensionError as err:
        logger.warning("ルールを実行できません: %s", err)
        return RuleOutcome.ENVIRONMENT_ERROR
    return RuleOutcome.PASSED if passed else RuleOutcome.FAILED


@dataclass(frozen=True)
class ValidationResult:
    """検証結果を表すイミュータブルなデータクラス

    Attributes:
        is_valid: すべてのルールに合格したかどうか
        errors: 不合格になったルール名のリスト
        file_info: ファイル情報の辞書（パス、サイズ）
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    file_info: dict[str, Any] = field(default_factory=dict)


class UploadValidator:
    """名前付きルールの組み合わせでアップロードファイルを検証するクラス

    使用例::

        validator = UploadValidator({
            "filesize": 1024 * 1024,
            "extension": ["jpg", "png"],
            "dimensions": {"max": {"w": 500, "h": 500}},
        })
        result = validator.validate({"tmp_name": "/tmp/php3Fx9a.png", "size": 2048})

    Attributes:
        _checks: (ルール名, ルール関数, 変換済み設定) のリスト
    """

    def __init__(
        self,
        checks: Mapping[str, Any],
        *,
        rule_table: Mapping[str, tuple[Rule, Callable[[Any], Any]]] = RULES,
    ) -> None:
        """UploadValidatorを初期化する

        設定はここで一度だけ変換・検証する。

        Args:
            checks: ルール名から設定への辞書。宣言順に実行する。
            rule_table: 利用可能なルールのテーブル。デフォルトは RULES。

        Raises:
            RuleConfigurationError: 未知のルール名、または設定が不正な場合
        """
        self._checks: list[tuple[str, Rule, Any]] = []
        for name, raw_config in checks.items():
            if name not in rule_table:
                raise RuleConfigurationError(
                    f"未知のルールです: {name}。"
                    f"利用可能: {', '.join(sorted(rule_table))}"
                )
            rule, coerce = rule_table[name]
            self._checks.append((name, rule, coerce(raw_config)))

    @property
    def rule_names(self) -> list[str]:
        return [name for name, _, _ in self._checks]

    def validate(self, value: UploadLike, context: Any = None) -> ValidationResult:
        """すべてのルールを宣言順に実行する

        Args:
            value: ファイルレコード（UploadedFile または辞書）
            context: 呼び出し元の検証コンテキスト（各ルールにそのまま渡す）

        Returns:
            ValidationResult: 検証結果

        Raises:
            DisabledExtensionError: ルールが実行環境の不備で実行できない場合。
                検証は中断される。
            InvalidUploadError: ファイルレコードが不正な場合
        """
        upload = as_upload(value)
        errors: list[str] = []

        for name, rule, config in self._checks:
            if not rule(upload, config, context):
                errors.append(name)

        if errors:
            logger.info(
                "アップロードを拒否しました: %s (%s)",
                upload.tmp_name,
                ", ".join(errors),
            )

        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            file_info={"tmp_name": upload.tmp_name, "size": upload.size},
        )
