"""アップロードファイルのレコード"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from src.upload_rules.errors import InvalidUploadError


@dataclass(frozen=True)
class UploadedFile:
    """アップロードされた1ファイルを表すイミュータブルなレコード

    Attributes:
        tmp_name: 一時保存先のファイルパス
        size: 申告されたファイルサイズ（バイト）
        name: クライアントが送ったファイル名（ルールでは使用しない）
    """

    tmp_name: str
    size: int
    name: str = ""

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any]) -> "UploadedFile":
        """フレームワークが渡す辞書形式のレコードから生成する

        Raises:
            InvalidUploadError: tmp_name / size が欠けている、または不正な場合
        """
        try:
            tmp_name = value["tmp_name"]
            size = value["size"]
        except KeyError as err:
            raise InvalidUploadError(
                f"ファイルレコードに {err.args[0]} がありません"
            ) from None

        if not isinstance(tmp_name, str):
            raise InvalidUploadError(
                f"tmp_name は文字列である必要があります: {type(tmp_name).__name__}"
            )
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise InvalidUploadError(f"不正なファイルサイズです: {size!r}")

        return cls(tmp_name=tmp_name, size=size, name=str(value.get("name", "")))


UploadLike = Union[UploadedFile, Mapping[str, Any]]


def as_upload(value: UploadLike) -> UploadedFile:
    """UploadedFile または辞書形式のレコードを UploadedFile に揃える"""
    if isinstance(value, UploadedFile):
        return value
    return UploadedFile.from_mapping(value)
