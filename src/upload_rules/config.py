"""ルールごとの設定構造体

各構造体は生成時に値を検証する。ルール呼び出しごとの再検証は行わない。
`coerce()` は従来の緩い形式（整数、文字列のリスト、min/max の辞書）を受け付ける。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from src.upload_rules.errors import RuleConfigurationError

# ---------------------------------------------------------------------------
# ヘルパー
# ---------------------------------------------------------------------------


def _require_non_negative_int(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RuleConfigurationError(
            f"{label} は整数である必要があります: {value!r}"
        )
    if value < 0:
        raise RuleConfigurationError(f"{label} は0以上である必要があります: {value}")
    return value


def _string_set(values: Iterable[str], label: str) -> frozenset[str]:
    if isinstance(values, (str, bytes)):
        raise RuleConfigurationError(
            f"{label} には文字列のリストを指定してください: {values!r}"
        )
    try:
        result = frozenset(values)
    except TypeError:
        raise RuleConfigurationError(
            f"{label} には文字列のリストを指定してください: {values!r}"
        ) from None
    for item in result:
        if not isinstance(item, str) or not item:
            raise RuleConfigurationError(f"{label} に不正な値があります: {item!r}")
    return result


# ---------------------------------------------------------------------------
# サイズ
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SizeLimit:
    """最大ファイルサイズ（バイト）"""

    max_bytes: int

    def __post_init__(self) -> None:
        _require_non_negative_int(self.max_bytes, "max_bytes")

    @classmethod
    def coerce(cls, raw: "SizeLimit | int") -> "SizeLimit":
        if isinstance(raw, cls):
            return raw
        return cls(max_bytes=raw)


# ---------------------------------------------------------------------------
# 拡張子・MIMEタイプ
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AllowedExtensions:
    """許可する拡張子のセット（ドットなし、大文字小文字を区別）"""

    values: frozenset[str]

    def __post_init__(self) -> None:
        values = _string_set(self.values, "allowed extensions")
        for ext in values:
            if ext.startswith("."):
                raise RuleConfigurationError(
                    f"拡張子はドットなしで指定してください: {ext!r}"
                )
        object.__setattr__(self, "values", values)

    @classmethod
    def coerce(cls, raw: "AllowedExtensions | Iterable[str]") -> "AllowedExtensions":
        if isinstance(raw, cls):
            return raw
        return cls(values=raw)

    def __contains__(self, item: object) -> bool:
        return item in self.values


@dataclass(frozen=True)
class AllowedMimeTypes:
    """許可するMIMEタイプのセット（完全一致）"""

    values: frozenset[str]

    def __post_init__(self) -> None:
        values = _string_set(self.values, "allowed MIME types")
        for mime in values:
            major, sep, minor = mime.partition("/")
            if not (major and sep and minor):
                raise RuleConfigurationError(
                    f"MIMEタイプは type/subtype 形式で指定してください: {mime!r}"
                )
        object.__setattr__(self, "values", values)

    @classmethod
    def coerce(cls, raw: "AllowedMimeTypes | Iterable[str]") -> "AllowedMimeTypes":
        if isinstance(raw, cls):
            return raw
        return cls(values=raw)

    def __contains__(self, item: object) -> bool:
        return item in self.values


# ---------------------------------------------------------------------------
# 画像解像度
# ---------------------------------------------------------------------------

_BOUND_KEYS = frozenset({"w", "h"})
_CONSTRAINT_KEYS = frozenset({"min", "max"})


@dataclass(frozen=True)
class DimensionBound:
    """幅・高さの境界値（ピクセル）。None は制約なし"""

    w: int | None = None
    h: int | None = None

    def __post_init__(self) -> None:
        if self.w is not None:
            _require_non_negative_int(self.w, "w")
        if self.h is not None:
            _require_non_negative_int(self.h, "h")

    @classmethod
    def coerce(cls, raw: "DimensionBound | Mapping[str, int]") -> "DimensionBound":
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise RuleConfigurationError(
                f"解像度の境界は w / h の辞書で指定してください: {raw!r}"
            )
        unknown = set(raw) - _BOUND_KEYS
        if unknown:
            raise RuleConfigurationError(
                f"未知のキーがあります: {', '.join(sorted(map(str, unknown)))}"
            )
        return cls(w=raw.get("w"), h=raw.get("h"))


@dataclass(frozen=True)
class DimensionConstraints:
    """画像解像度の制約

    Attributes:
        min: 最小解像度（None は制約なし）
        max: 最大解像度（None は制約なし）
    """

    min: DimensionBound | None = None
    max: DimensionBound | None = None

    def __post_init__(self) -> None:
        lower, upper = self.min, self.max
        if lower is None or upper is None:
            return
        for axis in ("w", "h"):
            low = getattr(lower, axis)
            high = getattr(upper, axis)
            if low is not None and high is not None and low > high:
                raise RuleConfigurationError(
                    f"min.{axis}({low}) が max.{axis}({high}) を超えています"
                )

    @classmethod
    def coerce(
        cls, raw: "DimensionConstraints | Mapping[str, Any]"
    ) -> "DimensionConstraints":
        """辞書形式の制約を変換する

        例::

            {"min": {"w": 100, "h": 100}, "max": {"w": 500, "h": 500}}
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise RuleConfigurationError(
                f"解像度の制約は min / max の辞書で指定してください: {raw!r}"
            )
        unknown = set(raw) - _CONSTRAINT_KEYS
        if unknown:
            raise RuleConfigurationError(
                f"未知のキーがあります: {', '.join(sorted(map(str, unknown)))}"
            )
        lower = raw.get("min")
        upper = raw.get("max")
        return cls(
            min=DimensionBound.coerce(lower) if lower is not None else None,
            max=DimensionBound.coerce(upper) if upper is not None else None,
        )
