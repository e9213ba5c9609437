"""アップロードファイルの検証ルール

各ルールは (ファイルレコード, ルール設定, 検証コンテキスト) を受け取り、
制約を満たせば True、満たさなければ False を返す。
コンテキストは呼び出し元の検証処理を表すが、判定には使用しない。

例外を送出するのは MIMEタイプ判定が実行環境で利用できない場合のみ
（DisabledExtensionError）。
"""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable, Mapping

from PIL import Image

from src.upload_rules.config import (
    AllowedExtensions,
    AllowedMimeTypes,
    DimensionConstraints,
    SizeLimit,
)
from src.upload_rules.mime import detect_mime_type
from src.upload_rules.upload import UploadLike, as_upload

logger = logging.getLogger(__name__)


def extract_extension(path: str) -> str:
    """パスの最終要素から、最後のドット以降の文字列を取り出す

    大文字小文字はそのまま返す。ドットが無い場合は空文字列。

    >>> extract_extension("/tmp/upload/photo.tar.PNG")
    'PNG'
    >>> extract_extension("/tmp/php3Fx9a")
    ''
    """
    basename = os.path.basename(path)
    _, dot, ext = basename.rpartition(".")
    return ext if dot else ""


def filesize(
    value: UploadLike,
    limit: SizeLimit | int,
    context: Any = None,
) -> bool:
    """ファイルサイズが上限以下であれば True"""
    upload = as_upload(value)
    limit = SizeLimit.coerce(limit)

    if upload.size <= limit.max_bytes:
        return True

    logger.debug(
        "ファイルサイズ超過: %s (%d > %d)",
        upload.tmp_name,
        upload.size,
        limit.max_bytes,
    )
    return False


def extension(
    value: UploadLike,
    extensions: AllowedExtensions | Iterable[str],
    context: Any = None,
) -> bool:
    """一時ファイルパスの拡張子が許可リストに含まれていれば True"""
    upload = as_upload(value)
    allowed = AllowedExtensions.coerce(extensions)

    ext = extract_extension(upload.tmp_name)
    if ext in allowed:
        return True

    logger.debug("許可されていない拡張子: %r (%s)", ext, upload.tmp_name)
    return False


def mimetype(
    value: UploadLike,
    types: AllowedMimeTypes | Iterable[str],
    context: Any = None,
) -> bool:
    """ファイル内容から判定したMIMEタイプが許可リストに含まれていれば True

    Raises:
        DisabledExtensionError: MIMEタイプ判定が実行環境で利用できない場合
    """
    upload = as_upload(value)
    allowed = AllowedMimeTypes.coerce(types)

    try:
        detected = detect_mime_type(upload.tmp_name)
    except OSError as err:
        logger.debug("ファイルを読み込めません: %s (%s)", upload.tmp_name, err)
        return False

    if detected in allowed:
        return True

    logger.debug("許可されていないMIMEタイプ: %s (%s)", detected, upload.tmp_name)
    return False


def read_image_size(path: str) -> tuple[int, int] | None:
    """画像ヘッダーから (幅, 高さ) を取得する

    Image.open は遅延読み込みのため、ピクセルデータはデコードしない。
    画像として認識できない場合は None を返す。
    """
    try:
        with Image.open(path) as img:
            return img.size
    except Exception as err:
        # 破損ヘッダーではプラグインごとに異なる例外が送出される
        logger.debug("画像ヘッダーを読み込めません: %s (%s)", path, err)
        return None


def dimensions(
    value: UploadLike,
    constraints: DimensionConstraints | Mapping[str, Any],
    context: Any = None,
) -> bool:
    """画像の解像度がすべての境界を満たしていれば True

    画像でないファイルは解像度を検証できないため False を返す。

    例::

        dimensions(upload, {"min": {"w": 100, "h": 100}, "max": {"w": 500, "h": 500}})
    """
    upload = as_upload(value)
    constraints = DimensionConstraints.coerce(constraints)

    size = read_image_size(upload.tmp_name)
    if size is None:
        return False
    width, height = size

    lower, upper = constraints.min, constraints.max
    violations: list[str] = []
    if lower is not None:
        if lower.w is not None and width < lower.w:
            violations.append(f"width {width} < min {lower.w}")
        if lower.h is not None and height < lower.h:
            violations.append(f"height {height} < min {lower.h}")
    if upper is not None:
        if upper.w is not None and width > upper.w:
            violations.append(f"width {width} > max {upper.w}")
        if upper.h is not None and height > upper.h:
            violations.append(f"height {height} > max {upper.h}")

    if violations:
        logger.debug(
            "解像度制約違反: %s (%s)", ", ".join(violations), upload.tmp_name
        )
        return False
    return True
