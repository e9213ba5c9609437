"""ファイル内容に基づくMIMEタイプ判定

ファイル名やクライアントの申告ではなく、ファイル先頭のバイト列から
libmagic（python-magic）で判定する。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from src.upload_rules.errors import DisabledExtensionError

logger = logging.getLogger(__name__)

# libmagic の判定に十分な先頭バイト数。巨大ファイルを全読みしないための上限
MIME_SNIFF_BYTES = 2048

LIBMAGIC = "libmagic"


def read_head(file_path: Union[str, Path], limit: int = MIME_SNIFF_BYTES) -> bytes:
    """ファイル先頭から最大 limit バイトを読み込む

    Raises:
        OSError: ファイルを読み込めない場合
    """
    with open(file_path, "rb") as fh:
        return fh.read(limit)


def detect_mime_type(file_path: Union[str, Path]) -> str:
    """ファイル内容からMIMEタイプを判定する

    Args:
        file_path: 判定対象のファイルパス

    Returns:
        検出されたMIMEタイプ（例: "image/png"）

    Raises:
        DisabledExtensionError: python-magic / libmagic が利用できない場合
        OSError: ファイルを読み込めない場合
    """
    # libmagic が無い環境でもモジュール自体は読み込めるよう遅延インポート
    try:
        import magic
    except ImportError as err:
        logger.error("MIMEタイプ判定が利用できません: %s", err)
        raise DisabledExtensionError(LIBMAGIC, str(err)) from err

    head = read_head(file_path)

    try:
        return magic.from_buffer(head, mime=True)
    except magic.MagicException as err:
        logger.error("libmagic の呼び出しに失敗しました: %s", err)
        raise DisabledExtensionError(LIBMAGIC, str(err)) from err
