"""UploadValidator + 実画像ファイルの統合テスト

以下のシナリオをカバー:
  - すべてのルールに合格するアップロード
  - 解像度・サイズ・拡張子の不合格
  - 拡張子を偽装したファイル（内容ベースのMIME判定）
  - MIME判定が利用できない環境での検証中断
"""

import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

from src.upload_rules import (
    DisabledExtensionError,
    RuleOutcome,
    UploadValidator,
    evaluate,
    mimetype,
)

ONE_MB = 1024 * 1024


def _create_test_image(width: int, height: int, fmt: str = "PNG") -> bytes:
    """テスト用の画像バイナリを生成する"""
    image = Image.new("RGB", (width, height), color="blue")
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def _upload(tmp_path: Path, filename: str, data: bytes) -> dict:
    """フレームワークが渡す形式のファイルレコードを作成する"""
    file_path = tmp_path / filename
    file_path.write_bytes(data)
    return {"tmp_name": str(file_path), "size": len(data), "name": filename}


@pytest.fixture
def validator() -> UploadValidator:
    return UploadValidator(
        {
            "filesize": ONE_MB,
            "extension": ["png", "jpg", "jpeg"],
            "dimensions": {"min": {"w": 100, "h": 100}, "max": {"w": 500, "h": 500}},
        }
    )


class TestValidatorWithImages:
    """ファイル操作を伴う統合テスト"""

    def test_valid_png(self, validator: UploadValidator, tmp_path: Path):
        record = _upload(tmp_path, "ok.png", _create_test_image(200, 200))
        result = validator.validate(record, context={"field": "photo"})
        assert result.is_valid is True
        assert result.file_info["size"] == record["size"]

    def test_valid_jpeg(self, validator: UploadValidator, tmp_path: Path):
        record = _upload(tmp_path, "ok.jpg", _create_test_image(300, 150, "JPEG"))
        assert validator.validate(record).is_valid is True

    def test_too_wide(self, validator: UploadValidator, tmp_path: Path):
        record = _upload(tmp_path, "wide.png", _create_test_image(600, 300))
        result = validator.validate(record)
        assert result.is_valid is False
        assert result.errors == ["dimensions"]

    def test_oversized_and_wrong_extension(
        self, validator: UploadValidator, tmp_path: Path
    ):
        data = _create_test_image(200, 200, "BMP") + b"\x00" * ONE_MB
        record = _upload(tmp_path, "big.bmp", data)
        result = validator.validate(record)
        assert result.errors == ["filesize", "extension"]

    def test_text_disguised_as_png(self, validator: UploadValidator, tmp_path: Path):
        record = _upload(tmp_path, "fake.png", "テキストです".encode("utf-8"))
        result = validator.validate(record)
        assert result.errors == ["dimensions"]


class TestMimetypeIntegration:
    """MIMEタイプ判定の統合テスト"""

    def test_renamed_png_passes_with_libmagic(self, tmp_path: Path):
        """拡張子を .bin に変えても PNG として判定される"""
        pytest.importorskip("magic")
        validator = UploadValidator({"mimetype": ["image/png"]})
        record = _upload(tmp_path, "image.bin", _create_test_image(10, 10))
        assert validator.validate(record).is_valid is True

    def test_jpeg_rejected_when_only_png_allowed(self, tmp_path: Path):
        pytest.importorskip("magic")
        record = _upload(tmp_path, "photo.png", _create_test_image(10, 10, "JPEG"))
        assert mimetype(record, ["image/png"]) is False
        assert mimetype(record, ["image/jpeg"]) is True

    def test_unavailable_libmagic_halts_validation(self, tmp_path: Path):
        """libmagic が無い環境では結果を返さず例外で中断する"""
        validator = UploadValidator({"filesize": ONE_MB, "mimetype": ["image/png"]})
        record = _upload(tmp_path, "ok.png", _create_test_image(10, 10))
        with patch.dict(sys.modules, {"magic": None}):
            with pytest.raises(DisabledExtensionError):
                validator.validate(record)
            assert (
                evaluate(mimetype, record, ["image/png"])
                is RuleOutcome.ENVIRONMENT_ERROR
            )
