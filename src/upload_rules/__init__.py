"""アップロードファイル検証ルールパッケージ

ファイルサイズ、拡張子、内容ベースのMIMEタイプ、画像解像度を検証する。

使用例::

    from src.upload_rules import UploadValidator

    validator = UploadValidator({
        "filesize": 1024 * 1024,
        "mimetype": ["image/png", "image/jpeg"],
        "dimensions": {"min": {"w": 100, "h": 100}, "max": {"w": 500, "h": 500}},
    })
    result = validator.validate({"tmp_name": "/tmp/upload.png", "size": 2048})
    if not result.is_valid:
        print(result.errors)
"""

from src.upload_rules.config import (
    AllowedExtensions,
    AllowedMimeTypes,
    DimensionBound,
    DimensionConstraints,
    SizeLimit,
)
from src.upload_rules.errors import (
    DisabledExtensionError,
    InvalidUploadError,
    RuleConfigurationError,
    UploadRuleError,
)
from src.upload_rules.rules import dimensions, extension, filesize, mimetype
from src.upload_rules.upload import UploadedFile
from src.upload_rules.validator import (
    RULES,
    RuleOutcome,
    UploadValidator,
    ValidationResult,
    evaluate,
)

__all__ = [
    "AllowedExtensions",
    "AllowedMimeTypes",
    "DimensionBound",
    "DimensionConstraints",
    "DisabledExtensionError",
    "InvalidUploadError",
    "RULES",
    "RuleConfigurationError",
    "RuleOutcome",
    "SizeLimit",
    "UploadRuleError",
    "UploadValidator",
    "UploadedFile",
    "ValidationResult",
    "dimensions",
    "evaluate",
    "extension",
    "filesize",
    "mimetype",
]
