"""Document domain - upload validation for extraction"""

from .validation import (
    IMAGE_MEDIA_TYPES,
    PDF_MEDIA_TYPE,
    SUPPORTED_MEDIA_TYPES,
    is_image,
    is_supported_media_type,
    validate_document,
)

__all__ = [
    "IMAGE_MEDIA_TYPES",
    "PDF_MEDIA_TYPE",
    "SUPPORTED_MEDIA_TYPES",
    "is_image",
    "is_supported_media_type",
    "validate_document",
]
