"""Validation for documents submitted for extraction."""

from typing import Optional

from domain.errors import InvalidDocument, UnsupportedInput


IMAGE_MEDIA_TYPES = (
    'image/jpeg',
    'image/png',
    'image/gif',
    'image/webp',
)

PDF_MEDIA_TYPE = 'application/pdf'

# Order matters: it is the order listed in error messages
SUPPORTED_MEDIA_TYPES = IMAGE_MEDIA_TYPES + (PDF_MEDIA_TYPE,)


def is_supported_media_type(media_type: Optional[str]) -> bool:
    """Check if a media type is accepted for extraction

    Example:
        >>> is_supported_media_type('image/png')
        True
        >>> is_supported_media_type('image/tiff')
        False
    """
    return media_type in SUPPORTED_MEDIA_TYPES


def is_image(media_type: str) -> bool:
    return media_type in IMAGE_MEDIA_TYPES


def validate_document(media_type: Optional[str], size_bytes: int, max_size: int) -> None:
    """Reject documents the extraction engine cannot take.

    Args:
        media_type: Declared MIME type of the upload
        size_bytes: Upload size in bytes
        max_size: Maximum accepted size in bytes

    Raises:
        UnsupportedInput: Media type is outside the allowlist
        InvalidDocument: File is empty or larger than max_size
    """
    if not is_supported_media_type(media_type):
        raise UnsupportedInput(
            f"Unsupported file type: {media_type or 'unknown'}. "
            "Use JPEG, PNG, GIF, WEBP, or PDF."
        )

    if size_bytes == 0:
        raise InvalidDocument("File is empty (0 bytes)")

    if size_bytes > max_size:
        raise InvalidDocument(
            f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"
        )
