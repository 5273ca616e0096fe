"""Domain error taxonomy.

Every fault the service reports to a caller carries a stable, machine-readable
``kind`` plus a human-readable message. HTTP status mapping lives in main.py.
"""


class ExamExtractorError(Exception):
    """Base exception for domain faults."""

    kind = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class UnsupportedInput(ExamExtractorError):
    """Submitted document's media type is outside the allowlist."""

    kind = "unsupported_input"


class InvalidDocument(ExamExtractorError):
    """Submitted document is empty or too large."""

    kind = "invalid_document"


class NoResponseContent(ExamExtractorError):
    """Extraction engine returned no text content block."""

    kind = "no_response_content"


class MalformedResponse(ExamExtractorError):
    """Extraction engine text could not be normalized into an ExamRecord."""

    kind = "malformed_response"


class InvalidTTL(ExamExtractorError):
    """Share creation requested with a non-positive or non-integer duration."""

    kind = "invalid_ttl"
