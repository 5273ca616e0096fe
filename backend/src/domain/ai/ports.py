"""
Extraction Engine Port - Abstract interface for document extraction engines.

Hexagonal Architecture: This is a domain port that infrastructure adapters implement.
The extraction service depends on this port, not on a concrete vendor SDK.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ExamDocument:
    """
    A document submitted for extraction.

    Attributes:
        content: Raw file bytes
        media_type: MIME type from the upload allowlist
        filename: Original filename (used when registering PDFs with the engine)
    """
    content: bytes
    media_type: str
    filename: str = "exam"

    @property
    def is_pdf(self) -> bool:
        return self.media_type == "application/pdf"


@dataclass
class EngineResult:
    """
    Result from one extraction engine call.

    Attributes:
        text: Text of the first text content block, None if the engine returned none
        provider: Provider name (e.g., 'anthropic')
        model: Model name
        tokens_in: Input tokens used (None if provider doesn't report)
        tokens_out: Output tokens used (None if provider doesn't report)
        latency_ms: Latency in milliseconds
        warnings: List of non-critical warnings
    """
    text: Optional[str]
    provider: str
    model: str
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None
    latency_ms: int = 0
    warnings: list[str] = field(default_factory=list)


class ExtractionEnginePort(ABC):
    """
    Abstract interface for extraction engines.

    Implementations must handle:
    - API authentication
    - Request formatting (inline images, registered PDF documents)
    - Bounding the call with a timeout
    - Mapping provider errors onto the LLMError hierarchy
    """

    provider_name: str = "unknown"

    @abstractmethod
    def extract(self, document: ExamDocument) -> EngineResult:
        """
        Send one document plus the fixed extraction instructions to the engine.

        Args:
            document: Uploaded document

        Returns:
            EngineResult whose text is expected to hold one JSON object

        Raises:
            LLMTimeoutError: Request timed out
            LLMRateLimitError: Rate limit exceeded
            LLMAuthError: Authentication failed
            LLMServiceError: Provider service unavailable
            LLMInvalidResponseError: Provider returned an unexpected payload
        """
        pass


# Custom exceptions for LLM operations
class LLMError(Exception):
    """Base exception for LLM operations"""
    pass


class LLMTimeoutError(LLMError):
    """LLM request timed out"""
    pass


class LLMRateLimitError(LLMError):
    """Rate limit exceeded"""
    pass


class LLMAuthError(LLMError):
    """Authentication failed"""
    pass


class LLMServiceError(LLMError):
    """Provider service unavailable or returned error"""
    pass


class LLMInvalidResponseError(LLMError):
    """Provider returned invalid/unexpected response"""
    pass
