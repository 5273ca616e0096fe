"""AI domain layer - Port and error types for extraction engines"""

from .ports import (
    ExamDocument,
    EngineResult,
    ExtractionEnginePort,
    LLMError,
    LLMTimeoutError,
    LLMRateLimitError,
    LLMAuthError,
    LLMServiceError,
    LLMInvalidResponseError,
)

__all__ = [
    "ExamDocument",
    "EngineResult",
    "ExtractionEnginePort",
    "LLMError",
    "LLMTimeoutError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMServiceError",
    "LLMInvalidResponseError",
]
