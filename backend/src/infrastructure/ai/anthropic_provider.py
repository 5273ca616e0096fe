"""
Anthropic Provider - Concrete implementation of ExtractionEnginePort for Anthropic Claude.

Images are sent inline as base64 content blocks. PDFs are registered through
the Files API beta and referenced by file id; the uploaded file is deleted
after the request regardless of outcome.
"""

import base64
import logging
import os
import time
from typing import Any, Optional

from anthropic import (
    Anthropic,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AuthenticationError,
    RateLimitError,
)

from domain.ai.ports import (
    ExamDocument,
    EngineResult,
    ExtractionEnginePort,
    LLMAuthError,
    LLMInvalidResponseError,
    LLMRateLimitError,
    LLMServiceError,
    LLMTimeoutError,
)
from domain.documents.validation import is_image
from extraction.prompts import EXAM_EXTRACT_V1_SYSTEM, EXAM_EXTRACT_V1_USER

logger = logging.getLogger(__name__)

FILES_API_BETA = "files-api-2025-04-14"


class AnthropicProvider(ExtractionEnginePort):
    """
    Anthropic Claude implementation of ExtractionEnginePort.

    The SDK's automatic retries are disabled: an extraction call is expensive
    and the caller decides whether to try again.
    """

    provider_name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-opus-4-6",
        max_tokens: int = 4096,
        timeout: float = 60.0,
        client: Optional[Anthropic] = None,
    ):
        """
        Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            model: Claude model used for extraction
            max_tokens: Output token cap
            timeout: Seconds before a call is abandoned with LLMTimeoutError
            client: Preconfigured SDK client (tests inject a stub)

        Raises:
            ValueError: If no client is given and the API key is not provided
        """
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

        if client is not None:
            self.client = client
            return

        api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("Anthropic API key not provided. Set ANTHROPIC_API_KEY environment variable.")

        self.client = Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def extract(self, document: ExamDocument) -> EngineResult:
        """
        Extract exam data from an image or PDF document.

        Args:
            document: Uploaded document

        Returns:
            EngineResult with the first text block (None if there was none)

        Raises:
            LLMTimeoutError, LLMRateLimitError, LLMAuthError, LLMServiceError,
            LLMInvalidResponseError
        """
        start_time = time.perf_counter()

        try:
            if document.is_pdf:
                response = self._extract_from_pdf(document)
            elif is_image(document.media_type):
                response = self._extract_from_image(document)
            else:
                raise LLMInvalidResponseError(
                    f"Media type {document.media_type} cannot be sent to Claude"
                )

        except APITimeoutError as e:
            raise LLMTimeoutError(f"Anthropic API timeout after {self.timeout}s: {str(e)}")

        except RateLimitError as e:
            raise LLMRateLimitError(f"Anthropic rate limit exceeded: {str(e)}")

        except AuthenticationError as e:
            raise LLMAuthError(f"Anthropic authentication failed: {str(e)}")

        except (APIConnectionError, APIStatusError) as e:
            raise LLMServiceError(f"Anthropic service error: {str(e)}")

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        return self._to_result(response, latency_ms)

    def _extract_from_image(self, document: ExamDocument) -> Any:
        b64_image = base64.b64encode(document.content).decode("utf-8")

        return self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=EXAM_EXTRACT_V1_SYSTEM,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": document.media_type,
                                "data": b64_image,
                            },
                        },
                        {"type": "text", "text": EXAM_EXTRACT_V1_USER},
                    ],
                }
            ],
            timeout=self.timeout,
        )

    def _extract_from_pdf(self, document: ExamDocument) -> Any:
        # Upload via Files API to avoid sending large base64 payloads inline
        uploaded = self.client.beta.files.upload(
            file=(document.filename or "exam.pdf", document.content, "application/pdf"),
        )

        try:
            return self.client.beta.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=EXAM_EXTRACT_V1_SYSTEM,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "document",
                                "source": {"type": "file", "file_id": uploaded.id},
                            },
                            {"type": "text", "text": EXAM_EXTRACT_V1_USER},
                        ],
                    }
                ],
                betas=[FILES_API_BETA],
                timeout=self.timeout,
            )
        finally:
            self._delete_uploaded_file(uploaded.id)

    def _delete_uploaded_file(self, file_id: str) -> None:
        try:
            self.client.beta.files.delete(file_id)
        except (APIConnectionError, APIStatusError) as e:
            logger.warning(
                f"Failed to delete uploaded file {file_id}: {e}",
                extra={"file_id": file_id},
            )

    def _to_result(self, response: Any, latency_ms: int) -> EngineResult:
        warnings = []

        text = next(
            (block.text for block in response.content if block.type == "text"),
            None,
        )
        if getattr(response, "stop_reason", None) == "max_tokens":
            warnings.append(f"Output truncated at {self.max_tokens} tokens")

        usage = getattr(response, "usage", None)

        return EngineResult(
            text=text,
            provider=self.provider_name,
            model=self.model,
            tokens_in=usage.input_tokens if usage else None,
            tokens_out=usage.output_tokens if usage else None,
            latency_ms=latency_ms,
            warnings=warnings,
        )
