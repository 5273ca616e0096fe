"""Extraction service: one document in, one normalized ExamRecord out."""

import logging
import time

from domain.ai.ports import ExamDocument, ExtractionEnginePort, LLMError
from domain.errors import ExamExtractorError, NoResponseContent
from domain.exams.models import ExamRecord
from domain.exams.normalizer import normalize_extraction_text
from observability.metrics import (
    ai_tokens_total,
    extraction_duration_seconds,
    extraction_requests_total,
    extraction_results_count,
)

logger = logging.getLogger(__name__)


class ExtractionService:
    """Runs the extraction engine and normalizes its output.

    A failed extraction is never retried here: each call costs a full model
    invocation, so retrying is left to the user.
    """

    def __init__(self, engine: ExtractionEnginePort):
        self.engine = engine

    def extract(self, document: ExamDocument) -> ExamRecord:
        """Extract an ExamRecord from a validated document.

        Raises:
            LLMError: The engine call failed (timeout, rate limit, auth, service)
            NoResponseContent: The engine answered without any text block
            MalformedResponse: The text could not be normalized
        """
        media_kind = "pdf" if document.is_pdf else "image"
        start_time = time.perf_counter()

        try:
            result = self.engine.extract(document)
        except LLMError as e:
            extraction_requests_total.labels(media_kind=media_kind, status=type(e).__name__).inc()
            logger.error(
                f"Extraction engine call failed: {e}",
                extra={"provider": self.engine.provider_name, "media_type": document.media_type},
            )
            raise
        finally:
            extraction_duration_seconds.labels(media_kind=media_kind).observe(
                time.perf_counter() - start_time
            )

        if result.tokens_in:
            ai_tokens_total.labels(provider=result.provider, direction="input").inc(result.tokens_in)
        if result.tokens_out:
            ai_tokens_total.labels(provider=result.provider, direction="output").inc(result.tokens_out)

        logger.info(
            "Extraction engine responded",
            extra={
                "provider": result.provider,
                "model": result.model,
                "latency_ms": result.latency_ms,
                "tokens_in": result.tokens_in,
                "tokens_out": result.tokens_out,
            },
        )
        for warning in result.warnings:
            logger.warning(warning)

        try:
            if not result.text:
                raise NoResponseContent("No text response from the extraction engine")
            record = normalize_extraction_text(result.text)
        except ExamExtractorError as e:
            extraction_requests_total.labels(media_kind=media_kind, status=e.kind).inc()
            raise

        extraction_requests_total.labels(media_kind=media_kind, status="success").inc()
        extraction_results_count.observe(len(record.results))
        logger.info(
            f"Extracted {len(record.results)} results ({len(record.flagged_results)} flagged)"
        )
        return record
