"""Normalize raw extraction engine text into an ExamRecord."""

import json
import logging
import re

from pydantic import ValidationError

from domain.errors import MalformedResponse
from .models import ExamRecord

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```$")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding fenced code block marker and whitespace.

    Example:
        >>> strip_code_fence('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    stripped = text.strip()
    stripped = _LEADING_FENCE.sub("", stripped, count=1)
    stripped = _TRAILING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def normalize_extraction_text(text: str) -> ExamRecord:
    """Parse extraction engine output into a validated ExamRecord.

    Args:
        text: Raw text returned by the engine, optionally wrapped in a
            fenced code block

    Returns:
        ExamRecord with every field present (defaults substituted)

    Raises:
        MalformedResponse: Empty text, invalid JSON, a non-object JSON
            value, or a value that does not fit the record shape
    """
    raw = strip_code_fence(text or "")
    if not raw:
        raise MalformedResponse("Extraction engine returned empty text")

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Extraction output is not valid JSON: {e.msg} at position {e.pos}")
        raise MalformedResponse(f"Extraction engine returned invalid JSON: {e.msg}") from e
    except RecursionError as e:
        logger.warning("Extraction output is nested too deeply to parse")
        raise MalformedResponse("Extraction engine returned JSON nested too deeply") from e

    if not isinstance(parsed, dict):
        raise MalformedResponse(
            f"Extraction engine returned a JSON {type(parsed).__name__}, expected an object"
        )

    try:
        return ExamRecord.model_validate(parsed)
    except ValidationError as e:
        logger.warning(f"Extraction output does not match the exam schema: {e.error_count()} errors")
        locations = ", ".join(
            ".".join(str(part) for part in err["loc"]) for err in e.errors()
        )
        raise MalformedResponse(
            f"Extraction output does not match the exam schema ({locations})"
        ) from e
