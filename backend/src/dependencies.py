"""Global FastAPI dependencies.

The share store and the extraction service are built once per application
(see main.create_app) and kept on app.state; handlers receive them through
these dependencies, and tests swap them via app.dependency_overrides.
"""

from fastapi import Request

from config import Settings, get_settings
from domain.ai.ports import LLMAuthError
from extraction.service import ExtractionService
from infrastructure.ai.anthropic_provider import AnthropicProvider
from shares.store import ShareStore


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_share_store(request: Request) -> ShareStore:
    """Return the application's ShareStore."""
    return request.app.state.share_store


def get_extraction_service(request: Request) -> ExtractionService:
    """Return the application's ExtractionService, building it on first use.

    The service is created lazily so the share endpoints keep working on a
    deployment without an Anthropic API key.

    Raises:
        LLMAuthError: ANTHROPIC_API_KEY is not configured
    """
    service = getattr(request.app.state, "extraction_service", None)
    if service is not None:
        return service

    settings = get_app_settings(request)
    if not settings.ANTHROPIC_API_KEY:
        raise LLMAuthError("Extraction is not configured: ANTHROPIC_API_KEY is not set")

    service = ExtractionService(
        AnthropicProvider(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.EXTRACTION_MODEL,
            max_tokens=settings.EXTRACTION_MAX_TOKENS,
            timeout=settings.EXTRACTION_TIMEOUT_SECONDS,
        )
    )
    request.app.state.extraction_service = service
    return service
