"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for local development. Only
    ANTHROPIC_API_KEY must be set before documents can be extracted.

    Environment Variables:
        DATABASE_URL: Share store database (SQLite file by default)
        ANTHROPIC_API_KEY: Anthropic API key for Claude
        EXTRACTION_MODEL: Claude model used for extraction
        EXTRACTION_MAX_TOKENS: Output token cap for one extraction
        EXTRACTION_TIMEOUT_SECONDS: Upper bound on one extraction call
        MAX_UPLOAD_SIZE_BYTES: Largest accepted document
        PUBLIC_BASE_URL: Base used to build share links (falls back to Host header)
        SHARE_SWEEP_INTERVAL_SECONDS: Period of the expired-share sweep task
        SHARE_MAX_TTL_SECONDS: Longest lifetime a share link may be given
        CELERY_BROKER_URL: Celery broker for the sweep task
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default true)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Share store
    DATABASE_URL: str = "sqlite:///./exam-shares.db"
    SHARE_SWEEP_INTERVAL_SECONDS: int = 300
    SHARE_MAX_TTL_SECONDS: int = 365 * 24 * 60 * 60  # 1 year

    # Extraction engine
    ANTHROPIC_API_KEY: Optional[str] = None
    EXTRACTION_MODEL: str = "claude-opus-4-6"
    EXTRACTION_MAX_TOKENS: int = 4096
    EXTRACTION_TIMEOUT_SECONDS: float = 60.0

    # Uploads
    MAX_UPLOAD_SIZE_BYTES: int = 20 * 1024 * 1024  # 20 MB

    # Share links
    PUBLIC_BASE_URL: Optional[str] = None

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Application
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
