"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import (
    DEFAULT_ACCEPT_LANGUAGE,
    DEFAULT_GENERATION_TEMPERATURE,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_PORT,
    DEFAULT_RESPONSE_LANGUAGE,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # .env.local is loaded last so local overrides win
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI Configuration
    # Optional at load time; the generation client rejects a missing key on first use.
    openai_api_key: str | None = Field(
        default=None, description="OpenAI API key for the analysis model"
    )
    openai_model: str = Field(
        default=DEFAULT_OPENAI_MODEL,
        description="Chat model used to analyze profile metadata",
    )
    generation_temperature: float = Field(
        default=DEFAULT_GENERATION_TEMPERATURE,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for the analysis model",
    )
    response_language: str = Field(
        default=DEFAULT_RESPONSE_LANGUAGE,
        description="Language the analysis model must answer in",
    )

    # Server
    port: int = Field(default=DEFAULT_PORT, description="HTTP listen port")

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    # ==========================================================================
    # Scraper Configuration
    # ==========================================================================

    scraper_timeout_seconds: float = Field(
        default=DEFAULT_HTTP_TIMEOUT_SECONDS,
        gt=0.0,
        description="HTTP timeout for the profile page fetch (seconds)",
    )
    scraper_accept_language: str = Field(
        default=DEFAULT_ACCEPT_LANGUAGE,
        description="Accept-Language header sent with the profile page fetch",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
