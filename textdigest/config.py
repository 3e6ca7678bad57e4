"""
Configuration for the textdigest service.

Provides environment-based configuration with Pydantic settings. Values are
read once at startup and handed to the components that need them.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CompletionSettings(BaseSettings):
    """Chat-completion provider settings.

    Reads flat variables (OPENAI_API_KEY, ...) on its own and accepts the
    nested COMPLETION__* form when built by AppSettings.
    """

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("OPENAI_API_KEY", "COMPLETION__API_KEY"),
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "COMPLETION__BASE_URL"),
    )
    model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("OPENAI_MODEL", "COMPLETION__MODEL"),
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias=AliasChoices(
            "OPENAI_TIMEOUT_SECONDS", "COMPLETION__TIMEOUT_SECONDS"
        ),
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        validation_alias=AliasChoices("OPENAI_MAX_RETRIES", "COMPLETION__MAX_RETRIES"),
        description="Additional attempts after the first one for retriable failures",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        validation_alias=AliasChoices(
            "OPENAI_RETRY_DELAY_SECONDS", "COMPLETION__RETRY_DELAY_SECONDS"
        ),
    )
    retry_jitter_seconds: float = Field(
        default=0.5,
        ge=0,
        validation_alias=AliasChoices(
            "OPENAI_RETRY_JITTER_SECONDS", "COMPLETION__RETRY_JITTER_SECONDS"
        ),
    )
    retry_max_delay_seconds: float = Field(
        default=10.0,
        ge=0,
        validation_alias=AliasChoices(
            "OPENAI_RETRY_MAX_DELAY_SECONDS", "COMPLETION__RETRY_MAX_DELAY_SECONDS"
        ),
        description="Upper bound for a server-supplied Retry-After delay",
    )
    user_agent: str = Field(
        default="textdigest/1.0",
        validation_alias=AliasChoices("OPENAI_USER_AGENT", "COMPLETION__USER_AGENT"),
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def is_configured(self) -> bool:
        """Check if an API key has been supplied."""
        return bool(self.api_key.get_secret_value())

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class AppSettings(BaseSettings):
    """Top-level settings for the textdigest service."""

    # Service identification
    service_name: str = Field(
        default="textdigest",
        validation_alias=AliasChoices("SERVICE_NAME"),
    )
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "ENV"),
    )
    version: str = Field(
        default="1.0.0",
        validation_alias=AliasChoices("SERVICE_VERSION"),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL"),
    )
    log_format: str = Field(
        default="json",
        validation_alias=AliasChoices("LOG_FORMAT"),
        description="Log format: 'json' or 'text'",
    )

    completion: CompletionSettings = Field(default_factory=CompletionSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> AppSettings:
    """Get cached settings instance."""
    return AppSettings()


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """Configure logging based on settings.

    Args:
        settings: Optional settings instance, uses cached settings if not provided
    """
    import logging
    import sys

    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if settings.log_format == "json":
        import json

        # Attributes every LogRecord carries; anything else came in via extra=
        reserved = set(
            logging.LogRecord("", 0, "", 0, "", None, None).__dict__
        ) | {"message", "asctime"}

        class JSONFormatter(logging.Formatter):
            def format(self, record):
                log_record = {
                    "timestamp": self.formatTime(record),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                    "service": settings.service_name,
                }
                if record.exc_info:
                    log_record["exception"] = self.formatException(record.exc_info)
                for key, value in record.__dict__.items():
                    if key not in reserved and key not in log_record:
                        log_record[key] = value
                return json.dumps(log_record, default=str)

        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)

    root_logger.addHandler(handler)

    # Third-party loggers are noisy at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
