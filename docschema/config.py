"""
Configuration for docschema.

Settings are read from environment variables prefixed with DOCSCHEMA_.
Everything has a default that works for local development and tests.

Invariants:
    - get_settings() returns the same instance until reset_settings()
    - supported_formats always contains at least one format

How to change safely:
    - Add new settings with defaults that keep existing behavior
    - Document new settings in the field description
"""

from __future__ import annotations

import logging
import threading

import json_log_formatter
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .store.base import DEFAULT_FORMAT

logger = logging.getLogger(__name__)

_settings: Settings | None = None
_settings_lock = threading.Lock()


class Settings(BaseSettings):
    """docschema configuration."""

    # Logging
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")
    log_format: str = Field(default="text", description="Log format: 'json' or 'text'")

    # Documents
    supported_formats: list[str] = Field(
        default=[DEFAULT_FORMAT],
        description="Document formats live views accept; others stop the view",
    )
    default_blob_type: str = Field(
        default="application/octet-stream",
        description="Content type written for blobs that don't carry one",
    )

    model_config = {"env_prefix": "DOCSCHEMA_"}

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError(f"Invalid log_format '{value}'. Must be one of: json, text")
        return value

    @field_validator("supported_formats")
    @classmethod
    def _check_formats(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("supported_formats must not be empty")
        return value


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    with _settings_lock:
        if _settings is None:
            _settings = Settings()
        return _settings


def reset_settings() -> None:
    """Forget cached settings so the next get_settings() reloads them."""
    global _settings
    with _settings_lock:
        _settings = None


def setup_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings.

    Args:
        settings: Settings to use (loaded from env if not provided)
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    logger.debug(
        "Logging configured",
        extra={"log_level": settings.log_level, "log_format": settings.log_format},
    )
