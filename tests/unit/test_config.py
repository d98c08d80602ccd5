"""
Unit tests for configuration and logging setup.
"""

import logging

import json_log_formatter
import pytest
from pydantic import ValidationError

from docschema.config import Settings, get_settings, reset_settings, setup_logging


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DOCSCHEMA_LOG_LEVEL", raising=False)
        monkeypatch.delenv("DOCSCHEMA_LOG_FORMAT", raising=False)
        monkeypatch.delenv("DOCSCHEMA_SUPPORTED_FORMATS", raising=False)

        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert settings.supported_formats == ["es.5"]
        assert settings.default_blob_type == "application/octet-stream"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCSCHEMA_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DOCSCHEMA_LOG_FORMAT", "JSON")
        monkeypatch.setenv("DOCSCHEMA_SUPPORTED_FORMATS", '["es.5", "es.6"]')

        settings = Settings()

        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"
        assert settings.supported_formats == ["es.5", "es.6"]

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            Settings(log_format="xml")

    def test_empty_formats_rejected(self):
        with pytest.raises(ValidationError):
            Settings(supported_formats=[])

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reset_settings(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("DOCSCHEMA_DEFAULT_BLOB_TYPE", "image/png")
        reset_settings()

        second = get_settings()

        assert second is not first
        assert second.default_blob_type == "image/png"


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_text_format(self):
        setup_logging(Settings(log_level="WARNING", log_format="text"))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)

    def test_json_format(self):
        setup_logging(Settings(log_level="DEBUG", log_format="json"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(Settings(log_level="LOUD"))

        assert logging.getLogger().level == logging.INFO
