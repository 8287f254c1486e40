"""Tests for settings and logging configuration."""
import logging

import pytest

from limb_salvage.core.config import Settings
from limb_salvage.core.logging import configure_logging


class TestSettings:
    def test_defaults(self):
        """Settings work with no environment or .env file."""
        settings = Settings()
        assert settings.API_PREFIX == "/api/v1"
        assert settings.LOG_LEVEL == "INFO"
        assert settings.LOG_FILE is None
        assert settings.AUDIT_PATH_PREFIXES == ["/api/v1/limb-salvage"]

    def test_environment_override(self, monkeypatch):
        """Environment variables override defaults, lists as JSON."""
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", '["https://clinic.example.org"]')
        settings = Settings()
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.CORS_ALLOW_ORIGINS == ["https://clinic.example.org"]


class TestConfigureLogging:
    def setup_method(self):
        root = logging.getLogger()
        self.saved_level = root.level
        self.saved_handlers = list(root.handlers)

    def teardown_method(self):
        root = logging.getLogger()
        for handler in root.handlers:
            if handler not in self.saved_handlers:
                handler.close()
        root.handlers[:] = self.saved_handlers
        root.setLevel(self.saved_level)

    def test_console_handler(self):
        """Without a file only the console handler is installed."""
        configure_logging("debug")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_file_handler(self, tmp_path):
        """Records reach the configured log file."""
        log_file = tmp_path / "limb_salvage.log"
        configure_logging("INFO", str(log_file))
        logging.getLogger("limb_salvage.test").info("evaluation complete")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "evaluation complete" in log_file.read_text()

    def test_unknown_level(self):
        """Level names outside the logging module are refused."""
        with pytest.raises(ValueError):
            configure_logging("LOUD")
