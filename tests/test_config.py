"""
stagewrap — Configuration Tests
=================================

What we test:
    ✅ Defaults
    ✅ STAGEWRAP_* environment variables are read
    ✅ log_level validation
    ✅ setup_logging is idempotent
"""

import logging

import pytest
from pydantic import ValidationError

from stagewrap.config import LOGGER_NAME, Settings, setup_logging


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STAGEWRAP_LOG_LEVEL", raising=False)
        s = Settings(_env_file=None)
        assert s.log_level == "WARNING"
        assert s.strict_environ_keys is True
        assert s.warn_on_discarded_response is True

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("STAGEWRAP_LOG_LEVEL", "debug")
        monkeypatch.setenv("STAGEWRAP_STRICT_ENVIRON_KEYS", "false")
        s = Settings(_env_file=None)
        assert s.log_level == "DEBUG"
        assert s.strict_environ_keys is False

    def test_reads_discard_warning_switch(self, monkeypatch):
        monkeypatch.setenv("STAGEWRAP_WARN_ON_DISCARDED_RESPONSE", "0")
        assert Settings(_env_file=None).warn_on_discarded_response is False

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="Invalid log_level"):
            Settings(_env_file=None, log_level="LOUD")


class TestSetupLogging:

    def teardown_method(self):
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            if getattr(handler, "_stagewrap_handler", False):
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_attaches_single_handler(self):
        logger = setup_logging("INFO")
        setup_logging("INFO")
        ours = [h for h in logger.handlers if getattr(h, "_stagewrap_handler", False)]
        assert len(ours) == 1
        assert logger.level == logging.INFO

    def test_uses_settings_level_by_default(self, restore_settings):
        restore_settings.log_level = "ERROR"
        assert setup_logging().level == logging.ERROR
