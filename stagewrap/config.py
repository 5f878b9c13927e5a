"""
stagewrap — Library Configuration
===================================

What:  Centralized configuration using Pydantic Settings, plus the opt-in
       logging setup for the ``stagewrap`` logger namespace.
How:   Pydantic Settings reads ``STAGEWRAP_*`` environment variables (or a
       .env file), validates them, and exposes a singleton ``settings`` object.
Who:   Read by the contract validators, the default invoke and setup_logging.
When:  Loaded once at import time. Fields are read at call time, so tests
       and hosts may adjust ``settings`` after import.

Environment variables:
    STAGEWRAP_LOG_LEVEL                   level used by setup_logging()
    STAGEWRAP_STRICT_ENVIRON_KEYS         reject non-str environment keys
    STAGEWRAP_WARN_ON_DISCARDED_RESPONSE  warn when invoke overwrites a response
"""

import logging
import sys
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

LOGGER_NAME = "stagewrap"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseSettings):
    """
    Library settings loaded from environment variables.

    All settings have defaults; nothing is required to use the library.
    """

    # ── Logging ───────────────────────────────────────────────────────────
    # What: Level applied to the "stagewrap" logger by setup_logging()
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    # Default WARNING: only discarded-response warnings are emitted; DEBUG
    #   adds one line per construction, wrap and short-circuit
    # Note: no effect until the host calls setup_logging(); until then the
    #   library logs through a NullHandler
    log_level: str = Field(default="WARNING")

    # ── Contracts ─────────────────────────────────────────────────────────
    # What: Require str keys in every environment (CGI/WSGI style names)
    # Where: validate_environment(), so call entry, set_environ and
    #   set_environ_value all follow it
    # Trade-off: False admits arbitrary hashable keys, but inner layers that
    #   expect header-style names may then see keys they cannot handle
    strict_environ_keys: bool = Field(default=True)

    # What: Warn when the default invoke overwrites a response that a
    #   preinvoke set with set_response() instead of short_circuit()
    # Trade-off: False silences the warning; the application still runs and
    #   its response still replaces the early one
    warn_on_discarded_response: bool = Field(default=True)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_prefix": "STAGEWRAP_",  # STAGEWRAP_LOG_LEVEL → log_level
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper


# Singleton instance, read at call time by the rest of the package
settings = Settings()


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stdout handler to the ``stagewrap`` logger.

    What:    Opt-in console logging for hosts that do not configure logging
             themselves.
    How:     Adds a single StreamHandler (idempotent across calls) and sets
             the level from ``level`` or ``settings.log_level``.

    Returns:
        The configured ``stagewrap`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    resolved = (level or settings.log_level).upper()
    logger.setLevel(getattr(logging, resolved, logging.WARNING))

    for handler in logger.handlers:
        if getattr(handler, "_stagewrap_handler", False):
            return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    handler._stagewrap_handler = True
    logger.addHandler(handler)
    return logger
