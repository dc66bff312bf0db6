"""Unit tests for logging configuration."""

import logging

import pytest
import structlog

from mail2ledger.core.logging import (
    QUIET_LOGGERS,
    bind_context,
    clear_context,
    configure_logging,
)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_quiets_library_loggers(self):
        configure_logging("INFO", json_output=True)

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_error_level_is_not_lowered(self):
        configure_logging("error", json_output=False)

        assert logging.getLogger("httpx").level == logging.ERROR

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD")


class TestContext:
    """Tests for per-message context binding."""

    def teardown_method(self):
        clear_context()

    def test_bind_and_clear(self):
        bind_context(message_id="18c2f")
        assert structlog.contextvars.get_contextvars() == {"message_id": "18c2f"}

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
