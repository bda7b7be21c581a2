"""Tests for logging setup."""

import io
import logging

import pytest

from model_advisor.logging_config import (
    ANSI_RESET,
    QUIET_LOGGERS,
    ColorFormatter,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    quiet_levels = {name: logging.getLogger(name).level for name in QUIET_LOGGERS}
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    for name, quiet_level in quiet_levels.items():
        logging.getLogger(name).setLevel(quiet_level)


def _record(level=logging.WARNING, msg="disk almost full"):
    return logging.LogRecord("model_advisor.test", level, __file__, 10, msg, None, None)


class TestColorFormatter:
    """Tests for ColorFormatter."""

    def test_level_name_is_colored(self):
        formatter = ColorFormatter("%(levelname)s %(message)s")

        output = formatter.format(_record())

        assert output == f"\033[33mWARNING{ANSI_RESET} disk almost full"

    def test_record_is_not_mutated(self):
        record = _record(logging.ERROR)

        ColorFormatter("%(levelname)s").format(record)

        assert record.levelname == "ERROR"

    def test_custom_level_is_left_plain(self):
        record = _record(level=25)

        output = ColorFormatter("%(levelname)s").format(record)

        assert ANSI_RESET not in output


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_replaces_root_handlers(self, restore_root_logger):
        stream = io.StringIO()
        logging.getLogger().addHandler(logging.NullHandler())

        setup_logging("debug", stream=stream)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG

        logging.getLogger("model_advisor.test").info("catalog loaded")
        assert "catalog loaded" in stream.getvalue()

    def test_level_defaults_to_settings(self, restore_root_logger, monkeypatch):
        from model_advisor.config import settings

        monkeypatch.setattr(settings, "LOG_LEVEL", "warning")

        setup_logging(stream=io.StringIO())

        assert logging.getLogger().level == logging.WARNING

    def test_quiets_third_party_loggers(self, restore_root_logger):
        setup_logging("debug", stream=io.StringIO())

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
