"""Tests for logger module."""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

from chatwarden.util import logger as logger_module
from chatwarden.util.logger import (
    DATE_FORMAT,
    LOG_FORMAT,
    NOISY_LOGGERS,
    ColorFormatter,
    PromptToolkitHandler,
    get_logger,
    handle_exception,
    should_use_color,
)


def _record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
        func="test_func",
    )


class TestShouldUseColor:
    """Tests for should_use_color function."""

    @patch("sys.stderr.isatty")
    def test_should_use_color_tty(self, mock_isatty):
        mock_isatty.return_value = True
        assert should_use_color() is True

    @patch("sys.stderr.isatty")
    def test_should_use_color_no_tty(self, mock_isatty):
        mock_isatty.return_value = False
        assert should_use_color() is False

    @patch("sys.stderr.isatty")
    def test_should_use_color_exception(self, mock_isatty):
        mock_isatty.side_effect = Exception("Error")
        assert should_use_color() is False


class TestColorFormatter:
    """Tests for ColorFormatter class."""

    def test_error_is_wrapped_in_red(self):
        formatted = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT).format(_record(logging.ERROR, "Error message"))

        assert formatted.startswith("\033[31m")
        assert formatted.endswith("\033[0m")
        assert "Error message" in formatted

    def test_unknown_level_is_not_coloured(self):
        record = _record(logging.INFO, "plain")
        record.levelname = "CUSTOM"

        formatted = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT).format(record)

        assert "\033[" not in formatted


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_configures_handlers_once(self):
        logger1 = get_logger("chatwarden_test_unique_1")
        logger2 = get_logger("chatwarden_test_unique_1")

        assert logger1 is logger2
        assert logger1.level == logging.DEBUG
        assert logger1.propagate is False
        assert len(logger1.handlers) == 2
        assert any(isinstance(h, PromptToolkitHandler) for h in logger1.handlers)
        assert any(isinstance(h, RotatingFileHandler) for h in logger1.handlers)

    def test_all_loggers_share_session_file(self):
        first = get_logger("chatwarden_test_unique_2")
        second = get_logger("chatwarden_test_unique_3")

        def file_of(lg):
            return next(h.baseFilename for h in lg.handlers if isinstance(h, RotatingFileHandler))

        assert file_of(first) == file_of(second)
        assert logger_module.LOG_FILEPATH is not None

    def test_logger_with_exception(self):
        logger = get_logger("chatwarden_test_unique_4")

        try:
            raise ValueError("Test exception")
        except ValueError:
            logger.exception("Exception occurred")


def test_noisy_loggers_are_silenced() -> None:
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.ERROR


def test_handle_exception_logs_errors() -> None:
    with patch("chatwarden.util.logger.logging.error") as mock_error:
        handle_exception(ValueError, ValueError("boom"), None)

    mock_error.assert_called_once()


def test_handle_exception_passes_keyboard_interrupt_through() -> None:
    with patch("chatwarden.util.logger.sys.__excepthook__") as mock_hook:
        handle_exception(KeyboardInterrupt, KeyboardInterrupt(), None)

    mock_hook.assert_called_once()
