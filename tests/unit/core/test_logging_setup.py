"""Tests for logging setup helpers."""

from __future__ import annotations

import logging
from logging.handlers import QueueHandler
from pathlib import Path

import pytest
from rich.logging import RichHandler

from playrate.core.logger import (
    CompactFormatter,
    LogFormat,
    get_full_log_path,
    get_log_levels_from_config,
    get_loggers,
    mask_key,
    set_console_level,
)
from tests.factories import create_test_app_config


@pytest.mark.unit
class TestLoggingHelpers:
    """Tests for small logging helpers."""

    @pytest.mark.parametrize(("key", "expected"), [("abcdefghij", "abcde..."), ("abc", "abc..."), (None, "<none>")])
    def test_mask_key(self, key: str | None, expected: str) -> None:
        """Only the first five characters of a key are shown."""
        assert mask_key(key) == expected

    def test_log_format_markup(self) -> None:
        """Markup helpers wrap text in Rich tags."""
        assert LogFormat.number(5) == "[bright_white]5[/bright_white]"
        assert LogFormat.entity("x") == "[yellow]x[/yellow]"

    def test_compact_formatter_abbreviates_level(self) -> None:
        """Level names shrink to one letter without leaking into the record."""
        record = logging.LogRecord("n", logging.WARNING, __file__, 1, "hello", None, None)

        text = CompactFormatter("%(levelname)s %(message)s").format(record)

        assert text == "W hello"
        assert record.levelname == "WARNING"

    def test_log_levels_from_config(self) -> None:
        """Configured level names become logging constants."""
        config = create_test_app_config(logging={"levels": {"console": "WARNING", "main_file": "ERROR"}})

        assert get_log_levels_from_config(config) == {"console": logging.WARNING, "main_file": logging.ERROR}

    def test_full_log_path_creates_directories(self, tmp_path: Path) -> None:
        """The log file's directory is created under the base directory."""
        config = create_test_app_config(logging={"logs_base_dir": str(tmp_path / "logs"), "main_log_file": "main/x.log"})

        path = get_full_log_path(config, "main_log_file", "main/main.log")

        assert path == str(tmp_path / "logs" / "main" / "x.log")
        assert (tmp_path / "logs" / "main").is_dir()


@pytest.mark.unit
class TestGetLoggers:
    """Tests for get_loggers."""

    def test_console_only(self) -> None:
        """With file logging disabled there is no listener."""
        console, error, listener = get_loggers(create_test_app_config())

        assert console.name == "console_logger"
        assert error is console
        assert listener is None

    def test_file_logging_starts_listener(self, tmp_path: Path) -> None:
        """With file logging enabled errors go through a queue listener to the main log."""
        config = create_test_app_config(logging={"logs_base_dir": str(tmp_path), "file_logging": True})

        _console, error, listener = get_loggers(config)
        try:
            assert error.name == "error_logger"
            assert listener is not None
        finally:
            if listener is not None:
                listener.stop()
        assert (tmp_path / "main" / "main.log").exists()

    def test_repeated_setup_keeps_one_queue_handler(self, tmp_path: Path) -> None:
        """Setting up logging twice does not write every line to the file twice."""
        config = create_test_app_config(logging={"logs_base_dir": str(tmp_path), "file_logging": True})

        console, error, first = get_loggers(config)
        _console, _error, second = get_loggers(config)
        try:
            for logger in (console, error):
                assert sum(isinstance(h, QueueHandler) for h in logger.handlers) == 1
                assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1
        finally:
            for listener in (first, second):
                if listener is not None:
                    listener.stop()


@pytest.mark.unit
class TestSetConsoleLevel:
    """Tests for set_console_level."""

    def test_verbose_reaches_rich_handler(self) -> None:
        """Lowering to DEBUG adjusts the Rich handler, not only the logger."""
        console, _error, _listener = get_loggers(create_test_app_config())
        rich_handlers = [h for h in console.handlers if isinstance(h, RichHandler)]
        assert rich_handlers

        try:
            set_console_level(console, logging.DEBUG)

            assert console.level == logging.DEBUG
            assert all(h.level == logging.DEBUG for h in rich_handlers)
        finally:
            set_console_level(console, logging.INFO)
            console.setLevel(logging.INFO)

    def test_other_handlers_keep_their_level(self) -> None:
        """Non-Rich handlers are left alone."""
        logger = logging.getLogger("test.set_console_level")
        stream = logging.StreamHandler()
        stream.setLevel(logging.WARNING)
        logger.addHandler(stream)
        try:
            set_console_level(logger, logging.DEBUG)

            assert stream.level == logging.WARNING
            assert logger.level == logging.DEBUG
        finally:
            logger.removeHandler(stream)
