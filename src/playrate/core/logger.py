"""Logging setup for playrate.

Two loggers are handed to every service:

1.  ``console_logger``: progress for the user, rendered by ``RichHandler`` on the
    shared ``Console`` (the same one used for spinners and result tables).
2.  ``error_logger``: diagnostics, written to the main log file through a
    ``QueueHandler``/``QueueListener`` pair so file IO stays off the event loop.
    Warnings and above are echoed to the console too.

API keys only ever reach a log line through ``mask_key``.
"""

from __future__ import annotations

import logging
import queue
import sys
import traceback
from contextlib import asynccontextmanager
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from rich.status import Status

    from playrate.core.models.settings import AppConfig

__all__ = [
    "CompactFormatter",
    "LogFormat",
    "SafeQueueListener",
    "get_full_log_path",
    "get_log_levels_from_config",
    "get_loggers",
    "get_shared_console",
    "mask_key",
    "set_console_level",
    "spinner",
]

KEY_VISIBLE_CHARS = 5
CONSOLE_LOGGER_NAME = "console_logger"
ERROR_LOGGER_NAME = "error_logger"
DEFAULT_FILE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(module)s:%(lineno)d - %(message)s"

_console_holder: dict[str, Console] = {}


def get_shared_console() -> Console:
    """Return the process-wide Rich console used for logs, spinners and tables."""
    if "console" not in _console_holder:
        _console_holder["console"] = Console()
    return _console_holder["console"]


def mask_key(key: str | None) -> str:
    """Mask an API key for logging: first five characters plus an ellipsis."""
    if not key:
        return "<none>"
    return f"{key[:KEY_VISIBLE_CHARS]}..."


class SafeQueueListener(QueueListener):
    """QueueListener whose ``stop()`` may be called more than once."""

    def stop(self) -> None:
        """Stop the worker thread if it is still running."""
        if getattr(self, "_thread", None) is None:
            return
        try:
            super().stop()
        except (AttributeError, RuntimeError, TypeError) as e:
            print(f"Warning: could not stop log listener cleanly: {e}", file=sys.stderr)


class LogFormat:
    """Rich markup for the recurring parts of log messages.

    Example:
        logger.info("Initializing %s...", LogFormat.entity("PlayCountCache"))
    """

    @staticmethod
    def entity(name: str) -> str:
        """Class or service name (yellow)."""
        return f"[yellow]{name}[/yellow]"

    @staticmethod
    def file(name: str) -> str:
        """File name or URL (cyan)."""
        return f"[cyan]{name}[/cyan]"

    @staticmethod
    def number(value: float) -> str:
        """Counts and sizes (bright white)."""
        return f"[bright_white]{value}[/bright_white]"

    @staticmethod
    def duration(seconds: float) -> str:
        """Elapsed time (dim)."""
        return f"[dim]{seconds:.2f}s[/dim]"


@asynccontextmanager
async def spinner(message: str, console: Console | None = None) -> AsyncGenerator[Status]:
    """Show an indeterminate spinner while awaiting a long operation.

    Args:
        message: Text shown next to the spinner
        console: Console to draw on (the shared console by default)

    Yields:
        The Rich status, whose text can be updated

    """
    with (console or get_shared_console()).status(f"[cyan]{message}[/cyan]") as status:
        yield status


class LoggerFilter:
    """Pass only records from the named loggers and their children."""

    def __init__(self, allowed_loggers: list[str]) -> None:
        self.allowed_loggers = set(allowed_loggers)

    def filter(self, record: logging.LogRecord) -> bool:
        """Return True for an allowed logger or one of its children."""
        return any(record.name == name or record.name.startswith(f"{name}.") for name in self.allowed_loggers)


class CompactFormatter(logging.Formatter):
    """File formatter that shortens level names to one letter."""

    def __init__(self, fmt: str | None = None, datefmt: str = "%Y-%m-%d %H:%M:%S") -> None:
        super().__init__(fmt or DEFAULT_FILE_FORMAT, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """Format with ``W``/``E``/... and put the full level name back afterwards."""
        levelname = record.levelname
        record.levelname = levelname[:1]
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def get_full_log_path(
    config: AppConfig | None,
    key: str,
    default: str,
    error_logger: logging.Logger | None = None,
) -> str:
    """Join ``logging.logs_base_dir`` with the relative path stored under ``key``.

    The parent directory of the resulting file is created if missing.
    """
    base_dir = config.logging.logs_base_dir if config is not None else ""
    relative = str(getattr(config.logging, key, "") or default) if config is not None else default

    full_path = Path(base_dir) / relative
    try:
        full_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        if error_logger is None:
            raise
        error_logger.exception("Could not create log directory %s", full_path.parent)
    return str(full_path)


def get_log_levels_from_config(config: AppConfig) -> dict[str, int]:
    """Map the ``logging.levels`` section onto ``logging`` constants."""
    levels = config.logging.levels

    def to_level(name: str | None, fallback: int) -> int:
        level = logging.getLevelName(str(name).upper()) if name else fallback
        return level if isinstance(level, int) else fallback

    return {
        "console": to_level(levels.console, logging.INFO),
        "main_file": to_level(levels.main_file, logging.DEBUG),
    }


def _create_console_logger(level: int) -> logging.Logger:
    console_logger = logging.getLogger(CONSOLE_LOGGER_NAME)
    if not console_logger.handlers:
        handler = RichHandler(
            console=get_shared_console(),
            show_path=False,
            enable_link_path=False,
            log_time_format="%H:%M:%S",
            markup=True,
        )
        handler.setLevel(level)
        console_logger.addHandler(handler)
        console_logger.setLevel(level)
        console_logger.propagate = False
    return console_logger


def _replace_queue_handler(logger: logging.Logger, queue_handler: QueueHandler) -> None:
    """Attach ``queue_handler``, dropping one left over from an earlier setup."""
    for stale in [h for h in logger.handlers if isinstance(h, QueueHandler)]:
        logger.removeHandler(stale)
    logger.addHandler(queue_handler)


def _setup_queue_logging(config: AppConfig, levels: dict[str, int]) -> tuple[logging.Logger, SafeQueueListener]:
    """Send both loggers through one queue to the main log file."""
    main_log = get_full_log_path(config, "main_log_file", "main/main.log")

    file_handler = logging.FileHandler(main_log, encoding="utf-8")
    file_handler.setFormatter(CompactFormatter())
    file_handler.setLevel(levels["main_file"])
    file_handler.addFilter(LoggerFilter([ERROR_LOGGER_NAME, CONSOLE_LOGGER_NAME, "playrate"]))

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    listener = SafeQueueListener(log_queue, file_handler, respect_handler_level=True)
    listener.start()
    queue_handler = QueueHandler(log_queue)

    error_logger = logging.getLogger(ERROR_LOGGER_NAME)
    _replace_queue_handler(error_logger, queue_handler)
    if not any(isinstance(h, RichHandler) for h in error_logger.handlers):
        echo = RichHandler(console=get_shared_console(), show_path=False, markup=True, log_time_format="%H:%M:%S")
        echo.setLevel(logging.WARNING)
        error_logger.addHandler(echo)
    error_logger.setLevel(levels["main_file"])
    error_logger.propagate = False

    console_logger = logging.getLogger(CONSOLE_LOGGER_NAME)
    _replace_queue_handler(console_logger, queue_handler)
    console_logger.setLevel(min(levels["console"], levels["main_file"]))

    return error_logger, listener


def set_console_level(console_logger: logging.Logger, level: int) -> None:
    """Change what reaches the terminal, e.g. DEBUG for ``--verbose``.

    Both the logger and its Rich handlers are adjusted; file handlers keep
    their own level.
    """
    console_logger.setLevel(min(level, console_logger.level or level))
    for handler in console_logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)


def get_loggers(config: AppConfig) -> tuple[logging.Logger, logging.Logger, SafeQueueListener | None]:
    """Create the console and error loggers.

    Never raises: if handler setup fails, plain stream loggers are returned
    instead and there is no listener.

    Returns:
        Tuple of (console_logger, error_logger, listener)

    """
    try:
        levels = get_log_levels_from_config(config)
        console_logger = _create_console_logger(levels["console"])
        if not config.logging.file_logging:
            return console_logger, console_logger, None
        error_logger, listener = _setup_queue_logging(config, levels)
    except (OSError, ValueError, AttributeError, TypeError) as e:
        return _create_fallback_loggers(e)

    console_logger.debug("Logging ready; main log at %s", LogFormat.file(listener.handlers[0].baseFilename))  # type: ignore[attr-defined]
    return console_logger, error_logger, listener


def _create_fallback_loggers(e: Exception) -> tuple[logging.Logger, logging.Logger, None]:
    print(f"FATAL ERROR: logging setup failed, falling back to basic logging: {e}", file=sys.stderr)
    traceback.print_exc(file=sys.stderr)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    console_fallback = logging.getLogger("console_fallback")
    error_fallback = logging.getLogger("error_fallback")
    if not console_fallback.handlers:
        console_fallback.addHandler(logging.StreamHandler(sys.stdout))
    if not error_fallback.handlers:
        error_fallback.addHandler(logging.StreamHandler(sys.stderr))
    return console_fallback, error_fallback, None
