"""
Console + append-only file logging for the batch client.

Every line looks like:

    2026-01-31 12:00:00 [INFO] Health check attempt 1/10

A SUCCESS level (between INFO and WARNING) marks completed phases.
Console output is colorized only when attached to a terminal. Logging is
best-effort: a log file that cannot be opened or written never aborts a run.
"""

from __future__ import annotations

import logging
import sys

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LINE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_NAMES = {
    logging.WARNING: "WARN",
    logging.CRITICAL: "ERROR",
}

_COLORS = {
    "INFO": "\033[0;34m",
    "WARN": "\033[1;33m",
    "ERROR": "\033[0;31m",
    "SUCCESS": "\033[0;32m",
}
_RESET = "\033[0m"


class LevelFormatter(logging.Formatter):
    """Formats records as '<timestamp> [<LEVEL>] <message>'."""

    def __init__(self, color: bool = False) -> None:
        super().__init__(fmt=LINE_FORMAT, datefmt=DATE_FORMAT)
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        name = _LEVEL_NAMES.get(record.levelno, record.levelname)
        if self._color and name in _COLORS:
            name = f"{_COLORS[name]}{name}{_RESET}"
        original = record.levelname
        record.levelname = name
        try:
            return super().format(record)
        finally:
            record.levelname = original


class _QuietHandlerMixin:
    """Drop write errors instead of printing a traceback to stderr."""

    def handleError(self, record: logging.LogRecord) -> None:  # noqa: N802
        return None


class ConsoleHandler(_QuietHandlerMixin, logging.StreamHandler):
    pass


class AppendFileHandler(_QuietHandlerMixin, logging.FileHandler):
    """Append-mode file handler, opened lazily on the first record."""

    def __init__(self, filename: str) -> None:
        super().__init__(filename, mode="a", encoding="utf-8", delay=True)

    def emit(self, record: logging.LogRecord) -> None:
        # FileHandler opens the stream outside StreamHandler's error guard.
        try:
            super().emit(record)
        except OSError:
            self.handleError(record)


def setup_logging(
    log_file: str | None = "runpod_script.log",
    level: str = "INFO",
    stream=None,
) -> logging.Logger:
    """Configure the root logger with console and file handlers.

    Replaces any handlers installed by a previous call so repeated runs in
    one process do not duplicate lines.
    """
    stream = stream if stream is not None else sys.stderr
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, (ConsoleHandler, AppendFileHandler)):
            root.removeHandler(handler)
            handler.close()

    resolved = logging.getLevelName(level.upper())
    # getLevelName returns "Level X" for unknown names.
    root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    console = ConsoleHandler(stream)
    is_tty = getattr(stream, "isatty", None)
    console.setFormatter(LevelFormatter(color=bool(is_tty and is_tty())))
    root.addHandler(console)

    if log_file:
        file_handler = AppendFileHandler(log_file)
        file_handler.setFormatter(LevelFormatter(color=False))
        root.addHandler(file_handler)

    # httpx logs every request at INFO; keep the batch log readable.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return root


def success(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log at the SUCCESS level."""
    logger.log(SUCCESS, msg, *args)
