# src/sitesmith/logs.py
"""The `sitesmith` logger: a TRACE level, emoji tags, stdout/stderr split."""

import logging
import sys
from typing import Any, TextIO, cast

from .meta import PROGRAM_PACKAGE
from .runtime import current_runtime
from .utils import safe_log

TRACE_LEVEL = logging.DEBUG - 5

# name → numeric level, in increasing severity; "silent" disables output
LEVELS: dict[str, int] = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "silent": logging.CRITICAL + 1,
}
LEVEL_ORDER = list(LEVELS)

RESET = "\033[0m"

# levelname → (ANSI colour, tag text); info lines are untagged
TAG_STYLES: dict[str, tuple[str, str]] = {
    "TRACE": ("\033[90m", "[TRACE]"),
    "DEBUG": ("\033[36m", "[DEBUG]"),
    "WARNING": ("", "⚠️ "),
    "ERROR": ("", "❌ "),
    "CRITICAL": ("", "💥 "),
}


class LoggerWithTrace(logging.Logger):
    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)


logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.setLoggerClass(LoggerWithTrace)


class TagFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        color, tag = TAG_STYLES.get(record.levelname, ("", ""))
        if not tag:
            return msg
        if color and current_runtime.get("use_color", True):
            tag = f"{color}{tag}{RESET}"
        return f"{tag} {msg}"


class DualStreamHandler(logging.StreamHandler[TextIO]):
    """Send info/debug/trace to stdout, everything else to stderr."""

    def __init__(self) -> None:
        super().__init__(stream=sys.stdout)

    def emit(self, record: logging.LogRecord) -> None:
        # resolved per record so pytest's capsys/capfd swaps are honoured
        self.stream = sys.stderr if record.levelno >= logging.WARNING else sys.stdout
        super().emit(record)


_logger = cast("LoggerWithTrace", logging.getLogger(PROGRAM_PACKAGE))
_logger.propagate = False


def _sync_level() -> None:
    if not _logger.handlers:
        handler = DualStreamHandler()
        handler.setFormatter(TagFormatter("%(message)s"))
        _logger.addHandler(handler)

    name = current_runtime.get("log_level")
    if name is None:  # pyright: ignore[reportUnnecessaryComparison]
        safe_log("[LOGGER ERROR] ❌ Runtime does not specify log_level")
        name = "error"
    _logger.setLevel(LEVELS.get(str(name).lower(), logging.INFO))


def get_logger() -> LoggerWithTrace:
    """Return the package logger at the level currently in the runtime."""
    _sync_level()
    return _logger


def set_log_level(level: str) -> None:
    """Set the logging level for the whole process."""
    current_runtime["log_level"] = level
    _sync_level()
