# src/memtask/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

LOG_FILE_NAME = "memtask.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that emit one line per cache access or file write.
CHATTY_PREFIXES: tuple[str, ...] = ("memtask.core.cache", "memtask.storage.")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console-only filter; the file handler still gets everything.

    memtask records pass, except the chatty cache/storage loggers which need
    WARNING+. Captured `warnings.warn` records and third-party loggers need ERROR+.
    """

    def __init__(self, quiet_prefixes: Iterable[str] = CHATTY_PREFIXES) -> None:
        super().__init__()
        self._quiet = tuple(quiet_prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith("memtask."):
            return record.levelno >= logging.ERROR
        if record.name.startswith(self._quiet):
            return record.levelno >= logging.WARNING
        return True


def level_from_name(name: str, default: int = logging.INFO) -> int:
    """'DEBUG' / 'warning' / ... -> logging level; unknown names fall back to `default`."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path = "mcp_data",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    quiet_prefixes: Iterable[str] = CHATTY_PREFIXES,
) -> Path:
    """
    Route all logging to stderr (filtered) and to `<log_dir>/memtask.log` (unfiltered).

    stdout is left to the console connector, so tool reports and log lines
    never interleave on the same stream. Call once at startup; calling again
    replaces the handlers instead of duplicating them. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter(quiet_prefixes))
    root.addHandler(console)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    logging.getLogger(__name__).debug("Logging ready file=%s console_level=%s", log_file, console_level)
    return log_file
