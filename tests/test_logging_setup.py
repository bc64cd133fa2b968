# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from memtask.logging_setup import _ConsoleNoiseFilter, level_from_name, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("memtask.tasks.task_manager", logging.INFO, True),
        ("memtask.core.cache", logging.DEBUG, False),
        ("memtask.core.cache", logging.WARNING, True),
        ("memtask.storage.json_store", logging.INFO, False),
        ("py.warnings", logging.WARNING, False),
        ("asyncio", logging.ERROR, True),
        ("asyncio", logging.INFO, False),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_level_from_name() -> None:
    assert level_from_name("debug") == logging.DEBUG
    assert level_from_name("WARNING") == logging.WARNING
    assert level_from_name("nonsense") == logging.INFO


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.ERROR)
        logging.getLogger("memtask.test").info("hello file")
        for h in root.handlers:
            h.flush()
        assert log_file == tmp_path / "logs" / "memtask.log"
        assert "hello file" in log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
