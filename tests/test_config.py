# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from memtask.config import Settings, parse_data_dir_arg
from memtask.core.cache import CacheConfig

_VARS = [
    f"{prefix}_{name}"
    for prefix in ("MEMTASK", "MCP")
    for name in (
        "DATA_DIR",
        "LOG_LEVEL",
        "APP_NAME",
        "CACHE_MEMORY_MAX_SIZE",
        "CACHE_MEMORY_TTL",
        "CACHE_TASK_MAX_SIZE",
        "CACHE_TASK_TTL",
        "CACHE_CONTEXT_MAX_SIZE",
        "CACHE_CONTEXT_TTL",
    )
]


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in _VARS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(tmp_path: Path) -> None:
    s = Settings.from_env()
    assert s.data_dir == tmp_path / "mcp_data"
    assert s.tasks_path == tmp_path / "mcp_data" / "tasks"
    assert s.log_level == "INFO"
    assert s.memory_cache == CacheConfig(max_size=1000, ttl_seconds=3600.0)
    assert s.task_cache == CacheConfig(max_size=500, ttl_seconds=3600.0)
    assert s.context_cache == CacheConfig(max_size=200, ttl_seconds=3600.0)


def test_legacy_prefix_and_new_prefix_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCP_CACHE_TASK_MAX_SIZE", "42")
    monkeypatch.setenv("MCP_CACHE_TASK_TTL", "1500")
    assert Settings.from_env().task_cache == CacheConfig(max_size=42, ttl_seconds=1.5)

    monkeypatch.setenv("MEMTASK_CACHE_TASK_MAX_SIZE", "7")
    assert Settings.from_env().task_cache.max_size == 7


def test_data_dir_argument_beats_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMTASK_DATA_DIR", str(tmp_path / "from-env"))
    assert Settings.from_env().data_dir == tmp_path / "from-env"

    s = Settings.from_env(["--data-dir", str(tmp_path / "from-arg")])
    assert s.data_dir == tmp_path / "from-arg"
    assert s.memories_path == tmp_path / "from-arg" / "memories"


def test_log_level_normalization(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMTASK_LOG_LEVEL", "warn")
    assert Settings.from_env().log_level == "WARNING"
    monkeypatch.setenv("MEMTASK_LOG_LEVEL", "chatty")
    assert Settings.from_env().log_level == "INFO"


def test_bad_integer_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMTASK_CACHE_MEMORY_MAX_SIZE", "lots")
    assert Settings.from_env().memory_cache.max_size == 1000


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        (["--data-dir", "/srv/x"], "/srv/x"),
        (["--data-dir=/srv/y"], "/srv/y"),
        (["--other", "1"], None),
        (["--data-dir"], None),
        (["--data-dir="], None),
    ],
)
def test_parse_data_dir_arg(argv: list[str], expected: str | None) -> None:
    assert parse_data_dir_arg(argv) == expected
