# src/memtask/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every variable reads MEMTASK_<NAME> first, then the legacy MCP_<NAME>.
- `--data-dir <path>` / `--data-dir=<path>` on the command line beats the env.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .core.cache import CacheConfig

ENV_PREFIX = "MEMTASK"
LEGACY_PREFIX = "MCP"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


# Real env vars win over .env entries.
load_dotenv(override=False)


def _first_env(suffix: str) -> str | None:
    for name in (f"{ENV_PREFIX}_{suffix}", f"{LEGACY_PREFIX}_{suffix}"):
        v = os.getenv(name)
        if v is not None and v.strip() != "":
            return v.strip()
    return None


def _env_int(suffix: str, default: int) -> int:
    raw = _first_env(suffix)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def parse_data_dir_arg(argv: Sequence[str]) -> str | None:
    for i, arg in enumerate(argv):
        if arg.startswith("--data-dir="):
            value = arg.split("=", 1)[1].strip()
            return value or None
        if arg == "--data-dir" and i + 1 < len(argv):
            value = argv[i + 1].strip()
            return value or None
    return None


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    memories_path: Path
    tasks_path: Path
    contexts_path: Path

    # ---- Cache tuning ----
    memory_cache: CacheConfig
    task_cache: CacheConfig
    context_cache: CacheConfig

    @staticmethod
    def from_env(argv: Sequence[str] = ()) -> "Settings":
        raw_dir = parse_data_dir_arg(argv) or _first_env("DATA_DIR")
        data_dir = Path(raw_dir).expanduser() if raw_dir else Path.cwd() / "mcp_data"

        log_level = (_first_env("LOG_LEVEL") or "INFO").upper()
        if log_level == "WARN":
            log_level = "WARNING"
        if log_level not in _LOG_LEVELS:
            log_level = "INFO"

        return Settings(
            app_name=_first_env("APP_NAME") or "memtask",
            log_level=log_level,
            data_dir=data_dir,
            memories_path=data_dir / "memories",
            tasks_path=data_dir / "tasks",
            contexts_path=data_dir / "contexts",
            memory_cache=CacheConfig.from_millis(
                _env_int("CACHE_MEMORY_MAX_SIZE", 1000),
                _env_int("CACHE_MEMORY_TTL", 3_600_000),
            ),
            task_cache=CacheConfig.from_millis(
                _env_int("CACHE_TASK_MAX_SIZE", 500),
                _env_int("CACHE_TASK_TTL", 3_600_000),
            ),
            context_cache=CacheConfig.from_millis(
                _env_int("CACHE_CONTEXT_MAX_SIZE", 200),
                _env_int("CACHE_CONTEXT_TTL", 3_600_000),
            ),
        )


_SETTINGS: Settings | None = None


def get_settings(argv: Sequence[str] = ()) -> Settings:
    global _SETTINGS
    if _SETTINGS is None or argv:
        _SETTINGS = Settings.from_env(argv)
    return _SETTINGS
