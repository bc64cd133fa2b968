# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from memtask.cli.bootstrap import create_initial_state
from memtask.core.cache import BoundedCache, CacheConfig
from memtask.core.state import AppState
from memtask.storage.entity_store import EntityStore
from memtask.tasks.task_manager import TaskManager
from memtask.tasks.task_models import Task

from .fakes import FakeDurableStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the console commands.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        app_name="memtask-test",
        log_level="DEBUG",
        data_dir=data_dir,
        memories_path=data_dir / "memories",
        tasks_path=data_dir / "tasks",
        contexts_path=data_dir / "contexts",
        memory_cache=CacheConfig(max_size=50, ttl_seconds=3600.0),
        task_cache=CacheConfig(max_size=50, ttl_seconds=3600.0),
        context_cache=CacheConfig(max_size=50, ttl_seconds=3600.0),
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """AppState wired with the real JSON-file stores under tmp_path."""
    return create_initial_state(settings=settings)


@pytest.fixture()
def durable() -> FakeDurableStore:
    return FakeDurableStore()


@pytest.fixture()
def task_manager(durable: FakeDurableStore) -> TaskManager:
    store: EntityStore[Task] = EntityStore(
        durable,
        BoundedCache(CacheConfig(max_size=100, ttl_seconds=3600.0), name="task"),
        Task.from_dict,
        kind="Task",
    )
    return TaskManager(store)
