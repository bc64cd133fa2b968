# src/memtask/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the data directories exist,
- builds one BoundedCache per entity kind (no shared/global cache),
- wires JSON stores + caches into the managers held by AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..context.context_manager import ContextManager
from ..context.context_models import ContextSnapshot
from ..core.cache import BoundedCache
from ..core.state import AppState
from ..memory.memory_manager import MemoryManager
from ..memory.memory_models import Memory
from ..storage.entity_store import EntityStore
from ..storage.json_store import JsonFileStore
from ..tasks.task_manager import TaskManager
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.memories_path.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.mkdir(parents=True, exist_ok=True)
    settings.contexts_path.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    memory_store: EntityStore[Memory] = EntityStore(
        JsonFileStore(settings.memories_path, kind="memory"),
        BoundedCache(settings.memory_cache, name="memory"),
        Memory.from_dict,
        kind="Memory",
    )
    task_store: EntityStore[Task] = EntityStore(
        JsonFileStore(settings.tasks_path, kind="task"),
        BoundedCache(settings.task_cache, name="task"),
        Task.from_dict,
        kind="Task",
    )
    context_store: EntityStore[ContextSnapshot] = EntityStore(
        JsonFileStore(settings.contexts_path, kind="context"),
        BoundedCache(settings.context_cache, name="context"),
        ContextSnapshot.from_dict,
        kind="Context",
    )

    logger.info("State ready data_dir=%s", settings.data_dir)
    return AppState(
        settings=settings,
        memories=MemoryManager(memory_store),
        tasks=TaskManager(task_store),
        contexts=ContextManager(context_store),
    )
