# src/memtask/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..context.context_manager import ContextManager
from ..memory.memory_manager import MemoryManager
from ..tasks.task_manager import TaskManager


@dataclass
class AppState:
    """Everything a tool handler or console command needs, wired once in bootstrap."""

    # Settings-like object (Settings in the app, SimpleNamespace in tests).
    settings: Any

    memories: MemoryManager
    tasks: TaskManager
    contexts: ContextManager
