# src/memtask/tasks/task_manager.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from ..core.cache import CacheStats
from ..core.errors import ValidationError
from ..storage.entity_store import EntityStore
from ..utils.text import (
    contains_any,
    new_id,
    now_iso,
    parse_iso,
    require_text,
    sanitize_tags,
    validate_id,
    validate_ids,
    word_overlap,
)
from . import task_graph, task_lifecycle
from .task_models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

MAX_TITLE_LEN = 100
MAX_DESCRIPTION_LEN = 1000

_PRIORITY_RANK = {TaskPriority.HIGH: 3, TaskPriority.MEDIUM: 2, TaskPriority.LOW: 1}


def _parse_status(raw: Any) -> TaskStatus:
    try:
        return TaskStatus(raw)
    except ValueError:
        raise ValidationError(
            "status", "must be one of: todo, in_progress, completed, cancelled"
        ) from None


def _parse_priority(raw: Any) -> TaskPriority:
    try:
        return TaskPriority(raw)
    except ValueError:
        raise ValidationError("priority", "must be one of: low, medium, high") from None


def _parse_due_date(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValidationError("due_date", "must be a valid date")
    try:
        return parse_iso(raw).isoformat()
    except ValueError:
        raise ValidationError("due_date", "must be a valid date") from None


class TaskManager:
    """
    Task CRUD on top of EntityStore, plus the dependency engine.

    Every write (create/update/delete/note) holds one asyncio.Lock, so the
    "read all tasks -> validate edges -> save" sequence cannot interleave with
    another task write in this process.
    """

    def __init__(self, store: EntityStore[Task]) -> None:
        self._store = store
        self._write_lock = asyncio.Lock()

    # ---- reads ----

    async def get_task(self, task_id: str) -> Task | None:
        return await self._store.load(validate_id(task_id))

    async def all_tasks(self) -> list[Task]:
        return await self._store.list_all()

    async def list_tasks(
        self,
        *,
        status: str | None = None,
        priority: str | None = None,
        tags: list[str] | None = None,
    ) -> list[Task]:
        tasks = await self._store.list_all()
        if status:
            st = _parse_status(status)
            tasks = [t for t in tasks if t.status == st]
        if priority:
            pr = _parse_priority(priority)
            tasks = [t for t in tasks if t.priority == pr]
        if tags:
            wanted = set(sanitize_tags(tags))
            tasks = [t for t in tasks if wanted & set(t.tags)]
        tasks.sort(key=lambda t: t.updated_at, reverse=True)
        return tasks

    async def search_tasks(self, query: str, limit: int = 10) -> list[tuple[Task, float]]:
        q = require_text(query, "query", 1000).lower()
        scored: list[tuple[Task, float]] = []
        for task in await self._store.list_all():
            fields = [task.title, task.description, *task.tags, *task.progress_notes]
            if contains_any(q, fields):
                score = 0.9
            else:
                score = word_overlap(q, " ".join(fields))
            if score > 0.01:
                scored.append((task, score))
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[: max(1, int(limit))]

    async def batch_get_tasks(self, ids: list[str]) -> list[Task]:
        out: list[Task] = []
        for task_id in validate_ids(ids, "ids"):
            task = await self._store.load(task_id)
            if task is not None:
                out.append(task)
        return out

    async def get_overdue_tasks(self, now: datetime | None = None) -> list[Task]:
        now = now or datetime.now(timezone.utc)
        out: list[Task] = []
        for task in await self._store.list_all():
            if not task.due_date or task.status in task_lifecycle.TERMINAL:
                continue
            if parse_iso(task.due_date) < now:
                out.append(task)
        return out

    async def get_tasks_by_linked_memory(self, memory_id: str) -> list[Task]:
        mid = validate_id(memory_id, "memory_id")
        return [t for t in await self._store.list_all() if mid in t.linked_memories]

    async def get_executable_tasks(self) -> list[Task]:
        tasks = await self._store.list_all()
        # Stable, readable order for reports: highest priority first, then oldest.
        tasks.sort(key=lambda t: t.created_at)
        tasks.sort(key=lambda t: _PRIORITY_RANK[t.priority], reverse=True)
        return task_graph.get_executable_tasks(tasks)

    async def get_task_order(self) -> list[Task]:
        return task_graph.topological_order(await self._store.list_all())

    def cache_stats(self) -> CacheStats:
        return self._store.cache_stats()

    # ---- writes ----

    async def _check_dependencies(self, candidate: Task) -> None:
        all_tasks = await self._store.list_all()
        known = {t.id for t in all_tasks}
        for dep_id in candidate.depends_on:
            if dep_id != candidate.id and dep_id not in known:
                raise ValidationError("depends_on", f"task {dep_id} does not exist")
        task_graph.validate_no_cycle(candidate, all_tasks)

    async def create_task(
        self,
        *,
        title: str,
        description: str,
        priority: str | None = None,
        tags: list[str] | None = None,
        due_date: str | None = None,
        linked_memories: list[str] | None = None,
        depends_on: list[str] | None = None,
    ) -> Task:
        ts = now_iso()
        task = Task(
            id=new_id(),
            title=require_text(title, "title", MAX_TITLE_LEN),
            description=require_text(description, "description", MAX_DESCRIPTION_LEN),
            status=TaskStatus.TODO,
            priority=_parse_priority(priority) if priority else TaskPriority.MEDIUM,
            tags=sanitize_tags(tags),
            created_at=ts,
            updated_at=ts,
            due_date=_parse_due_date(due_date) if due_date else None,
            linked_memories=validate_ids(linked_memories, "linked_memories"),
            depends_on=validate_ids(depends_on, "depends_on"),
        )

        async with self._write_lock:
            if task.depends_on:
                await self._check_dependencies(task)
            await self._store.save(task)

        logger.info("Task created id=%s deps=%s", task.id, task.depends_on)
        return task

    async def update_task(
        self,
        task_id: str,
        *,
        status: str | None = None,
        title: str | None = None,
        description: str | None = None,
        priority: str | None = None,
        progress_note: str | None = None,
        depends_on: list[str] | None = None,
    ) -> Task | None:
        tid = validate_id(task_id)
        fields: dict[str, Any] = {}
        if title:
            fields["title"] = require_text(title, "title", MAX_TITLE_LEN)
        if description:
            fields["description"] = require_text(description, "description", MAX_DESCRIPTION_LEN)
        if priority:
            fields["priority"] = _parse_priority(priority)
        if depends_on is not None:
            fields["depends_on"] = validate_ids(depends_on, "depends_on")
        new_status = _parse_status(status) if status else None
        note = (
            require_text(progress_note, "progress_note", task_lifecycle.MAX_NOTE_LEN)
            if progress_note is not None
            else None
        )

        async with self._write_lock:
            current = await self._store.load(tid)
            if current is None:
                return None

            updated = task_lifecycle.apply_update(
                current, status=new_status, note=note, **fields
            )
            if depends_on is not None:
                await self._check_dependencies(updated)
            await self._store.save(updated)

        return updated

    async def add_progress_note(self, task_id: str, note: str) -> bool:
        text = require_text(note, "note", task_lifecycle.MAX_NOTE_LEN)
        return await self.update_task(task_id, progress_note=text) is not None

    async def delete_task(self, task_id: str) -> bool:
        tid = validate_id(task_id)
        async with self._write_lock:
            dependents = task_graph.dependents_of(tid, await self._store.list_all())
            if dependents:
                ids = ", ".join(t.id for t in dependents)
                raise ValidationError("id", f"tasks still depend on {tid}: {ids}")
            removed = await self._store.delete(tid)

        if removed:
            logger.info("Task deleted id=%s", tid)
        return removed
