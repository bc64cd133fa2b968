# src/memtask/context/context_manager.py

from __future__ import annotations

import logging
from dataclasses import replace

from ..core.cache import CacheStats
from ..storage.entity_store import EntityStore
from ..utils.text import contains_any, new_id, now_iso, require_text, validate_id, validate_ids
from .context_models import ContextSnapshot

logger = logging.getLogger(__name__)

MAX_SUMMARY_LEN = 200
MAX_CONTENT_LEN = 10000


class ContextManager:
    """
    Context snapshots: a summary of "where we are" plus links to the memories
    and tasks it was built from. Snapshots are immutable apart from their links.
    """

    def __init__(self, store: EntityStore[ContextSnapshot]) -> None:
        self._store = store

    async def create_snapshot(
        self,
        *,
        summary: str,
        content: str,
        related_memories: list[str] | None = None,
        related_tasks: list[str] | None = None,
    ) -> ContextSnapshot:
        snapshot = ContextSnapshot(
            id=new_id(),
            summary=require_text(summary, "summary", MAX_SUMMARY_LEN),
            content=require_text(content, "content", MAX_CONTENT_LEN),
            created_at=now_iso(),
            related_memories=validate_ids(related_memories, "related_memories"),
            related_tasks=validate_ids(related_tasks, "related_tasks"),
        )
        await self._store.save(snapshot)
        logger.info("Context snapshot created id=%s", snapshot.id)
        return snapshot

    async def get_snapshot(self, snapshot_id: str) -> ContextSnapshot | None:
        return await self._store.load(validate_id(snapshot_id))

    async def list_snapshots(self) -> list[ContextSnapshot]:
        snapshots = await self._store.list_all()
        snapshots.sort(key=lambda c: c.created_at, reverse=True)
        return snapshots

    async def get_recent(self, limit: int = 5) -> list[ContextSnapshot]:
        return (await self.list_snapshots())[: max(0, int(limit))]

    async def search_snapshots(self, query: str) -> list[ContextSnapshot]:
        q = require_text(query, "query", 1000)
        return [c for c in await self.list_snapshots() if contains_any(q, [c.summary, c.content])]

    async def get_by_memory(self, memory_id: str) -> list[ContextSnapshot]:
        mid = validate_id(memory_id, "memory_id")
        return [c for c in await self._store.list_all() if mid in c.related_memories]

    async def get_by_task(self, task_id: str) -> list[ContextSnapshot]:
        tid = validate_id(task_id, "task_id")
        return [c for c in await self._store.list_all() if tid in c.related_tasks]

    async def delete_snapshot(self, snapshot_id: str) -> bool:
        return await self._store.delete(validate_id(snapshot_id))

    async def _relink(self, snapshot_id: str, field: str, other_id: str, add: bool) -> bool:
        snapshot = await self._store.load(validate_id(snapshot_id))
        if snapshot is None:
            return False

        oid = validate_id(other_id, field)
        links: list[str] = list(getattr(snapshot, field))
        if add and oid not in links:
            links.append(oid)
        elif not add and oid in links:
            links.remove(oid)
        else:
            return True

        await self._store.save(replace(snapshot, **{field: links}))
        return True

    async def add_related_memory(self, snapshot_id: str, memory_id: str) -> bool:
        return await self._relink(snapshot_id, "related_memories", memory_id, add=True)

    async def add_related_task(self, snapshot_id: str, task_id: str) -> bool:
        return await self._relink(snapshot_id, "related_tasks", task_id, add=True)

    async def remove_related_memory(self, snapshot_id: str, memory_id: str) -> bool:
        return await self._relink(snapshot_id, "related_memories", memory_id, add=False)

    async def remove_related_task(self, snapshot_id: str, task_id: str) -> bool:
        return await self._relink(snapshot_id, "related_tasks", task_id, add=False)

    def cache_stats(self) -> CacheStats:
        return self._store.cache_stats()
