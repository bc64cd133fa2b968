# src/memtask/memory/memory_manager.py

from __future__ import annotations

import logging
from dataclasses import replace

from ..core.cache import CacheStats
from ..storage.entity_store import EntityStore
from ..utils.text import (
    contains_any,
    new_id,
    now_iso,
    require_text,
    sanitize_tags,
    tf_cosine,
    validate_id,
    validate_ids,
)
from .memory_models import Memory, MemoryMetadata

logger = logging.getLogger(__name__)

MAX_CONTENT_LEN = 10000
MAX_SUMMARY_LEN = 200


class MemoryManager:
    """Memories: free-form notes with a summary, tags and an optional context link."""

    def __init__(self, store: EntityStore[Memory]) -> None:
        self._store = store

    async def add_memory(
        self,
        *,
        content: str,
        summary: str,
        tags: list[str] | None = None,
        context_id: str | None = None,
    ) -> Memory:
        ts = now_iso()
        memory = Memory(
            id=new_id(),
            content=require_text(content, "content", MAX_CONTENT_LEN),
            summary=require_text(summary, "summary", MAX_SUMMARY_LEN),
            metadata=MemoryMetadata(
                created_at=ts,
                updated_at=ts,
                tags=sanitize_tags(tags),
                context_id=validate_id(context_id, "context_id") if context_id else None,
            ),
        )
        await self._store.save(memory)
        logger.info("Memory added id=%s tags=%s", memory.id, memory.metadata.tags)
        return memory

    async def get_memory(self, memory_id: str) -> Memory | None:
        return await self._store.load(validate_id(memory_id))

    async def list_memories(self, *, tags: list[str] | None = None) -> list[Memory]:
        memories = await self._store.list_all()
        if tags:
            wanted = set(sanitize_tags(tags))
            memories = [m for m in memories if wanted & set(m.metadata.tags)]
        memories.sort(key=lambda m: m.metadata.updated_at, reverse=True)
        return memories

    async def search_memory(self, query: str, limit: int = 10) -> list[tuple[Memory, float]]:
        q = require_text(query, "query", 1000).lower()
        scored: list[tuple[Memory, float]] = []
        for memory in await self._store.list_all():
            if contains_any(q, [memory.content, memory.summary, *memory.metadata.tags]):
                score = 0.9
            else:
                score = max(tf_cosine(q, memory.content), tf_cosine(q, memory.summary))
            if score > 0.01:
                scored.append((memory, score))
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[: max(1, int(limit))]

    async def update_memory(
        self,
        memory_id: str,
        *,
        content: str | None = None,
        summary: str | None = None,
        tags: list[str] | None = None,
    ) -> Memory | None:
        memory = await self._store.load(validate_id(memory_id))
        if memory is None:
            return None

        meta = replace(
            memory.metadata,
            updated_at=now_iso(),
            tags=sanitize_tags(tags) if tags is not None else list(memory.metadata.tags),
        )
        updated = replace(
            memory,
            content=require_text(content, "content", MAX_CONTENT_LEN)
            if content is not None
            else memory.content,
            summary=require_text(summary, "summary", MAX_SUMMARY_LEN)
            if summary is not None
            else memory.summary,
            metadata=meta,
        )
        await self._store.save(updated)
        return updated

    async def delete_memory(self, memory_id: str) -> bool:
        removed = await self._store.delete(validate_id(memory_id))
        if removed:
            logger.info("Memory deleted id=%s", memory_id)
        return removed

    async def get_memories_by_context(self, context_id: str) -> list[Memory]:
        cid = validate_id(context_id, "context_id")
        return [m for m in await self._store.list_all() if m.metadata.context_id == cid]

    async def batch_get_memories(self, ids: list[str]) -> list[Memory]:
        out: list[Memory] = []
        for memory_id in validate_ids(ids, "ids"):
            memory = await self._store.load(memory_id)
            if memory is not None:
                out.append(memory)
        return out

    def cache_stats(self) -> CacheStats:
        return self._store.cache_stats()
