# src/memtask/storage/entity_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from ..core.cache import BoundedCache, CacheStats
from ..core.errors import NotFound
from ..core.ports import DurableStore, Entity, EntityDoc

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)


class EntityStore(Generic[T]):
    """
    Read-through / write-through facade over a BoundedCache and a DurableStore.

    - load: cache first, durable store on miss (and populate the cache)
    - save: durable store first, then refresh the cache entry unconditionally
    - delete: durable store first, then evict from the cache

    Not-found is a None/False result; `require()` turns it into NotFound.
    """

    def __init__(
        self,
        durable: DurableStore,
        cache: BoundedCache[str, T],
        decode: Callable[[EntityDoc], T],
        *,
        kind: str,
    ) -> None:
        self._durable = durable
        self._cache = cache
        self._decode = decode
        self._kind = kind

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def cache(self) -> BoundedCache[str, T]:
        return self._cache

    async def load(self, entity_id: str) -> T | None:
        cached = self._cache.get(entity_id)
        if cached is not None:
            return cached

        doc = await self._durable.load(entity_id)
        if doc is None:
            return None

        entity = self._decode(doc)
        self._cache.set(entity_id, entity)
        return entity

    async def require(self, entity_id: str) -> T:
        entity = await self.load(entity_id)
        if entity is None:
            raise NotFound(self._kind, entity_id)
        return entity

    async def save(self, entity: T) -> None:
        await self._durable.save(entity.id, entity.to_dict())
        self._cache.set(entity.id, entity)

    async def delete(self, entity_id: str) -> bool:
        removed = await self._durable.delete(entity_id)
        self._cache.delete(entity_id)
        return removed

    async def list_ids(self) -> list[str]:
        return await self._durable.list_ids()

    async def list_all(self) -> list[T]:
        out: list[T] = []
        for entity_id in await self._durable.list_ids():
            try:
                entity = await self.load(entity_id)
            except (json.JSONDecodeError, ValueError, KeyError):
                # One unreadable document should not hide the rest of the listing.
                logger.exception("Skipping unreadable %s id=%s", self._kind, entity_id)
                continue
            if entity is not None:
                out.append(entity)
        return out

    def cache_stats(self) -> CacheStats:
        return self._cache.get_stats()
