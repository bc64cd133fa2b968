# src/memtask/core/cache.py

"""
Bounded, time-expiring LRU cache shared by every entity manager.

- capacity bound: at most `max_size` entries; the least-recently-used entry is
  evicted when a new key is inserted into a full cache (expired or not)
- time bound: an entry older than `ttl_seconds` is treated as absent; expiry is
  checked lazily on access, there is no background sweep
- hit/miss counters are monotonic for the lifetime of the instance

Not thread-safe: mutate it from one event loop (or guard it with a lock).
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import ConfigError

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class CacheConfig:
    max_size: int
    ttl_seconds: float

    @classmethod
    def from_millis(cls, max_size: int, ttl_ms: int) -> CacheConfig:
        return cls(max_size=max_size, ttl_seconds=ttl_ms / 1000.0)


@dataclass(frozen=True, slots=True)
class CacheStats:
    hits: int = 0
    misses: int = 0


@dataclass(slots=True)
class _CacheEntry(Generic[V]):
    value: V
    expires_at: float


class BoundedCache(Generic[K, V]):
    def __init__(
        self,
        config: CacheConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ) -> None:
        if int(config.max_size) <= 0:
            raise ConfigError(f"{name}: max_size must be positive, got {config.max_size}")
        if float(config.ttl_seconds) < 0:
            raise ConfigError(f"{name}: ttl must be >= 0, got {config.ttl_seconds}")

        self._config = config
        self._clock = clock
        self._name = name
        self._entries: OrderedDict[K, _CacheEntry[V]] = OrderedDict()
        self._hits = 0
        self._misses = 0

        logger.debug(
            "BoundedCache %s created max_size=%s ttl=%.3fs",
            name,
            config.max_size,
            config.ttl_seconds,
        )

    @property
    def config(self) -> CacheConfig:
        return self._config

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if self._clock() > entry.expires_at:
            del self._entries[key]
            self._misses += 1
            logger.debug("Cache %s expired key=%s", self._name, key)
            return None

        self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    def set(self, key: K, value: V) -> None:
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self._config.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache %s full, evicted key=%s", self._name, evicted)

        self._entries[key] = _CacheEntry(value, self._clock() + self._config.ttl_seconds)

    def delete(self, key: K) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Cache %s cleared", self._name)

    def has(self, key: K) -> bool:
        # Counts as an access: lazy expiry and hit/miss accounting apply.
        return self.get(key) is not None

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses)

    def info(self) -> dict[str, float | int]:
        return {
            "size": self.size(),
            "max_size": self._config.max_size,
            "ttl_seconds": self._config.ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
        }
