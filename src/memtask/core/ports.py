# src/memtask/core/ports.py

"""
Ports (interfaces) used by the core.

Managers depend on these Protocols instead of concrete implementations,
so the JSON-file store can be swapped for an in-memory fake in tests.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

T = TypeVar("T")

EntityDoc = dict[str, Any]
# Plain JSON-compatible document, as produced by Entity.to_dict().


class DurableStore(Protocol):
    """
    Persistent id -> document mapping.

    - load() returns None when the document does not exist
    - delete() returns False when the document does not exist
    - any other I/O failure is raised unchanged
    """

    async def save(self, entity_id: str, doc: EntityDoc) -> None: ...
    async def load(self, entity_id: str) -> EntityDoc | None: ...
    async def delete(self, entity_id: str) -> bool: ...
    async def list_ids(self) -> list[str]: ...


class Entity(Protocol):
    id: str

    def to_dict(self) -> EntityDoc: ...
