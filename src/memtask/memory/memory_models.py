# src/memtask/memory/memory_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class MemoryMetadata:
    created_at: str
    updated_at: str
    tags: list[str] = field(default_factory=list)
    context_id: str | None = None


@dataclass(frozen=True, slots=True)
class Memory:
    id: str
    content: str
    summary: str
    metadata: MemoryMetadata

    def to_dict(self) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "created_at": self.metadata.created_at,
            "updated_at": self.metadata.updated_at,
            "tags": list(self.metadata.tags),
        }
        if self.metadata.context_id:
            meta["context_id"] = self.metadata.context_id
        return {
            "id": self.id,
            "content": self.content,
            "summary": self.summary,
            "metadata": meta,
        }

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> Memory:
        meta = doc.get("metadata") or {}
        return cls(
            id=str(doc["id"]),
            content=str(doc.get("content") or ""),
            summary=str(doc.get("summary") or ""),
            metadata=MemoryMetadata(
                created_at=str(meta.get("created_at") or ""),
                updated_at=str(meta.get("updated_at") or ""),
                tags=[str(t) for t in meta.get("tags") or []],
                context_id=meta.get("context_id") or None,
            ),
        )
