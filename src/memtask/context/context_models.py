# src/memtask/context/context_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ContextSnapshot:
    id: str
    summary: str
    content: str
    created_at: str
    related_memories: list[str] = field(default_factory=list)
    related_tasks: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "content": self.content,
            "created_at": self.created_at,
            "related_memories": list(self.related_memories),
            "related_tasks": list(self.related_tasks),
        }

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> ContextSnapshot:
        return cls(
            id=str(doc["id"]),
            summary=str(doc.get("summary") or ""),
            content=str(doc.get("content") or ""),
            created_at=str(doc.get("created_at") or ""),
            related_memories=[str(m) for m in doc.get("related_memories") or []],
            related_tasks=[str(t) for t in doc.get("related_tasks") or []],
        )
