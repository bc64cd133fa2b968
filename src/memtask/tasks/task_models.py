# src/memtask/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - "completed" and "cancelled" are terminal (see task_lifecycle.TRANSITIONS).
    - only "completed" satisfies a dependency; "cancelled" keeps dependents blocked.
    """

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def from_doc(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        return cls(raw)


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_doc(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        return cls(raw)


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    description: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    due_date: str | None = None
    linked_memories: list[str] = field(default_factory=list)
    depends_on: list[str] = field(default_factory=list)
    progress_notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "tags": list(self.tags),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "due_date": self.due_date,
            "linked_memories": list(self.linked_memories),
            "depends_on": list(self.depends_on),
            "progress_notes": list(self.progress_notes),
        }

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> Task:
        # Documents written before dependencies existed have no depends_on key.
        return cls(
            id=str(doc["id"]),
            title=str(doc.get("title") or ""),
            description=str(doc.get("description") or ""),
            status=TaskStatus.from_doc(doc.get("status")),
            priority=TaskPriority.from_doc(doc.get("priority")),
            tags=[str(t) for t in doc.get("tags") or []],
            created_at=str(doc.get("created_at") or ""),
            updated_at=str(doc.get("updated_at") or ""),
            due_date=doc.get("due_date") or None,
            linked_memories=[str(m) for m in doc.get("linked_memories") or []],
            depends_on=[str(d) for d in doc.get("depends_on") or []],
            progress_notes=[str(n) for n in doc.get("progress_notes") or []],
        )
