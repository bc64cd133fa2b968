# src/memtask/core/errors.py

"""
Typed failures that cross the core boundary.

Callers (tool handlers, console commands) turn these into user-facing text;
the core itself never formats or prints them.
"""

from __future__ import annotations


class MemtaskError(Exception):
    """Base class for all recoverable memtask errors."""


class ConfigError(MemtaskError):
    """Invalid construction-time configuration (cache size, ttl, paths)."""


class NotFound(MemtaskError):
    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} {entity_id} does not exist")
        self.kind = kind
        self.entity_id = entity_id


class ValidationError(MemtaskError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class InvalidTransition(ValidationError):
    """Requested status change is not in the lifecycle transition table."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__("status", f"cannot move from {current} to {requested}")
        self.current = current
        self.requested = requested


class CycleError(ValidationError):
    """Dependency edges would close a cycle; `path` starts and ends on the same id."""

    def __init__(self, path: list[str]) -> None:
        super().__init__("depends_on", "dependency cycle: " + " -> ".join(path))
        self.path = list(path)
