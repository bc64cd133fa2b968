# src/memtask/tasks/task_lifecycle.py

"""
Task status state machine and progress-note ledger.

    todo ──► in_progress ──► completed
      │           │
      └──────┬────┘
             ▼
         cancelled

Re-setting the current status is always allowed (a no-op that can still carry
a progress note). completed/cancelled accept nothing else.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..core.errors import InvalidTransition
from ..utils.text import now_iso, sanitize
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

MAX_NOTE_LEN = 1000

TERMINAL: frozenset[TaskStatus] = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})

TRANSITIONS: dict[tuple[TaskStatus, TaskStatus], bool] = {
    (TaskStatus.TODO, TaskStatus.IN_PROGRESS): True,
    (TaskStatus.TODO, TaskStatus.CANCELLED): True,
    (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED): True,
    (TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED): True,
    **{(s, s): True for s in TaskStatus},
}


def can_transition(current: TaskStatus, requested: TaskStatus) -> bool:
    return TRANSITIONS.get((current, requested), False)


def check_transition(current: TaskStatus, requested: TaskStatus) -> None:
    if not can_transition(current, requested):
        raise InvalidTransition(current.value, requested.value)


def format_note(text: str, now: str | None = None) -> str:
    return f"{now or now_iso()}: {sanitize(text, MAX_NOTE_LEN)}"


def apply_update(
    task: Task,
    *,
    status: TaskStatus | None = None,
    note: str | None = None,
    now: str | None = None,
    **fields: object,
) -> Task:
    """
    Return the updated task; the input is left untouched.

    `fields` carries already-validated plain attributes (title, priority, ...).
    The transition check runs before anything is built, so a rejected update
    leaves no partial state behind.
    """
    if status is not None:
        check_transition(task.status, status)

    ts = now or now_iso()
    notes = list(task.progress_notes)
    if note:
        notes.append(format_note(note, ts))

    updated = replace(
        task,
        status=task.status if status is None else status,
        progress_notes=notes,
        updated_at=ts,
        **fields,
    )
    if updated.status != task.status:
        logger.info("Task %s %s -> %s", task.id, task.status.value, updated.status.value)
    return updated
