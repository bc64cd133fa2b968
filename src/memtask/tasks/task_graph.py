# src/memtask/tasks/task_graph.py

"""
Read-only views over a snapshot of tasks, built from their depends_on edges.

Edge direction: `child.depends_on = [parent, ...]` means parent must finish
before child can start.

- executability: todo + every prerequisite completed (unknown ids and
  cancelled prerequisites block)
- topological order: Kahn's algorithm, ties broken by id
- cycle diagnostics: run before a write; a rejected write mutates nothing
"""

from __future__ import annotations

import heapq
import logging
import re
from collections.abc import Iterable, Sequence

from ..core.errors import CycleError, ValidationError
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

_NUMERIC_ID_RE = re.compile(r"^-?\d+(\.\d+)?$")


def _index(all_tasks: Iterable[Task]) -> dict[str, Task]:
    return {t.id: t for t in all_tasks}


def _id_key(task_id: str) -> tuple[int, float, str]:
    """Numeric ids sort by value (before the rest); others lexicographically."""
    if _NUMERIC_ID_RE.match(task_id):
        return (0, float(task_id), task_id)
    return (1, 0.0, task_id)


def is_executable(task: Task, all_tasks: Iterable[Task]) -> bool:
    if task.status != TaskStatus.TODO:
        return False
    by_id = _index(all_tasks)
    for dep_id in task.depends_on:
        dep = by_id.get(dep_id)
        if dep is None or dep.status != TaskStatus.COMPLETED:
            return False
    return True


def get_executable_tasks(all_tasks: Sequence[Task]) -> list[Task]:
    by_id = _index(all_tasks)
    out: list[Task] = []
    for task in all_tasks:
        if task.status != TaskStatus.TODO:
            continue
        deps = [by_id.get(d) for d in task.depends_on]
        if all(d is not None and d.status == TaskStatus.COMPLETED for d in deps):
            out.append(task)
    return out


def blocking_dependencies(task: Task, all_tasks: Iterable[Task]) -> list[str]:
    """Prerequisite ids that are missing or not completed yet."""
    by_id = _index(all_tasks)
    return [
        d
        for d in task.depends_on
        if d not in by_id or by_id[d].status != TaskStatus.COMPLETED
    ]


def dependents_of(task_id: str, all_tasks: Iterable[Task]) -> list[Task]:
    return [t for t in all_tasks if task_id in t.depends_on]


def topological_order(all_tasks: Sequence[Task]) -> list[Task]:
    by_id = _index(all_tasks)

    indegree: dict[str, int] = {tid: 0 for tid in by_id}
    dependents: dict[str, list[str]] = {tid: [] for tid in by_id}
    for task in by_id.values():
        # Unknown prerequisites do not constrain the order.
        for dep_id in dict.fromkeys(task.depends_on):
            if dep_id in by_id and dep_id != task.id:
                indegree[task.id] += 1
                dependents[dep_id].append(task.id)
            elif dep_id == task.id:
                raise CycleError([task.id, task.id])

    ready = [(_id_key(tid), tid) for tid, n in indegree.items() if n == 0]
    heapq.heapify(ready)

    ordered: list[Task] = []
    while ready:
        _, tid = heapq.heappop(ready)
        ordered.append(by_id[tid])
        for child in dependents[tid]:
            indegree[child] -= 1
            if indegree[child] == 0:
                heapq.heappush(ready, (_id_key(child), child))

    if len(ordered) != len(by_id):
        remaining = {tid for tid, n in indegree.items() if n > 0}
        raise CycleError(_cycle_within(remaining, by_id))

    return ordered


def _cycle_within(remaining: set[str], by_id: dict[str, Task]) -> list[str]:
    # Every remaining node still has a remaining prerequisite, so following
    # those edges must eventually repeat a node.
    start = min(remaining, key=_id_key)
    path = [start]
    seen = {start: 0}
    node = start
    while True:
        node = next(d for d in by_id[node].depends_on if d in remaining)
        if node in seen:
            return path[seen[node]:] + [node]
        seen[node] = len(path)
        path.append(node)


def find_cycle(candidate: Task, all_tasks: Iterable[Task]) -> list[str] | None:
    """
    Walk the dependency closure of `candidate`, using its proposed depends_on
    in place of any stored version. Returns `[candidate.id, ..., candidate.id]`
    when the walk comes back to the candidate, else None.
    """
    by_id = _index(all_tasks)
    by_id[candidate.id] = candidate

    seen: set[str] = set()
    stack: list[tuple[str, list[str]]] = [(candidate.id, [candidate.id])]
    while stack:
        node, path = stack.pop()
        task = by_id.get(node)
        if task is None:
            continue
        for dep_id in reversed(task.depends_on):
            if dep_id == candidate.id:
                return path + [dep_id]
            if dep_id in seen:
                continue
            seen.add(dep_id)
            stack.append((dep_id, path + [dep_id]))
    return None


def validate_no_cycle(candidate: Task, all_tasks: Iterable[Task]) -> None:
    if candidate.id in candidate.depends_on:
        raise ValidationError("depends_on", f"task {candidate.id} cannot depend on itself")

    path = find_cycle(candidate, all_tasks)
    if path is not None:
        logger.info("Rejected dependency cycle: %s", " -> ".join(path))
        raise CycleError(path)
