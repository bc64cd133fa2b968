# src/memtask/tools/handlers.py

"""
Tool handlers: validate arguments, call a manager, format a text report.

Handlers raise core errors (ValidationError, NotFound, ...) and let
ToolRegistry.call turn them into error results.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from typing import Any

from ..context.context_models import ContextSnapshot
from ..core.errors import NotFound, ValidationError
from ..core.state import AppState
from ..memory.memory_models import Memory
from ..tasks import task_graph
from ..tasks.task_models import Task, TaskStatus
from .registry import ToolArgs, registry

logger = logging.getLogger(__name__)


def _arg(args: ToolArgs, name: str, default: Any = None) -> Any:
    v = args.get(name, default)
    return default if v is None else v


def _required(args: ToolArgs, name: str) -> Any:
    v = args.get(name)
    if v is None or v == "":
        raise ValidationError(name, "is required")
    return v


def _limit(args: ToolArgs, default: int = 10) -> int:
    raw = _arg(args, "limit", default)
    try:
        return max(1, int(raw))
    except (TypeError, ValueError):
        raise ValidationError("limit", "must be an integer") from None


# ---- formatting ----


def _fmt_memory(m: Memory) -> str:
    return (
        f"ID: {m.id}\n"
        f"Summary: {m.summary}\n"
        f"Tags: {', '.join(m.metadata.tags)}\n"
        f"Created at: {m.metadata.created_at}"
    )


def _fmt_task_line(t: Task) -> str:
    return f"- [{t.status.value.upper()}] {t.title} (ID: {t.id}, priority: {t.priority.value})"


def _fmt_task(t: Task, all_tasks: list[Task]) -> str:
    lines = [
        "Task details:",
        f"ID: {t.id}",
        f"Title: {t.title}",
        f"Description: {t.description}",
        f"Status: {t.status.value}",
        f"Priority: {t.priority.value}",
        f"Tags: {', '.join(t.tags)}",
        f"Created at: {t.created_at}",
        f"Last updated: {t.updated_at}",
    ]
    if t.due_date:
        lines.append(f"Due: {t.due_date}")
    lines.append(f"Linked memories: {len(t.linked_memories)}")
    if t.depends_on:
        lines.append(f"Depends on: {', '.join(t.depends_on)}")
        blocking = task_graph.blocking_dependencies(t, all_tasks)
        if blocking and t.status == TaskStatus.TODO:
            lines.append(f"Blocked by: {', '.join(blocking)}")
    lines.append(f"Progress notes: {len(t.progress_notes)}")
    lines.extend(f"  {note}" for note in t.progress_notes)
    return "\n".join(lines)


def _fmt_context(c: ContextSnapshot) -> str:
    return (
        f"ID: {c.id}\n"
        f"Summary: {c.summary}\n"
        f"Created at: {c.created_at}\n"
        f"Related memories: {', '.join(c.related_memories) or '-'}\n"
        f"Related tasks: {', '.join(c.related_tasks) or '-'}"
    )


# ---- memories ----


async def tool_add_memory(state: AppState, args: ToolArgs) -> str:
    memory = await state.memories.add_memory(
        content=_required(args, "content"),
        summary=_required(args, "summary"),
        tags=args.get("tags"),
        context_id=args.get("context_id"),
    )
    return f"Memory added successfully. ID: {memory.id}"


async def tool_get_memory(state: AppState, args: ToolArgs) -> str:
    memory_id = _required(args, "id")
    memory = await state.memories.get_memory(memory_id)
    if memory is None:
        raise NotFound("Memory", memory_id)
    return f"Memory details:\n{_fmt_memory(memory)}\n\n{memory.content}"


async def tool_search_memory(state: AppState, args: ToolArgs) -> str:
    results = await state.memories.search_memory(_required(args, "query"), _limit(args))
    if not results:
        return "No related memories found."
    body = "\n".join(f"{_fmt_memory(m)}\nSimilarity: {score:.2f}\n---" for m, score in results)
    return f"Found {len(results)} related memories:\n\n{body}"


async def tool_list_memories(state: AppState, args: ToolArgs) -> str:
    memories = await state.memories.list_memories(tags=args.get("tags"))
    body = "\n".join(f"{_fmt_memory(m)}\n---" for m in memories)
    return f"Total {len(memories)} memories:\n\n{body}"


async def tool_update_memory(state: AppState, args: ToolArgs) -> str:
    memory_id = _required(args, "id")
    memory = await state.memories.update_memory(
        memory_id,
        content=args.get("content"),
        summary=args.get("summary"),
        tags=args.get("tags"),
    )
    if memory is None:
        raise NotFound("Memory", memory_id)
    return f"Memory {memory.id} updated successfully."


async def tool_delete_memory(state: AppState, args: ToolArgs) -> str:
    memory_id = _required(args, "id")
    if not await state.memories.delete_memory(memory_id):
        raise NotFound("Memory", memory_id)
    return f"Memory {memory_id} deleted successfully."


# ---- tasks ----


async def tool_create_task(state: AppState, args: ToolArgs) -> str:
    task = await state.tasks.create_task(
        title=_required(args, "title"),
        description=_required(args, "description"),
        priority=args.get("priority"),
        tags=args.get("tags"),
        due_date=args.get("due_date"),
        linked_memories=args.get("linked_memories"),
        depends_on=args.get("depends_on"),
    )
    text = f"Task created successfully. ID: {task.id}\nTitle: {task.title}\nPriority: {task.priority.value}"
    if task.depends_on:
        text += f"\nDepends on: {', '.join(task.depends_on)}"
    return text


async def tool_update_task(state: AppState, args: ToolArgs) -> str:
    task_id = _required(args, "id")
    task = await state.tasks.update_task(
        task_id,
        status=args.get("status"),
        title=args.get("title"),
        description=args.get("description"),
        priority=args.get("priority"),
        progress_note=args.get("progress_note"),
        depends_on=args.get("depends_on"),
    )
    if task is None:
        raise NotFound("Task", task_id)
    return (
        f"Task {task.id} updated successfully.\n"
        f"Status: {task.status.value}\n"
        f"Last updated: {task.updated_at}"
    )


async def tool_get_task_status(state: AppState, args: ToolArgs) -> str:
    task_id = _required(args, "id")
    task = await state.tasks.get_task(task_id)
    if task is None:
        raise NotFound("Task", task_id)
    all_tasks = await state.tasks.all_tasks() if task.depends_on else []
    return _fmt_task(task, all_tasks)


async def tool_list_tasks(state: AppState, args: ToolArgs) -> str:
    tasks = await state.tasks.list_tasks(
        status=args.get("status"),
        priority=args.get("priority"),
        tags=args.get("tags"),
    )
    body = "\n".join(_fmt_task_line(t) for t in tasks)
    return f"Total {len(tasks)} tasks:\n\n{body}"


async def tool_search_tasks(state: AppState, args: ToolArgs) -> str:
    results = await state.tasks.search_tasks(_required(args, "query"), _limit(args))
    if not results:
        return "No related tasks found."
    body = "\n".join(f"{_fmt_task_line(t)} similarity {score:.2f}" for t, score in results)
    return f"Found {len(results)} related tasks:\n\n{body}"


async def tool_delete_task(state: AppState, args: ToolArgs) -> str:
    task_id = _required(args, "id")
    if not await state.tasks.delete_task(task_id):
        raise NotFound("Task", task_id)
    return f"Task {task_id} deleted successfully."


async def tool_get_executable_tasks(state: AppState, args: ToolArgs) -> str:
    tasks = await state.tasks.get_executable_tasks()
    if not tasks:
        return "No executable tasks: every todo task is waiting on a prerequisite."
    body = "\n".join(_fmt_task_line(t) for t in tasks)
    return f"{len(tasks)} executable tasks:\n\n{body}"


async def tool_get_task_order(state: AppState, args: ToolArgs) -> str:
    tasks = await state.tasks.get_task_order()
    body = "\n".join(f"{i}. {_fmt_task_line(t)[2:]}" for i, t in enumerate(tasks, start=1))
    return f"Execution order ({len(tasks)} tasks):\n\n{body}"


# ---- contexts ----


async def tool_create_context_snapshot(state: AppState, args: ToolArgs) -> str:
    snapshot = await state.contexts.create_snapshot(
        summary=_required(args, "summary"),
        content=_required(args, "content"),
        related_memories=args.get("related_memories"),
        related_tasks=args.get("related_tasks"),
    )
    return f"Context snapshot created successfully. ID: {snapshot.id}\nSummary: {snapshot.summary}"


async def tool_get_context_snapshot(state: AppState, args: ToolArgs) -> str:
    snapshot_id = _required(args, "id")
    snapshot = await state.contexts.get_snapshot(snapshot_id)
    if snapshot is None:
        raise NotFound("Context", snapshot_id)
    return f"Context snapshot:\n{_fmt_context(snapshot)}\n\n{snapshot.content}"


async def tool_list_context_snapshots(state: AppState, args: ToolArgs) -> str:
    snapshots = await state.contexts.list_snapshots()
    body = "\n".join(f"{_fmt_context(c)}\n---" for c in snapshots)
    return f"Total {len(snapshots)} context snapshots:\n\n{body}"


async def tool_search_context_snapshots(state: AppState, args: ToolArgs) -> str:
    snapshots = await state.contexts.search_snapshots(_required(args, "query"))
    if not snapshots:
        return "No matching context snapshots."
    body = "\n".join(f"{_fmt_context(c)}\n---" for c in snapshots)
    return f"Found {len(snapshots)} context snapshots:\n\n{body}"


async def tool_delete_context_snapshot(state: AppState, args: ToolArgs) -> str:
    snapshot_id = _required(args, "id")
    if not await state.contexts.delete_snapshot(snapshot_id):
        raise NotFound("Context", snapshot_id)
    return f"Context snapshot {snapshot_id} deleted successfully."


# ---- resources (read-only JSON views) ----

_RESOURCE_KINDS = ("memory", "task", "context")


async def _resource_docs(state: AppState, kind: str, resource_id: str) -> Any:
    if kind == "memory":
        if resource_id == "all":
            return [m.to_dict() for m in await state.memories.list_memories()]
        entity = await state.memories.get_memory(resource_id)
        label = "Memory"
    elif kind == "task":
        if resource_id == "all":
            return [t.to_dict() for t in await state.tasks.list_tasks()]
        entity = await state.tasks.get_task(resource_id)
        label = "Task"
    else:
        if resource_id == "all":
            return [c.to_dict() for c in await state.contexts.list_snapshots()]
        entity = await state.contexts.get_snapshot(resource_id)
        label = "Context"

    if entity is None:
        raise NotFound(label, resource_id)
    return entity.to_dict()


async def tool_list_resources(state: AppState, args: ToolArgs) -> str:
    counts = {
        "memory": len(await state.memories.list_memories()),
        "task": len(await state.tasks.list_tasks()),
        "context": len(await state.contexts.list_snapshots()),
    }
    lines = [f"- {kind}://all ({counts[kind]} documents)" for kind in _RESOURCE_KINDS]
    return "Resources (read with read_resource {\"uri\": ...}, or <kind>://<id>):\n" + "\n".join(lines)


async def tool_read_resource(state: AppState, args: ToolArgs) -> str:
    uri = _required(args, "uri")
    if not isinstance(uri, str):
        raise ValidationError("uri", "must be a string")
    kind, sep, resource_id = uri.partition("://")
    if not sep or kind not in _RESOURCE_KINDS:
        raise ValidationError("uri", f"unknown resource protocol: {kind}")
    resource_id = resource_id.strip("/")
    if not resource_id:
        raise ValidationError("uri", "missing resource id")

    return json.dumps(await _resource_docs(state, kind, resource_id), ensure_ascii=False, indent=2)


# ---- system ----


def _cache_lines(state: AppState) -> list[str]:
    lines = []
    for label, stats in (
        ("Memory", state.memories.cache_stats()),
        ("Task", state.tasks.cache_stats()),
        ("Context", state.contexts.cache_stats()),
    ):
        lines.append(f"- {label} cache: Hits {stats.hits}, Misses {stats.misses}")
    return lines


async def tool_get_cache_stats(state: AppState, args: ToolArgs) -> str:
    return "Cache statistics:\n" + "\n".join(_cache_lines(state))


async def tool_overview(state: AppState, args: ToolArgs) -> str:
    memories = await state.memories.list_memories()
    tasks = await state.tasks.list_tasks()
    contexts = await state.contexts.list_snapshots()

    by_status = Counter(t.status for t in tasks)
    tag_counts = Counter(tag for m in memories for tag in m.metadata.tags)
    active = [t for t in tasks if t.status in (TaskStatus.TODO, TaskStatus.IN_PROGRESS)]

    parts = [
        "# Memory Context System Overview",
        "",
        "## Statistical Summary",
        f"- Total memories: {len(memories)}",
        f"- Total tasks: {len(tasks)}",
        f"- Total context snapshots: {len(contexts)}",
        "",
        "## Recent Memories (Latest 5)",
        *(f"- {m.summary} ({m.metadata.created_at}) [{', '.join(m.metadata.tags)}]" for m in memories[:5]),
        "",
        "## Active Tasks",
        *(_fmt_task_line(t) for t in active),
        "",
        "## Recent Context Snapshots",
        *(f"- {c.summary} ({c.created_at})" for c in contexts[:3]),
        "",
        "## Task Status Distribution",
        *(f"- {s.value}: {by_status.get(s, 0)}" for s in TaskStatus),
        "",
        "## Memory Tags (Most Common)",
        *(f"- {tag}: {n}" for tag, n in tag_counts.most_common(10)),
        "",
        "## Cache Statistics",
        *_cache_lines(state),
    ]
    return "\n".join(parts)


registry.register("add_memory", tool_add_memory, "Store a memory: content, summary, tags?, context_id?")
registry.register("get_memory", tool_get_memory, "Read one memory by id.")
registry.register("search_memory", tool_search_memory, "Search memories: query, limit?")
registry.register("list_memories", tool_list_memories, "List memories, newest first: tags?")
registry.register("update_memory", tool_update_memory, "Update a memory: id, content?, summary?, tags?")
registry.register("delete_memory", tool_delete_memory, "Delete a memory by id.")
registry.register(
    "create_task",
    tool_create_task,
    "Create a task: title, description, priority?, tags?, due_date?, linked_memories?, depends_on?",
)
registry.register(
    "update_task",
    tool_update_task,
    "Update a task: id, status?, title?, description?, priority?, progress_note?, depends_on?",
)
registry.register("get_task_status", tool_get_task_status, "Show one task with its dependencies and notes.")
registry.register("list_tasks", tool_list_tasks, "List tasks: status?, priority?, tags?")
registry.register("search_tasks", tool_search_tasks, "Search tasks: query, limit?")
registry.register("delete_task", tool_delete_task, "Delete a task nothing else depends on.")
registry.register("get_executable_tasks", tool_get_executable_tasks, "Todo tasks whose prerequisites are all completed.")
registry.register("get_task_order", tool_get_task_order, "All tasks in dependency (topological) order.")
registry.register(
    "create_context_snapshot",
    tool_create_context_snapshot,
    "Save a context snapshot: summary, content, related_memories?, related_tasks?",
)
registry.register("get_context_snapshot", tool_get_context_snapshot, "Read one context snapshot by id.")
registry.register("list_context_snapshots", tool_list_context_snapshots, "List context snapshots, newest first.")
registry.register("search_context_snapshots", tool_search_context_snapshots, "Search context snapshots: query")
registry.register("delete_context_snapshot", tool_delete_context_snapshot, "Delete a context snapshot by id.")
registry.register("get_cache_stats", tool_get_cache_stats, "Cache hit/miss counters per entity kind.")
registry.register("overview", tool_overview, "Summary of memories, tasks, snapshots and caches.")
registry.register("list_resources", tool_list_resources, "Read-only JSON resources: memory://, task://, context://.")
registry.register("read_resource", tool_read_resource, "JSON dump of <kind>://all or <kind>://<id>: uri")
