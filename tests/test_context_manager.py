# tests/test_context_manager.py

from __future__ import annotations

import pytest

from memtask.core.errors import ValidationError
from memtask.core.state import AppState


@pytest.mark.asyncio
async def test_snapshot_create_link_and_query(state: AppState) -> None:
    ctx = state.contexts
    snap = await ctx.create_snapshot(
        summary="Sprint 4 kickoff",
        content="Cache work is in progress",
        related_memories=["m-1", "m-1"],
    )
    assert snap.related_memories == ["m-1"]
    assert snap.related_tasks == []

    assert await ctx.add_related_task(snap.id, "t-9") is True
    assert await ctx.add_related_task(snap.id, "t-9") is True
    assert (await ctx.get_snapshot(snap.id)).related_tasks == ["t-9"]

    assert [c.id for c in await ctx.get_by_task("t-9")] == [snap.id]
    assert [c.id for c in await ctx.get_by_memory("m-1")] == [snap.id]

    assert await ctx.remove_related_memory(snap.id, "m-1") is True
    assert await ctx.get_by_memory("m-1") == []

    assert await ctx.add_related_memory("missing", "m-1") is False


@pytest.mark.asyncio
async def test_snapshot_search_recent_and_delete(state: AppState) -> None:
    ctx = state.contexts
    first = await ctx.create_snapshot(summary="first", content="alpha notes")
    second = await ctx.create_snapshot(summary="second", content="beta notes")

    assert [c.id for c in await ctx.search_snapshots("ALPHA")] == [first.id]
    assert {c.id for c in await ctx.get_recent(5)} == {first.id, second.id}
    assert len(await ctx.get_recent(1)) == 1

    assert await ctx.delete_snapshot(first.id) is True
    assert await ctx.get_snapshot(first.id) is None
    assert await ctx.delete_snapshot(first.id) is False


@pytest.mark.asyncio
async def test_snapshot_validation(state: AppState) -> None:
    with pytest.raises(ValidationError):
        await state.contexts.create_snapshot(summary="", content="c")
    with pytest.raises(ValidationError):
        await state.contexts.create_snapshot(summary="s", content="c", related_tasks="t-1")
