# tests/test_memory_manager.py

from __future__ import annotations

import asyncio

import pytest

from memtask.core.errors import ValidationError
from memtask.core.state import AppState


@pytest.mark.asyncio
async def test_memory_add_get_update_delete(state: AppState) -> None:
    mgr = state.memories
    memory = await mgr.add_memory(
        content="User prefers <strong>tea</strong>",
        summary="tea preference",
        tags=["pref", "food"],
    )
    assert memory.content == "User prefers strongtea/strong"
    assert memory.metadata.tags == ["pref", "food"]
    assert memory.metadata.context_id is None

    got = await mgr.get_memory(memory.id)
    assert got == memory

    updated = await mgr.update_memory(memory.id, summary="green tea", tags=["pref"])
    assert updated.summary == "green tea"
    assert updated.content == memory.content
    assert updated.metadata.tags == ["pref"]
    assert updated.metadata.created_at == memory.metadata.created_at

    assert await mgr.delete_memory(memory.id) is True
    assert await mgr.get_memory(memory.id) is None
    assert await mgr.update_memory(memory.id, summary="x") is None


@pytest.mark.asyncio
async def test_memory_validation(state: AppState) -> None:
    with pytest.raises(ValidationError):
        await state.memories.add_memory(content="", summary="s")
    with pytest.raises(ValidationError):
        await state.memories.add_memory(content="c", summary="s", tags=["ok", ""])
    with pytest.raises(ValidationError):
        await state.memories.get_memory("../etc/passwd")


@pytest.mark.asyncio
async def test_memory_search_and_filters(state: AppState) -> None:
    mgr = state.memories
    exact = await mgr.add_memory(content="The deploy runs on Fridays", summary="deploy day", tags=["ops"])
    fuzzy = await mgr.add_memory(content="Fridays are for the weekly review", summary="review", tags=["team"])
    await mgr.add_memory(content="Completely unrelated", summary="misc", context_id="ctx-1")

    results = await mgr.search_memory("deploy runs")
    assert results[0][0].id == exact.id
    assert results[0][1] == pytest.approx(0.9)

    ranked = [m.id for m, _ in await mgr.search_memory("weekly fridays review")]
    assert fuzzy.id in ranked

    assert [m.id for m in await mgr.list_memories(tags=["ops"])] == [exact.id]
    assert len(await mgr.list_memories()) == 3
    assert len(await mgr.get_memories_by_context("ctx-1")) == 1

    got = await mgr.batch_get_memories([fuzzy.id, "missing", exact.id])
    assert [m.id for m in got] == [fuzzy.id, exact.id]


@pytest.mark.asyncio
async def test_memories_survive_a_fresh_state(state: AppState, settings) -> None:
    from memtask.cli.bootstrap import create_initial_state

    memory = await state.memories.add_memory(content="persisted", summary="p")
    fresh = create_initial_state(settings=settings)
    assert await fresh.memories.get_memory(memory.id) == memory


@pytest.mark.asyncio
async def test_concurrent_updates_of_one_memory_last_write_wins(state: AppState) -> None:
    memory = await state.memories.add_memory(content="v0", summary="s")

    results = await asyncio.gather(
        *(state.memories.update_memory(memory.id, content=f"v{i}") for i in range(1, 21))
    )

    assert all(r is not None for r in results)
    stored = await state.memories.get_memory(memory.id)
    assert stored.content in {f"v{i}" for i in range(1, 21)}
