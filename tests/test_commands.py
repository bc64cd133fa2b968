# tests/test_commands.py

from __future__ import annotations

import pytest

from memtask.cli.commands import CommandRegistry
from memtask.cli.commands import registry as commands


@pytest.mark.asyncio
async def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    seen: list[str] = []

    async def echo(state, rest):
        seen.append(rest)
        return f"echo {rest}"

    reg.register("echo", echo, "echo", aliases=["e"])

    assert await reg.handle(state, "/echo hello world") == "echo hello world"
    assert await reg.handle(state, "/E  x ") == "echo x"
    assert seen == ["hello world", "x"]
    assert "/echo - echo" in reg.build_help()


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")


@pytest.mark.asyncio
async def test_call_command_runs_tools(state) -> None:
    reply = await commands.handle(state, '/call create_task {"title": "x", "description": "y"}')
    assert reply.startswith("Task created successfully.")

    listed = await commands.handle(state, '/call list_tasks {"status": "todo"}')
    assert listed.startswith("Total 1 tasks:")

    assert "Invalid JSON" in await commands.handle(state, "/call list_tasks {oops")
    assert "JSON object" in await commands.handle(state, "/call list_tasks [1]")
    assert "Usage" in await commands.handle(state, "/call")


@pytest.mark.asyncio
async def test_tools_help_and_stats(state) -> None:
    assert "get_executable_tasks" in await commands.handle(state, "/tools")
    assert "/call" in await commands.handle(state, "/?")

    stats = await commands.handle(state, "/stats")
    assert str(state.settings.data_dir) in stats
    assert "Task cache: Hits" in stats
