# src/memtask/cli/commands.py

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable

from ..core.state import AppState
from ..tools.handlers import registry as tool_registry

CommandHandler = Callable[[AppState, str], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /call, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command rest of line".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        name, _, rest = line[1:].strip().partition(" ")
        if not name:
            return "Empty command. Use /help to list available commands."

        handler = self._handlers.get(name.lower())
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, rest.strip())

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


async def cmd_help(state: AppState, rest: str) -> str:
    return registry.build_help()


async def cmd_tools(state: AppState, rest: str) -> str:
    lines = ["Tools (use /call <tool> {json args}):"]
    for tool in tool_registry.describe():
        lines.append(f"  {tool['name']} - {tool['description']}")
    return "\n".join(lines)


async def cmd_call(state: AppState, rest: str) -> str:
    """
    /call <tool>                  -> call with no arguments
    /call <tool> {"key": "value"} -> call with JSON object arguments
    """
    name, _, raw_args = rest.partition(" ")
    if not name:
        return "Usage: /call <tool> {json args}"

    args: dict = {}
    if raw_args.strip():
        try:
            parsed = json.loads(raw_args)
        except json.JSONDecodeError as e:
            return f"Invalid JSON arguments: {e.msg}"
        if not isinstance(parsed, dict):
            return "Tool arguments must be a JSON object."
        args = parsed

    result = await tool_registry.call(state, name, args)
    return result.text


async def cmd_stats(state: AppState, rest: str) -> str:
    result = await tool_registry.call(state, "get_cache_stats")
    return f"Data dir: {state.settings.data_dir}\n{result.text}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("tools", cmd_tools, help_text="List tools callable with /call.")
registry.register("call", cmd_call, help_text="Call a tool: /call <tool> {json args}.")
registry.register("stats", cmd_stats, help_text="Show data dir and cache hit/miss counters.")
