# src/memtask/tools/registry.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from ..core.errors import MemtaskError
from ..core.state import AppState

logger = logging.getLogger(__name__)

ToolArgs = dict[str, Any]
ToolHandler = Callable[[AppState, ToolArgs], Awaitable[str]]


@dataclass(frozen=True, slots=True)
class ToolResult:
    text: str
    is_error: bool = False


class ToolRegistry:
    """
    Named tools -> async handlers returning a plain-text report.

    This is what a tool-protocol server calls; transport framing lives elsewhere.
    Recoverable core errors become `is_error=True` results, anything else propagates.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}
        self._help: dict[str, str] = {}

    def register(self, name: str, handler: ToolHandler, description: str) -> None:
        self._handlers[name] = handler
        self._help[name] = description

    def names(self) -> list[str]:
        return list(self._handlers)

    def describe(self) -> list[dict[str, str]]:
        return [{"name": n, "description": d} for n, d in self._help.items()]

    async def call(self, state: AppState, name: str, arguments: ToolArgs | None = None) -> ToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            return ToolResult(f"Unknown tool: {name}", is_error=True)

        try:
            text = await handler(state, dict(arguments or {}))
        except MemtaskError as e:
            logger.info("Tool %s rejected: %s", name, e)
            return ToolResult(f"Error: {e}", is_error=True)

        return ToolResult(text)


registry = ToolRegistry()
