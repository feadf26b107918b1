"""
Tool registration utilities.

Each module in this package exposes a `register_tools(registry, ...)` function
that adds its tools to the central registry used by the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Type

from mcp import types
from pydantic import BaseModel

from ..errors import DuplicateToolError, ToolNotFoundError


ToolHandler = Callable[[Any], Awaitable[types.CallToolResult]]


@dataclass(frozen=True)
class RegisteredTool:
    spec: types.Tool
    arguments_model: Type[BaseModel]
    handler: ToolHandler


class ToolRegistry:
    """
    In-memory registry mapping MCP tool names to their specifications and handlers.

    Tools are added once at startup; `freeze()` then swaps the backing dict for
    a read-only view, after which the registry can be shared across requests.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, RegisteredTool] = {}
        self._frozen = False

    def add_tool(
        self,
        tool: types.Tool,
        arguments_model: Type[BaseModel],
        handler: ToolHandler,
    ) -> None:
        if self._frozen:
            raise RuntimeError("Tool registry is frozen")
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = RegisteredTool(
            spec=tool,
            arguments_model=arguments_model,
            handler=handler,
        )

    def freeze(self) -> "ToolRegistry":
        if not self._frozen:
            self._tools = MappingProxyType(dict(self._tools))  # type: ignore[assignment]
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def tools(self) -> Mapping[str, RegisteredTool]:
        return MappingProxyType(self._tools)

    def list_tools(self) -> List[types.Tool]:
        return [rt.spec for rt in self._tools.values()]

    def get(self, name: str) -> RegisteredTool:
        if name not in self._tools:
            raise ToolNotFoundError(name)
        return self._tools[name]

    def get_handler(self, name: str) -> ToolHandler:
        return self.get(name).handler

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def tool_spec(name: str, description: str, arguments_model: Type[BaseModel]) -> types.Tool:
    """Build the MCP descriptor, deriving `inputSchema` from the argument model."""
    return types.Tool(
        name=name,
        description=description,
        inputSchema=arguments_model.model_json_schema(),
    )


def text_result(text: str) -> types.CallToolResult:
    """Wrap a string as a single-item text `CallToolResult`."""
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)])
