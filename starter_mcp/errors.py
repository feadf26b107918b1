"""
Error types raised while registering and dispatching tools.

Protocol failures subclass the SDK's `McpError`, so each one carries the
JSON-RPC `ErrorData` that ends up in the response envelope.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp import types
from mcp.shared.exceptions import McpError


class DuplicateToolError(ValueError):
    """Raised at startup when a tool name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' already registered")
        self.name = name


class ProtocolError(McpError):
    def __init__(self, code: int, message: str, data: Optional[Any] = None) -> None:
        super().__init__(types.ErrorData(code=code, message=message, data=data))


class InvalidRequestError(ProtocolError):
    def __init__(self, message: str) -> None:
        super().__init__(types.INVALID_REQUEST, f"Invalid Request: {message}")


class MethodNotFoundError(ProtocolError):
    def __init__(self, method: str) -> None:
        super().__init__(types.METHOD_NOT_FOUND, f"Method not found: {method}")


class InvalidParamsError(ProtocolError):
    def __init__(self, message: str, data: Optional[Any] = None) -> None:
        super().__init__(types.INVALID_PARAMS, f"Invalid params: {message}", data)


class ToolNotFoundError(ProtocolError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(types.METHOD_NOT_FOUND, f"Tool not found: {name}")
        self.name = name

    def __str__(self) -> str:
        return self.error.message


class InvalidArgumentsError(InvalidParamsError):
    """Arguments did not match the tool's declared input shape."""

    def __init__(self, name: str, errors: List[Dict[str, Any]]) -> None:
        super().__init__(f"invalid arguments for tool '{name}'", data=errors)
        self.name = name
