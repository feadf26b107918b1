from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from mcp import types
from mcp.shared.exceptions import McpError
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from pydantic import BaseModel, ValidationError

from .errors import (
    InvalidArgumentsError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ProtocolError,
)
from .tools import ToolRegistry

logger = logging.getLogger(__name__)

MethodHandler = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]

# Errors about the envelope itself rather than the call it carries.
ENVELOPE_ERROR_CODES = frozenset({types.PARSE_ERROR, types.INVALID_REQUEST})


def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not valid JSON")


def parse_message(body: bytes) -> Any:
    """Decode a raw request body, raising a PARSE_ERROR `ProtocolError` on bad JSON."""
    if not body:
        raise ProtocolError(types.PARSE_ERROR, "Parse error: empty request body")
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except RecursionError as e:
        raise ProtocolError(types.PARSE_ERROR, "Parse error: nesting too deep") from e
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise ProtocolError(types.PARSE_ERROR, f"Parse error: {str(e)}") from e


def _echo_id(message: Any) -> Any:
    if not isinstance(message, dict):
        return None
    message_id = message.get("id")
    if isinstance(message_id, bool) or not isinstance(message_id, (str, int)):
        return None
    return message_id


def error_response(message_id: Any, error: types.ErrorData) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": message_id,
        "error": error.model_dump(mode="json", exclude_none=True),
    }


class McpDispatcher:
    """
    Routes JSON-RPC messages to MCP method handlers.

    One instance is built at startup around a frozen `ToolRegistry` and shared
    by every request; it keeps no per-request state.

    Supported methods:
    - initialize: Server initialization handshake
    - ping: Liveness check
    - tools/list: List available tools
    - tools/call: Validate arguments and execute a tool
    Notifications (messages without an `id`) are accepted and never answered.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        server_name: str,
        server_version: str,
    ) -> None:
        self._registry = registry
        self._server_info = types.Implementation(name=server_name, version=server_version)
        self._methods: Dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    async def dispatch(self, message: Any) -> Optional[Dict[str, Any]]:
        """
        Handle one decoded JSON-RPC message.

        Returns the response envelope, or None when the message is a notification.
        """
        message_id = _echo_id(message)
        try:
            method, params = self._validate_envelope(message)
            if "id" not in message:
                logger.debug("Received notification %s", method)
                return None
            handler = self._methods.get(method)
            if handler is None:
                raise MethodNotFoundError(method)
            result = await handler(params)
        except McpError as e:
            return error_response(message_id, e.error)
        except Exception as e:
            logger.exception("Error handling MCP message")
            return error_response(
                message_id,
                types.ErrorData(code=types.INTERNAL_ERROR, message=f"Internal error: {str(e)}"),
            )

        return {
            "jsonrpc": "2.0",
            "id": message_id,
            "result": result,
        }

    @staticmethod
    def _validate_envelope(message: Any) -> Tuple[str, Dict[str, Any]]:
        if not isinstance(message, dict):
            raise InvalidRequestError("message must be a JSON object")
        if message.get("jsonrpc") != "2.0":
            raise InvalidRequestError("jsonrpc must be '2.0'")

        method = message.get("method")
        if not isinstance(method, str) or not method:
            raise InvalidRequestError("method is required")

        if "id" in message:
            message_id = message["id"]
            if isinstance(message_id, bool) or not isinstance(message_id, (str, int)):
                raise InvalidRequestError("id must be a string or integer")

        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise InvalidRequestError("params must be an object")
        return method, params

    async def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        requested = params.get("protocolVersion")
        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            version = requested
        else:
            version = types.LATEST_PROTOCOL_VERSION

        result = types.InitializeResult(
            protocolVersion=version,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
            ),
            serverInfo=self._server_info,
        )
        return _dump(result)

    async def _ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def _list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return _dump(types.ListToolsResult(tools=self._registry.list_tools()))

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        tool_name = params.get("name")
        if not isinstance(tool_name, str) or not tool_name:
            raise InvalidParamsError("'name' is required")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError("'arguments' must be an object")

        try:
            tool = self._registry.get(tool_name)
        except McpError:
            logger.info("Call for unknown tool %r", tool_name)
            raise

        try:
            validated = tool.arguments_model.model_validate(arguments)
        except ValidationError as e:
            logger.info("Rejected arguments for tool %s: %s", tool_name, e.error_count())
            raise InvalidArgumentsError(tool_name, json.loads(e.json(include_url=False))) from e

        logger.debug("Calling tool %s", tool_name)
        try:
            result = await tool.handler(validated)
        except Exception as e:
            logger.exception(f"Error executing tool {tool_name}")
            result = types.CallToolResult(
                content=[types.TextContent(type="text", text=f"Tool execution error: {str(e)}")],
                isError=True,
            )
        return _dump(result)
