from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from mcp import types
from mcp.shared.exceptions import McpError

from .config import Settings, get_settings
from .dispatch import ENVELOPE_ERROR_CODES, McpDispatcher, error_response, parse_message
from .main import create_registry
from .tools import ToolRegistry

logger = logging.getLogger(__name__)

GREETING = "MCP Server - Connect to /mcp"


def _wants_event_stream(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "text/event-stream" in accept and "application/json" not in accept


def _envelope_response(request: Request, payload: Dict[str, Any]) -> Response:
    error = payload.get("error")
    if error is not None and error.get("code") in ENVELOPE_ERROR_CODES:
        return JSONResponse(payload, status_code=400)

    if not _wants_event_stream(request):
        return JSONResponse(payload)

    async def generate_sse() -> AsyncIterator[str]:
        yield f"data: {json.dumps(payload)}\n\n"

    return StreamingResponse(
        generate_sse(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


def create_http_app(
    settings: Optional[Settings] = None,
    registry: Optional[ToolRegistry] = None,
) -> FastAPI:
    """
    Create FastAPI app that exposes the MCP dispatcher over HTTP.

    MCP over HTTP:
    - Client sends POST requests to /mcp with one JSON-RPC message in the body
    - Server answers with the JSON-RPC response as JSON, or as a single SSE
      event when the client only accepts text/event-stream
    - Notifications are acknowledged with 202 and no body
    """
    settings = settings or get_settings()
    if registry is None:
        registry = create_registry(settings)

    app = FastAPI(
        title="Starter MCP Server",
        version=settings.server_version,
        description="Minimal MCP tool server exposing `sum` and `consult_package_json`.",
    )

    # Shared across requests; the registry is frozen before it gets here.
    dispatcher = McpDispatcher(
        registry.freeze(),
        server_name=settings.server_name,
        server_version=settings.server_version,
    )

    @app.get("/")
    async def root() -> PlainTextResponse:
        return PlainTextResponse(GREETING)

    @app.api_route(
        "/mcp",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    )
    async def mcp_endpoint(request: Request) -> Response:
        """
        MCP endpoint.

        Only POST carries messages; there is no standalone SSE stream and no
        session to delete, so every other method is answered with 405.
        """
        if request.method != "POST":
            return JSONResponse(
                error_response(
                    None,
                    types.ErrorData(
                        code=types.INVALID_REQUEST,
                        message=f"Method not allowed: {request.method}",
                    ),
                ),
                status_code=405,
                headers={"Allow": "POST"},
            )

        try:
            message = parse_message(await request.body())
        except McpError as e:
            return JSONResponse(error_response(None, e.error), status_code=400)

        response = await dispatcher.dispatch(message)
        if response is None:
            return Response(status_code=202)
        return _envelope_response(request, response)

    return app


async def run_http_server(settings: Optional[Settings] = None) -> None:
    """Run the HTTP server using uvicorn."""
    import uvicorn

    settings = settings or get_settings()
    app = create_http_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level,
        access_log=True,
    )
    server = uvicorn.Server(config)
    logger.info("Serving MCP on http://%s:%s/mcp", settings.server_host, settings.server_port)
    await server.serve()
