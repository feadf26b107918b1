from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from starter_mcp.config import Settings
from starter_mcp.dispatch import McpDispatcher
from starter_mcp.http_server import create_http_app
from starter_mcp.main import create_registry


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(package_json_path=tmp_path / "package.json")


@pytest.fixture
def dispatcher(settings: Settings) -> McpDispatcher:
    return McpDispatcher(
        create_registry(settings),
        server_name=settings.server_name,
        server_version=settings.server_version,
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_http_app(settings))


def call_tool(name: str, arguments=None, message_id: int = 1) -> dict:
    params: dict = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": message_id, "method": "tools/call", "params": params}
