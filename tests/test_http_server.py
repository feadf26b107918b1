from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient
from mcp import types

from conftest import call_tool
from starter_mcp.dispatch import parse_message
from starter_mcp.errors import ProtocolError

GREETING = "MCP Server - Connect to /mcp"


def test_root_returns_greeting(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == GREETING
    assert response.headers["content-type"].startswith("text/plain")


def test_root_ignores_headers_and_body(client: TestClient) -> None:
    response = client.request(
        "GET",
        "/",
        headers={"Accept": "application/json", "X-Anything": "1"},
        content=b"ignored body",
    )

    assert response.status_code == 200
    assert response.text == GREETING


def test_sum_over_http(client: TestClient) -> None:
    response = client.post("/mcp", json=call_tool("sum", {"a": 40, "b": 2}))

    assert response.status_code == 200
    assert response.json() == {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {"content": [{"type": "text", "text": "42"}], "isError": False},
    }


def test_sum_with_non_numeric_argument(client: TestClient) -> None:
    response = client.post("/mcp", json=call_tool("sum", {"a": "forty", "b": 2}))

    assert response.status_code == 200
    assert response.json()["error"]["code"] == types.INVALID_PARAMS


def test_unknown_tool_over_http(client: TestClient) -> None:
    response = client.post("/mcp", json=call_tool("nope"))

    assert response.status_code == 200
    assert response.json()["error"] == {
        "code": types.METHOD_NOT_FOUND,
        "message": "Tool not found: nope",
    }


def test_consult_package_json_over_http(client: TestClient, settings) -> None:
    response = client.post("/mcp", json=call_tool("consult_package_json", {}))
    assert response.json()["result"]["content"][0]["text"] == (
        "package.json not found. Please provide the package.json file."
    )

    settings.package_json_path.write_text('{"name": "demo"}', encoding="utf-8")
    response = client.post("/mcp", json=call_tool("consult_package_json", {}))
    assert response.json()["result"]["content"][0]["text"] == '{"name": "demo"}'


def test_initialize_then_list_tools(client: TestClient) -> None:
    init = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 0,
            "method": "initialize",
            "params": {"protocolVersion": types.LATEST_PROTOCOL_VERSION, "capabilities": {}},
        },
    )
    assert init.status_code == 200
    assert init.json()["result"]["protocolVersion"] == types.LATEST_PROTOCOL_VERSION

    ack = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert ack.status_code == 202
    assert ack.content == b""

    listing = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    assert [t["name"] for t in listing.json()["result"]["tools"]] == ["sum", "consult_package_json"]


def test_event_stream_only_client_gets_sse_frame(client: TestClient) -> None:
    response = client.post(
        "/mcp",
        json=call_tool("sum", {"a": 1, "b": 2}),
        headers={"Accept": "text/event-stream"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.text.startswith("data: ")
    assert response.text.endswith("\n\n")
    payload = json.loads(response.text[len("data: "):])
    assert payload["result"]["content"][0]["text"] == "3"


def test_client_accepting_both_gets_json(client: TestClient) -> None:
    response = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 1, "method": "ping"},
        headers={"Accept": "application/json, text/event-stream"},
    )

    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"jsonrpc": "2.0", "id": 1, "result": {}}


@pytest.mark.parametrize("body", [b"{not json", b""])
def test_unparseable_body_is_bad_request(client: TestClient, body: bytes) -> None:
    response = client.post("/mcp", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["id"] is None
    assert response.json()["error"]["code"] == types.PARSE_ERROR


def test_deeply_nested_body_is_parse_error(client: TestClient) -> None:
    body = b"[" * 100000 + b"]" * 100000

    response = client.post("/mcp", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == types.PARSE_ERROR


@pytest.mark.parametrize(
    "body",
    [
        b'{"jsonrpc": "2.0", "id": NaN, "method": "ping"}',
        b'{"jsonrpc": "2.0", "id": 1, "method": "tools/call",'
        b' "params": {"name": "sum", "arguments": {"a": NaN, "b": 1}}}',
        b'{"jsonrpc": "2.0", "id": 1, "method": "tools/call",'
        b' "params": {"name": "sum", "arguments": {"a": -Infinity, "b": 1}}}',
    ],
)
def test_non_finite_literals_are_parse_errors(client: TestClient, body: bytes) -> None:
    response = client.post("/mcp", content=body, headers={"Content-Type": "application/json"})

    payload = response.json()
    assert response.status_code == 400
    assert payload["id"] is None
    assert payload["error"]["code"] == types.PARSE_ERROR
    assert "not valid JSON" in payload["error"]["message"]


def test_invalid_envelope_is_bad_request(client: TestClient) -> None:
    response = client.post("/mcp", json={"jsonrpc": "1.0", "id": 1, "method": "ping"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == types.INVALID_REQUEST


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
def test_non_post_methods_are_not_allowed(client: TestClient, method: str) -> None:
    response = client.request(method, "/mcp")

    assert response.status_code == 405
    assert response.headers["allow"] == "POST"


def test_parse_message_rejects_bad_json() -> None:
    with pytest.raises(ProtocolError) as excinfo:
        parse_message(b"{not json")

    assert excinfo.value.error.code == types.PARSE_ERROR
