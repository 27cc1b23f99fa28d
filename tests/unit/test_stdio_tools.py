"""
Tests unitaires pour le front stdio (outils JSON-RPC).
"""
from __future__ import annotations

import asyncio
import json

import pytest

from opencode_bridge.features.stdio_tools.server import (
    NO_MODELS_HINT,
    StdioToolServer,
    format_model_listing,
)
from opencode_bridge.proxy.registry import ModelRegistry


def _call(name: str, arguments: dict | None = None, req_id: object = 1) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": req_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments or {}},
    }


@pytest.fixture
def server(translator) -> StdioToolServer:
    return StdioToolServer(translator)


@pytest.mark.asyncio
async def test_initialize_echoes_protocol_version(server):
    resp = await server.handle({"jsonrpc": "2.0", "id": 0, "method": "initialize",
                                "params": {"protocolVersion": "2024-11-05"}})
    assert resp["result"]["protocolVersion"] == "2024-11-05"
    assert resp["result"]["serverInfo"]["name"] == "opencode-bridge"
    assert "tools" in resp["result"]["capabilities"]


@pytest.mark.asyncio
async def test_notification_has_no_reply(server):
    assert await server.handle({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


@pytest.mark.asyncio
async def test_tools_list(server):
    resp = await server.handle({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
    names = {t["name"] for t in resp["result"]["tools"]}
    assert names == {"opencode_task", "opencode_new_session", "opencode_list_models"}


@pytest.mark.asyncio
async def test_task_tool_relays(server, fake_backend):
    resp = await server.handle(_call("opencode_task", {"task": "écris un script"}))
    
    assert resp["result"] == {"content": [{"type": "text", "text": "hello"}]}
    assert fake_backend.session_creations == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("task", ["ls", "count"])
async def test_task_tool_sends_short_tasks_verbatim(server, fake_backend, task):
    resp = await server.handle(_call("opencode_task", {"task": task}))

    assert resp["result"] == {"content": [{"type": "text", "text": "hello"}]}
    assert fake_backend.message_sends == 1
    assert fake_backend.calls[-1][2] == {"parts": [{"type": "text", "text": task}]}
    assert server.translator.state.usage.total_requests == 1


@pytest.mark.asyncio
async def test_task_tool_empty_output(server, fake_backend):
    fake_backend.reply = {"parts": [{"type": "tool", "tool": "bash"}]}
    resp = await server.handle(_call("opencode_task", {"task": "lance les tests"}))
    assert resp["result"]["content"][0]["text"] == "Task completed (no output)"


@pytest.mark.asyncio
async def test_task_tool_backend_error_is_tool_error(server, fake_backend):
    fake_backend.session_status = 503
    
    resp = await server.handle(_call("opencode_task", {"task": "écris un script"}))
    
    assert resp["result"]["isError"] is True
    assert resp["result"]["content"][0]["text"].startswith("Error: ")


@pytest.mark.asyncio
async def test_task_tool_requires_task(server):
    resp = await server.handle(_call("opencode_task", {}))
    assert resp["result"]["isError"] is True


@pytest.mark.asyncio
async def test_new_session_tool(server, fake_backend):
    resp = await server.handle(_call("opencode_new_session", {"workspace": "/srv/projet"}))
    
    assert resp["result"]["content"][0]["text"] == "New OpenCode session created: ses_1"
    assert fake_backend.calls[0][2] == {"workspace": "/srv/projet", "mode": "agent"}


@pytest.mark.asyncio
async def test_list_models_tool(server):
    resp = await server.handle(_call("opencode_list_models"))
    text = resp["result"]["content"][0]["text"]
    assert "anthropic/claude-sonnet-4" in text.splitlines()[0]


@pytest.mark.asyncio
async def test_list_models_refreshes_empty_registry(server, fake_backend):
    server.translator.registry.replace([], [])
    
    resp = await server.handle(_call("opencode_list_models"))
    
    assert fake_backend.count("GET", "/provider") == 1
    assert "opencode/big-pickle" in resp["result"]["content"][0]["text"]


def test_format_model_listing_empty():
    assert format_model_listing(ModelRegistry()) == NO_MODELS_HINT


@pytest.mark.asyncio
async def test_unknown_tool_and_method(server):
    resp = await server.handle(_call("inconnu"))
    assert resp["result"]["isError"] is True
    
    resp = await server.handle({"jsonrpc": "2.0", "id": 5, "method": "resources/read"})
    assert resp["error"]["code"] == -32601


@pytest.mark.asyncio
async def test_invalid_request(server):
    resp = await server.handle({"id": 3, "method": "tools/list"})
    assert resp == {"jsonrpc": "2.0", "id": 3, "error": {"code": -32600, "message": "Invalid Request"}}


@pytest.mark.asyncio
async def test_serve_loop_reads_lines_until_eof(server):
    reader = asyncio.StreamReader()
    reader.feed_data(b'{"jsonrpc": "2.0", "id": 1, "method": "ping"}\n')
    reader.feed_data(b"\n")
    reader.feed_data(b"pas du json\n")
    reader.feed_data(b'{"jsonrpc": "2.0", "method": "notifications/initialized"}\n')
    reader.feed_eof()
    written: list[dict] = []
    
    await server.serve(reader, written.append)
    
    assert written[0] == {"jsonrpc": "2.0", "id": 1, "result": {}}
    assert written[1]["error"]["code"] == -32700
    assert len(written) == 2
    json.dumps(written)
