"""opencode_bridge.features.stdio_tools.server

Front stdio: serveur d'outils JSON-RPC 2.0 (1 message par ligne sur stdin/stdout).

Outils exposés:
- `opencode_task`: envoie une tâche dans la session OpenCode courante
- `opencode_new_session`: remplace la session (efface le contexte)
- `opencode_list_models`: liste les modèles du backend

Important:
- Ne jamais écrire de logs sur stdout (sinon corruption JSON-RPC): tout passe
  par `logging` configuré sur stderr.
- Les erreurs d'outil sont renvoyées en résultat `isError: true`, pas en erreur JSON-RPC.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Callable

from ... import __version__
from ...config.loader import get_bridge_settings
from ...config.settings import BridgeSettings
from ...core.exceptions import BridgeError
from ...core.models import BridgeState
from ...proxy.client import create_backend_client
from ...proxy.registry import ModelRegistry
from ...proxy.session import SessionManager
from ...proxy.translator import RequestTranslator

logger = logging.getLogger(__name__)

JsonDict = dict[str, object]

DEFAULT_MCP_PROTOCOL_VERSION = "2025-06-18"
SERVER_NAME = "opencode-bridge"

EMPTY_TASK_RESULT = "Task completed (no output)"
NO_MODELS_HINT = (
    "No models reported by the OpenCode server. Configure providers in "
    "~/.config/opencode/opencode.json, then run `opencode serve`."
)

TOOLS: list[JsonDict] = [
    {
        "name": "opencode_task",
        "description": (
            "Use OpenCode AI to perform coding tasks. OpenCode routes to many providers "
            "(Claude, GPT, Gemini, local models...)."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "task": {
                    "type": "string",
                    "description": "The coding task to perform (e.g. 'Fix this bug')",
                }
            },
            "required": ["task"],
        },
    },
    {
        "name": "opencode_new_session",
        "description": "Create a new OpenCode session (clears previous context)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "workspace": {
                    "type": "string",
                    "description": "Workspace directory to use (defaults to current directory)",
                }
            },
        },
    },
    {
        "name": "opencode_list_models",
        "description": "List available models in OpenCode",
        "inputSchema": {"type": "object", "properties": {}},
    },
]


def _jsonrpc_error(*, code: int, message: str, req_id: object | None) -> JsonDict:
    return {"jsonrpc": "2.0", "id": req_id, "error": {"code": int(code), "message": message}}


def _jsonrpc_result(*, req_id: object | None, result: object) -> JsonDict:
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def _tool_text(text: str, *, is_error: bool = False) -> JsonDict:
    result: JsonDict = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


def _safe_get_str(obj: object, key: str) -> str | None:
    if not isinstance(obj, dict):
        return None
    value = obj.get(key)
    if isinstance(value, str):
        return value
    return None


def format_model_listing(registry: ModelRegistry) -> str:
    """Liste texte `provider: id (nom)`, une ligne par modèle."""
    if len(registry) == 0:
        return NO_MODELS_HINT
    lines = [f"{m.provider}: {m.id} ({m.name})" for m in registry.models]
    return "\n".join(lines)


class StdioToolServer:
    """Dispatch JSON-RPC des outils vers le traducteur partagé."""

    def __init__(self, translator: RequestTranslator) -> None:
        self.translator = translator

    async def handle(self, message: object) -> JsonDict | None:
        """
        Traite un message JSON-RPC déjà décodé.

        Returns:
            Réponse à écrire, ou None pour une notification
        """
        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0" or not isinstance(message.get("method"), str):
            req_id = message.get("id") if isinstance(message, dict) else None
            return _jsonrpc_error(code=-32600, message="Invalid Request", req_id=req_id)

        method = str(message["method"])
        req_id = message.get("id")
        params = message.get("params")
        params_dict: dict[str, Any] = params if isinstance(params, dict) else {}

        # Notifications: pas de réponse
        if "id" not in message:
            logger.debug("[STDIO] Notification ignorée: %s", method)
            return None

        if method == "initialize":
            protocol_version = _safe_get_str(params_dict, "protocolVersion") or DEFAULT_MCP_PROTOCOL_VERSION
            return _jsonrpc_result(
                req_id=req_id,
                result={
                    "protocolVersion": protocol_version,
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": SERVER_NAME, "version": __version__},
                },
            )

        if method == "ping":
            return _jsonrpc_result(req_id=req_id, result={})

        if method == "tools/list":
            return _jsonrpc_result(req_id=req_id, result={"tools": TOOLS})

        if method == "tools/call":
            tool_name = _safe_get_str(params_dict, "name")
            arguments = params_dict.get("arguments")
            tool_args: dict[str, Any] = arguments if isinstance(arguments, dict) else {}
            if tool_name is None:
                return _jsonrpc_error(code=-32602, message="Invalid params: missing tool name", req_id=req_id)
            return _jsonrpc_result(req_id=req_id, result=await self.call_tool(tool_name, tool_args))

        return _jsonrpc_error(code=-32601, message=f"Method not found: {method}", req_id=req_id)

    async def call_tool(self, name: str, args: dict[str, Any]) -> JsonDict:
        try:
            if name == "opencode_task":
                task = args.get("task")
                if not isinstance(task, str) or not task.strip():
                    return _tool_text("Error: 'task' must be a non-empty string", is_error=True)
                text = await self.translator.run_task(task)
                return _tool_text(text or EMPTY_TASK_RESULT)

            if name == "opencode_new_session":
                workspace = _safe_get_str(args, "workspace") or None
                session_id = await self.translator.sessions.reset_session(workspace)
                return _tool_text(f"New OpenCode session created: {session_id}")

            if name == "opencode_list_models":
                if len(self.translator.registry) == 0:
                    await self.translator.registry.refresh(self.translator.client)
                return _tool_text(format_model_listing(self.translator.registry))
        except BridgeError as e:
            logger.error("[STDIO] Outil %s en échec: %s", name, e)
            return _tool_text(f"Error: {e.message}", is_error=True)

        return _tool_text(f"Error: Unknown tool: {name}", is_error=True)

    async def serve(
        self,
        reader: asyncio.StreamReader,
        write: Callable[[JsonDict], None],
    ) -> None:
        """Boucle principale: lit une ligne, répond, jusqu'à EOF."""
        while True:
            raw = await reader.readline()
            if not raw:
                return
            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError:
                write(_jsonrpc_error(code=-32700, message="Parse error", req_id=None))
                continue

            response = await self.handle(message)
            if response is not None:
                write(response)


def _write_jsonrpc_payload(payload: JsonDict) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
    sys.stdout.flush()


async def _connect_stdin_reader() -> asyncio.StreamReader:
    """Retourne un StreamReader non-bloquant connecté à stdin (binaire)."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=8 * 1024 * 1024)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin.buffer)
    return reader


def build_translator(settings: BridgeSettings) -> RequestTranslator:
    """Racine de composition du front stdio (état indépendant du serveur HTTP)."""
    client = create_backend_client(
        base_url=settings.backend_url,
        password=settings.backend_password,
        timeout=settings.backend_timeout,
    )
    return RequestTranslator(
        state=BridgeState(current_model=settings.default_model),
        sessions=SessionManager(client, workspace=settings.workspace),
        client=client,
        registry=ModelRegistry(),
    )


async def main(settings: BridgeSettings | None = None) -> None:
    translator = build_translator(settings or get_bridge_settings())
    server = StdioToolServer(translator)
    logger.info("[STDIO] OpenCode Bridge tool server running on stdio")
    try:
        reader = await _connect_stdin_reader()
        await server.serve(reader, _write_jsonrpc_payload)
    finally:
        await translator.client.aclose()


def run(settings: BridgeSettings | None = None) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    asyncio.run(main(settings))
