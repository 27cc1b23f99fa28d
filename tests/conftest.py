"""
Configuration des tests pytest.
"""
import asyncio
import json
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

# Ajoute src au path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from opencode_bridge.core.models import BridgeState
from opencode_bridge.proxy.client import BackendClient
from opencode_bridge.proxy.registry import ModelRegistry, parse_provider_catalog
from opencode_bridge.proxy.session import SessionManager
from opencode_bridge.proxy.translator import RequestTranslator

BACKEND_URL = "http://opencode.test"


PROVIDER_CATALOG = {
    "all": {
        "opencode": {
            "name": "OpenCode Zen",
            "source": "api",
            "models": {
                "minimax-m2.5-free": {"name": "MiniMax M2.5 Free", "cost": {"input": 0, "output": 0}},
                "big-pickle": {"name": "Big Pickle"},
            },
        },
        "anthropic": {
            "name": "Anthropic",
            "source": "env",
            "models": {
                "claude-sonnet-4": {"name": "Claude Sonnet 4", "cost": {"input": 3, "output": 15}},
            },
        },
    }
}


class FakeBackend:
    """Faux serveur OpenCode branché via httpx.MockTransport."""
    
    def __init__(self):
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        self.catalog: Dict[str, Any] = PROVIDER_CATALOG
        self.reply: Dict[str, Any] = {
            "parts": [{"type": "text", "text": "hello"}],
            "info": {"tokens": {"total": 7}},
        }
        self.session_status = 200
        self.message_status = 200
        self.provider_status = 200
        self.latency = 0.0
        self._session_counter = 0
    
    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path
        self.calls.append((request.method, path, body))
        
        if self.latency:
            await asyncio.sleep(self.latency)
        
        if request.method == "POST" and path == "/session":
            if self.session_status != 200:
                return httpx.Response(self.session_status)
            self._session_counter += 1
            return httpx.Response(200, json={"id": f"ses_{self._session_counter}"})
        
        if request.method == "POST" and path.startswith("/session/") and path.endswith("/message"):
            if self.message_status != 200:
                return httpx.Response(self.message_status)
            return httpx.Response(200, json=self.reply)
        
        if request.method == "GET" and path == "/provider":
            if self.provider_status != 200:
                return httpx.Response(self.provider_status)
            return httpx.Response(200, json=self.catalog)
        
        return httpx.Response(404)
    
    def count(self, method: str, path_prefix: str) -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p.startswith(path_prefix))
    
    @property
    def session_creations(self) -> int:
        return sum(1 for m, p, _ in self.calls if m == "POST" and p == "/session")
    
    @property
    def message_sends(self) -> int:
        return sum(1 for m, p, _ in self.calls if m == "POST" and p.endswith("/message"))


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def backend_client(fake_backend: FakeBackend):
    client = BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(fake_backend.handler))
    yield client
    await client.aclose()


@pytest.fixture
def registry() -> ModelRegistry:
    providers, models = parse_provider_catalog(PROVIDER_CATALOG)
    return ModelRegistry(models=models, providers=providers)


@pytest.fixture
def translator(backend_client: BackendClient, registry: ModelRegistry) -> RequestTranslator:
    return RequestTranslator(
        state=BridgeState(),
        sessions=SessionManager(backend_client, workspace="/tmp/workspace"),
        client=backend_client,
        registry=registry,
    )


@pytest.fixture
def sample_messages():
    """Fixture pour des messages de test."""
    return [
        {"role": "system", "content": "Tu es un assistant utile."},
        {"role": "user", "content": "Bonjour, comment ça va?"},
        {"role": "assistant", "content": "Je vais bien, merci!"},
        {"role": "user", "content": [{"type": "text", "text": "Écris un tri rapide"}]},
    ]
