"""
Dépendances FastAPI: accès aux objets créés par `create_app()` (app.state).
"""
from fastapi import Request

from ..config.settings import BridgeSettings
from ..proxy.registry import ModelRegistry
from ..proxy.translator import RequestTranslator
from ..services.websocket_manager import ConnectionManager


def get_translator(request: Request) -> RequestTranslator:
    return request.app.state.translator


def get_registry(request: Request) -> ModelRegistry:
    return request.app.state.translator.registry


def get_settings(request: Request) -> BridgeSettings:
    return request.app.state.settings


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.connection_manager


async def read_json_body(request: Request) -> dict:
    """Corps JSON de la requête; `{}` si absent, invalide ou non-objet."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
