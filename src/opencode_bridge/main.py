"""
OpenCode Bridge - Application FastAPI Factory.
Expose un sous-ensemble de l'API Messages et relaie vers un serveur OpenCode local.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, Response
from fastapi.middleware.cors import CORSMiddleware

from .config.loader import get_bridge_settings
from .config.settings import BridgeSettings
from .core.exceptions import BackendUnavailableError
from .core.models import BridgeState
from .proxy.client import BackendClient, create_backend_client
from .proxy.registry import ModelRegistry
from .proxy.session import SessionManager
from .proxy.translator import RequestTranslator
from .services.websocket_manager import ConnectionManager
from .api.router import api_router

logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "static")


def create_app(
    settings: Optional[BridgeSettings] = None,
    backend_client: Optional[BackendClient] = None
) -> FastAPI:
    """
    Factory pour créer l'application FastAPI.
    
    C'est la racine de composition: l'état partagé (session, compteurs,
    modèle courant) est créé ici et stocké dans `app.state`.
    
    Args:
        settings: Configuration (défaut: config.toml + environnement)
        backend_client: Client backend (défaut: construit depuis settings)
    
    Returns:
        Instance configurée de FastAPI
    """
    if settings is None:
        settings = get_bridge_settings()
    if backend_client is None:
        backend_client = create_backend_client(
            base_url=settings.backend_url,
            password=settings.backend_password,
            timeout=settings.backend_timeout
        )
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Gestion du cycle de vie de l'application."""
        # Startup
        await _startup(app)
        yield
        # Shutdown
        await _shutdown(app)
    
    app = FastAPI(
        title="OpenCode Bridge",
        description="Bridge API Messages -> serveur OpenCode",
        version="1.0.0",
        lifespan=lifespan
    )
    
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    connection_manager = ConnectionManager()
    translator = RequestTranslator(
        state=BridgeState(current_model=settings.default_model),
        sessions=SessionManager(backend_client, workspace=settings.workspace),
        client=backend_client,
        registry=ModelRegistry(),
        on_change=connection_manager.broadcast_status
    )
    
    app.state.settings = settings
    app.state.translator = translator
    app.state.connection_manager = connection_manager
    
    # Inclusion des routes API
    app.include_router(api_router)
    
    # Route favicon.ico pour éviter les erreurs 404
    @app.get("/favicon.ico")
    async def favicon():
        return Response(status_code=204)
    
    # Route principale (dashboard)
    @app.get("/", response_class=HTMLResponse)
    async def get_dashboard():
        html_file = os.path.join(STATIC_DIR, "index.html")
        if os.path.exists(html_file):
            with open(html_file, "r", encoding="utf-8") as f:
                return f.read()
        return HTMLResponse(content="<h1>Dashboard non trouvé</h1>", status_code=404)
    
    # WebSocket endpoint
    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        Endpoint WebSocket pour les mises à jour temps réel du dashboard.

        Envoie l'état initial puis chaque changement (requête relayée,
        sélection de modèle, resets). Les messages entrants sont ignorés.
        """
        await connection_manager.connect(websocket)
        try:
            await websocket.send_json({"type": "status", **translator.status()})
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            connection_manager.disconnect(websocket)
    
    return app


async def _startup(app: FastAPI):
    """Initialisation au démarrage."""
    settings: BridgeSettings = app.state.settings
    translator: RequestTranslator = app.state.translator
    
    print("🚀 Démarrage d'OpenCode Bridge...")
    print(f"🔗 Backend OpenCode: {settings.backend_url}")
    
    try:
        count = await translator.registry.refresh(translator.client)
        print(f"✅ {count} modèle(s) chargé(s)")
    except BackendUnavailableError as e:
        logger.warning("[MODELS] Catalogue indisponible au démarrage: %s", e)
        print("⚠️ Backend injoignable: aucun modèle chargé (POST /api/refresh-models pour réessayer)")
    
    print(f"🌐 Dashboard disponible sur http://localhost:{settings.proxy_port}")


async def _shutdown(app: FastAPI):
    """Arrêt de l'application."""
    print("\n👋 Arrêt du bridge...")
    await app.state.translator.client.aclose()
    print("✅ Bridge arrêté proprement")
