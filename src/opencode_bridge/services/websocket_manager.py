"""
Gestionnaire de connexions WebSocket du dashboard.

Chaque changement d'état du bridge (requête relayée, modèle, resets) est
diffusé sous la forme `{"type": "status", ...}`.
"""
import logging
from typing import Any, Dict, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Gère les connexions WebSocket actives."""
    
    def __init__(self):
        self.active_connections: Set["WebSocket"] = set()
    
    async def connect(self, websocket: "WebSocket"):
        """Accepte une nouvelle connexion WebSocket."""
        await websocket.accept()
        self.active_connections.add(websocket)
    
    def disconnect(self, websocket: "WebSocket"):
        """Déconnecte une connexion WebSocket."""
        self.active_connections.discard(websocket)
    
    async def broadcast(self, message: Dict[str, Any]):
        """
        Diffuse un message à toutes les connexions actives.
        
        Args:
            message: Message à diffuser (sera converti en JSON)
        """
        disconnected = set()
        
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.debug("[WS] Connexion perdue pendant le broadcast: %s", e)
                disconnected.add(connection)
        
        # Nettoie les connexions déconnectées
        for conn in disconnected:
            self.active_connections.discard(conn)
    
    async def broadcast_status(self, status: Dict[str, Any]):
        """Diffuse un instantané de `/api/status`."""
        await self.broadcast({"type": "status", **status})
    
    def get_connection_count(self) -> int:
        """Retourne le nombre de connexions actives."""
        return len(self.active_connections)
