"""
Gestion de l'unique session backend active.

Cycle de vie:
    Absente --ensure_session--> Active(id)
    Active  --invalidate------> Absente     (changement de modèle)
    *       --reset_session---> Active(nouvel id)

Les créations sont sérialisées par un verrou asyncio: deux requêtes qui
arrivent avant qu'une session existe attendent la même création au lieu de
créer deux sessions concurrentes.
"""
import asyncio
import logging
import os
from typing import Optional

from .client import BackendClient

logger = logging.getLogger(__name__)


class SessionManager:
    """Détient au plus un identifiant de session backend."""
    
    def __init__(self, client: BackendClient, workspace: Optional[str] = None):
        self._client = client
        self.workspace = workspace or os.getcwd()
        self._session_id: Optional[str] = None
        self._lock = asyncio.Lock()
        # Incrémenté à chaque invalidation: une création en vol devenue
        # obsolète n'est pas mémorisée.
        self._generation = 0
    
    @property
    def session_id(self) -> Optional[str]:
        return self._session_id
    
    @property
    def is_active(self) -> bool:
        return self._session_id is not None
    
    async def ensure_session(self, workspace: Optional[str] = None) -> str:
        """
        Retourne la session active, en la créant si nécessaire.
        
        Raises:
            BackendUnavailableError: Si la création échoue (aucun id n'est conservé)
        """
        if self._session_id is not None:
            return self._session_id
        
        async with self._lock:
            if self._session_id is not None:
                return self._session_id
            return await self._create_locked(workspace)
    
    async def reset_session(self, workspace: Optional[str] = None) -> str:
        """Crée inconditionnellement une nouvelle session et remplace l'ancienne."""
        async with self._lock:
            previous = self._session_id
            session_id = await self._create_locked(workspace)
            logger.info("[SESSION] Reset: %s -> %s", previous or "aucune", session_id)
            return session_id
    
    def invalidate(self) -> None:
        """Oublie la session sans appel backend; la prochaine requête en recrée une."""
        if self._session_id is not None:
            logger.info("[SESSION] Session %s invalidée", self._session_id)
        self._session_id = None
        self._generation += 1
    
    async def _create_locked(self, workspace: Optional[str]) -> str:
        generation = self._generation
        session_id = await self._client.create_session(workspace or self.workspace)
        if generation == self._generation:
            self._session_id = session_id
            logger.info("[SESSION] Nouvelle session backend: %s", session_id)
        else:
            logger.info("[SESSION] Session %s créée pendant une invalidation, non conservée", session_id)
        return session_id
