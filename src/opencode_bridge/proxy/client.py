"""
Client HTTPX vers le backend OpenCode (`opencode serve`).

Trois appels seulement:
- POST /session                 -> création de session
- POST /session/{id}/message    -> envoi d'un message
- GET  /provider                -> catalogue providers/modèles

Pas de retry: chaque échec remonte à l'appelant (la requête entrante suivante
fait office de nouvelle tentative).
"""
import logging
from typing import Any, Dict, Optional

import httpx

from ..core.constants import BACKEND_USERNAME, DEFAULT_BACKEND_URL, SESSION_MODE
from ..core.exceptions import BackendUnavailableError, RelayError

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Client HTTP pour le backend OpenCode.
    
    Gère:
    - Auth HTTP Basic optionnelle (`opencode:<password>`)
    - Un pool de connexions partagé (AsyncClient paresseux)
    - La conversion des erreurs HTTP/réseau en exceptions typées
    """
    
    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        password: Optional[str] = None,
        username: str = BACKEND_USERNAME,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.password = password or ""
        self.username = username
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
    
    @property
    def auth(self) -> Optional[httpx.BasicAuth]:
        if not self.password:
            return None
        return httpx.BasicAuth(self.username, self.password)
    
    def _get_client(self) -> httpx.AsyncClient:
        """Récupère ou crée le client HTTP."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=self.auth,
                # timeout=None: un backend bloqué bloque la requête entrante
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client
    
    async def aclose(self):
        """Ferme le client HTTP de manière propre."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
    
    async def __aenter__(self) -> "BackendClient":
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
    
    async def create_session(self, workspace: str) -> str:
        """
        Crée une session côté backend.
        
        Args:
            workspace: Répertoire de travail transmis au backend
            
        Returns:
            Identifiant opaque de la session
            
        Raises:
            BackendUnavailableError: Réseau, statut non-2xx ou réponse sans `id`
        """
        payload = {"workspace": workspace, "mode": SESSION_MODE}
        try:
            response = await self._get_client().post("/session", json=payload)
        except httpx.HTTPError as e:
            raise BackendUnavailableError(
                f"Backend injoignable ({self.base_url}): {e}",
                endpoint="/session"
            ) from e
        
        if not response.is_success:
            raise BackendUnavailableError(
                f"Échec de création de session: HTTP {response.status_code} {response.reason_phrase}",
                endpoint="/session",
                status_code=response.status_code
            )
        
        data = _json_or_none(response)
        session_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(session_id, str) or not session_id:
            raise BackendUnavailableError(
                "Réponse de création de session sans identifiant",
                endpoint="/session",
                status_code=response.status_code
            )
        logger.debug("[BACKEND] Session créée: %s", session_id)
        return session_id
    
    async def send_message(self, session_id: str, text: str) -> Dict[str, Any]:
        """
        Envoie un message texte dans une session existante.
        
        Returns:
            Réponse JSON brute du backend (`{parts: [...], info?: {...}}`)
            
        Raises:
            RelayError: Réseau, statut non-2xx ou JSON invalide
        """
        endpoint = f"/session/{session_id}/message"
        payload = {"parts": [{"type": "text", "text": text}]}
        try:
            response = await self._get_client().post(endpoint, json=payload)
        except httpx.HTTPError as e:
            raise RelayError(
                f"Backend injoignable ({self.base_url}): {e}",
                session_id=session_id
            ) from e
        
        if not response.is_success:
            raise RelayError(
                f"Échec d'envoi du message: HTTP {response.status_code} {response.reason_phrase}",
                session_id=session_id,
                status_code=response.status_code
            )
        
        data = _json_or_none(response)
        if data is None:
            raise RelayError(
                "Réponse du backend non JSON",
                session_id=session_id,
                status_code=response.status_code
            )
        return data if isinstance(data, dict) else {}
    
    async def list_providers(self) -> Dict[str, Any]:
        """
        Récupère le catalogue `{all: {providerID: {name, source, models}}}`.
        
        Raises:
            BackendUnavailableError: Réseau, statut non-2xx ou JSON invalide
        """
        try:
            response = await self._get_client().get("/provider")
        except httpx.HTTPError as e:
            raise BackendUnavailableError(
                f"Backend injoignable ({self.base_url}): {e}",
                endpoint="/provider"
            ) from e
        
        if not response.is_success:
            raise BackendUnavailableError(
                f"Échec de récupération des providers: HTTP {response.status_code}",
                endpoint="/provider",
                status_code=response.status_code
            )
        
        data = _json_or_none(response)
        if not isinstance(data, dict):
            raise BackendUnavailableError(
                "Catalogue providers invalide",
                endpoint="/provider",
                status_code=response.status_code
            )
        return data


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def create_backend_client(
    base_url: str = DEFAULT_BACKEND_URL,
    password: Optional[str] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> BackendClient:
    """
    Crée un client backend.
    
    Args:
        base_url: URL du serveur OpenCode
        password: Mot de passe HTTP Basic (optionnel)
        timeout: Timeout en secondes (None = aucun)
        transport: Transport HTTPX (tests)
        
    Returns:
        Instance de BackendClient
    """
    return BackendClient(
        base_url=base_url,
        password=password,
        timeout=timeout,
        transport=transport
    )
