"""
Traducteur de requêtes: API Messages (format Anthropic) -> protocole session/message
du backend OpenCode.

Point d'entrée unique utilisé par les routes HTTP et par le front stdio.
"""
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from ..core.constants import STOP_REASON
from ..core.models import BackendModel, BridgeState, RelayResult
from ..core.exceptions import UnknownModelError
from ..core.tokens import count_message_tokens, estimate_serialized_tokens, estimate_tokens
from .client import BackendClient
from .registry import ModelRegistry
from .relay import parse_backend_reply, relay
from .session import SessionManager

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Dict[str, Any]], Awaitable[None]]


def is_count_probe(body: Dict[str, Any]) -> bool:
    """
    Une requête `/v1/messages` sans `max_tokens` mais avec `messages` ne
    demande qu'un comptage de tokens.
    """
    return "max_tokens" not in body and "messages" in body


def _messages_of(body: Dict[str, Any]) -> list:
    messages = body.get("messages")
    return messages if isinstance(messages, list) else []


class RequestTranslator:
    """
    Façade du bridge.
    
    Gère:
    - La session backend (création paresseuse, reset, invalidation)
    - Les compteurs d'usage
    - La mise en forme des réponses au format Messages
    """
    
    def __init__(
        self,
        state: BridgeState,
        sessions: SessionManager,
        client: BackendClient,
        registry: ModelRegistry,
        on_change: Optional[ChangeCallback] = None
    ):
        self.state = state
        self.sessions = sessions
        self.client = client
        self.registry = registry
        self._on_change = on_change
    
    async def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            await self._on_change(self.status())
        except Exception as e:
            logger.warning("[BRIDGE] Notification de changement en échec: %s", e)
    
    async def handle_chat(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Traite `POST /v1/messages`.
        
        Args:
            body: Corps JSON de la requête
            
        Returns:
            `{tokens}` pour une sonde de comptage, sinon une réponse `message`
            
        Raises:
            BackendUnavailableError: Création de session impossible
            RelayError: Envoi du message impossible
        """
        if is_count_probe(body):
            return self.handle_count_tokens(body)
        
        messages = _messages_of(body)
        session_id = await self.sessions.ensure_session()
        result = await relay(self.client, session_id, messages)
        self._record(result)
        await self._notify()
        
        return {
            "id": f"msg_{int(time.time() * 1000)}",
            "type": "message",
            "role": "assistant",
            "content": [{"type": "text", "text": result.text}],
            "model": self.state.current_model,
            "stop_reason": STOP_REASON,
            "usage": {
                "input_tokens": estimate_serialized_tokens(messages),
                "output_tokens": estimate_tokens(result.text),
            },
        }
    
    def handle_count_tokens(self, body: Dict[str, Any]) -> Dict[str, int]:
        """Comptage local, ne touche jamais à la session."""
        return {"tokens": count_message_tokens(_messages_of(body))}
    
    async def run_task(self, task: str) -> str:
        """
        Envoie une tâche brute (front stdio) dans la session courante.

        Pas de filtre de sonde: la tâche part telle quelle, même courte.
        """
        session_id = await self.sessions.ensure_session()
        reply = await self.client.send_message(session_id, task)
        result = parse_backend_reply(reply)
        self._record(result)
        await self._notify()
        return result.text
    
    def _record(self, result: RelayResult) -> None:
        self.state.usage.record(result.tokens)
    
    async def select_model(self, model_id: str) -> BackendModel:
        """
        Sélectionne un modèle du registre et invalide la session.
        
        Raises:
            UnknownModelError: Modèle absent du registre (aucun état modifié)
        """
        model = self.registry.find(model_id)
        if model is None:
            raise UnknownModelError(model_id)
        
        self.state.current_model = model.id
        self.sessions.invalidate()
        logger.info("[BRIDGE] Modèle sélectionné: %s", model.id)
        await self._notify()
        return model
    
    async def reset_session(self) -> str:
        session_id = await self.sessions.reset_session()
        await self._notify()
        return session_id
    
    async def reset_stats(self) -> None:
        self.state.usage.reset()
        await self._notify()
    
    def status(self) -> Dict[str, Any]:
        return {
            "currentModel": self.state.current_model,
            "totalRequests": self.state.usage.total_requests,
            "totalTokensUsed": self.state.usage.total_tokens_used,
            "sessionId": "active" if self.sessions.is_active else "inactive",
        }
