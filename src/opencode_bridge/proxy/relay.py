"""
Relais d'une conversation vers la session backend.

Seul le dernier vrai message utilisateur est transmis: le backend garde
lui-même l'historique de la session, renvoyer toute la liste dupliquerait le
contexte.
"""
import logging
from typing import Any, Optional

from ..core.constants import COUNT_PROBE_SENTINEL, MIN_TASK_CHARS, NOOP_REPLY_TEXT
from ..core.content import extract_text
from ..core.models import RelayResult
from .client import BackendClient

logger = logging.getLogger(__name__)


def is_task_text(text: str) -> bool:
    """Un texte est relayable s'il dépasse 2 caractères et n'est pas la sonde "count"."""
    return len(text) > MIN_TASK_CHARS and text != COUNT_PROBE_SENTINEL


def select_task_message(messages: Any) -> Optional[str]:
    """
    Cherche, du plus récent au plus ancien, le premier message utilisateur relayable.
    
    Args:
        messages: Liste de messages `{role, content}`
        
    Returns:
        Texte extrait du message retenu, ou None
    """
    if not isinstance(messages, list):
        return None
    
    for message in reversed(messages):
        if not isinstance(message, dict) or message.get("role") != "user":
            continue
        text = extract_text(message.get("content"))
        if is_task_text(text):
            return text
    return None


def parse_backend_reply(reply: Any) -> RelayResult:
    """
    Réduit la réponse backend à `(texte, tokens)`.
    
    - texte: concaténation des parts `type == "text"`, dans l'ordre
    - tokens: `info.tokens.total`, 0 si absent (pas d'estimation de secours)
    """
    if not isinstance(reply, dict):
        return RelayResult(text="", tokens=0)
    
    text = ""
    parts = reply.get("parts")
    if isinstance(parts, list):
        for part in parts:
            if isinstance(part, dict) and part.get("type") == "text":
                part_text = part.get("text")
                if isinstance(part_text, str):
                    text += part_text
    
    tokens = 0
    info = reply.get("info")
    token_info = info.get("tokens") if isinstance(info, dict) else None
    if isinstance(token_info, dict):
        total = token_info.get("total")
        if isinstance(total, int) and not isinstance(total, bool):
            tokens = total
    
    return RelayResult(text=text, tokens=tokens)


async def relay(client: BackendClient, session_id: str, messages: Any) -> RelayResult:
    """
    Relaie le dernier message utilisateur vers la session et parse la réponse.
    
    Sans message relayable (sondes, requêtes d'administration), répond "OK"
    sans contacter le backend.
    
    Raises:
        RelayError: Si l'appel backend échoue (pas de retry)
    """
    task = select_task_message(messages)
    if task is None:
        logger.debug("[RELAY] Aucun message utilisateur relayable, réponse no-op")
        return RelayResult(text=NOOP_REPLY_TEXT, tokens=0)
    
    reply = await client.send_message(session_id, task)
    result = parse_backend_reply(reply)
    logger.info("[RELAY] session=%s chars=%d -> %d chars, %d tokens",
                session_id, len(task), len(result.text), result.tokens)
    return result
