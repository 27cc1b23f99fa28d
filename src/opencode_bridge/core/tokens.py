"""
Estimation approximative des tokens (1 token ~ 4 caractères).

Les longueurs sont comptées en unités UTF-16: un caractère hors BMP (emoji...)
compte pour 2, comme côté client JavaScript.
"""
import json
import math
from typing import Any

from .constants import CHARS_PER_TOKEN
from .content import extract_text


def utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le", errors="surrogatepass")) // 2


def estimate_tokens(text: str) -> int:
    """
    Estime le nombre de tokens d'un texte.
    
    Args:
        text: Texte à analyser
        
    Returns:
        ceil(longueur UTF-16 / 4)
    """
    if not text:
        return 0
    return math.ceil(utf16_length(text) / CHARS_PER_TOKEN)


def count_message_tokens(messages: Any) -> int:
    """
    Somme des estimations par message (texte extrait de chaque `content`).
    
    Utilisé par les requêtes de comptage (`count_tokens` et sondes sans
    `max_tokens`).
    """
    if not isinstance(messages, list):
        return 0
    
    total = 0
    for message in messages:
        if isinstance(message, dict):
            total += estimate_tokens(extract_text(message.get("content")))
    return total


def estimate_serialized_tokens(data: Any) -> int:
    """
    Estime les tokens de la sérialisation JSON compacte de `data`.
    
    Utilisé pour `usage.input_tokens` d'un appel chat complet: c'est la
    longueur du tableau de messages sérialisé qui compte, pas le texte extrait.
    """
    try:
        serialized = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return 0
    return estimate_tokens(serialized)
