"""
Extraction de texte depuis le champ `content` d'un message.

Le champ peut être une chaîne, ou une liste mélangeant chaînes et objets
structurés (`{"type": "text", "text": ...}`, images, tool_use...).
Seul le texte est conservé (un `text` numérique non nul est converti en
chaîne); toute forme inconnue devient "".
"""
import math
from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class TextPart:
    """Partie brute (chaîne)."""
    text: str


@dataclass(frozen=True)
class StructuredPart:
    """Partie structurée; `text` est absent pour les types non textuels."""
    kind: Optional[str] = None
    text: Optional[str] = None


ContentPart = Union[TextPart, StructuredPart]


def _coerce_text(value: Any) -> Optional[str]:
    """Chaîne telle quelle; un nombre non nul devient sa forme texte (`12.0` -> "12")."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_part(part: Any) -> Optional[ContentPart]:
    """Convertit un élément de liste en ContentPart, ou None si inexploitable."""
    if isinstance(part, str):
        return TextPart(part)
    if isinstance(part, dict):
        kind = part.get("type")
        text = part.get("text")
        return StructuredPart(
            kind=kind if isinstance(kind, str) else None,
            text=_coerce_text(text),
        )
    return None


def part_text(part: Optional[ContentPart]) -> str:
    if isinstance(part, TextPart):
        return part.text
    if isinstance(part, StructuredPart) and part.text:
        return part.text
    return ""


def extract_text(content: Any) -> str:
    """
    Extrait le texte brut d'un contenu de message.
    
    Args:
        content: Chaîne, liste de parties, ou n'importe quoi d'autre
        
    Returns:
        Texte concaténé (sans séparateur), "" si rien d'exploitable
    """
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        return "".join(part_text(normalize_part(part)) for part in content)
    return ""
