"""
Dataclasses métier pour OpenCode Bridge.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import DEFAULT_MODEL


@dataclass
class BackendModel:
    """Modèle exposé par un provider du backend."""
    id: str  # "<providerID>/<modelID>"
    name: str
    provider: str
    provider_id: str
    cost: Optional[Dict[str, Any]] = None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convertit le modèle en dictionnaire (format dashboard)."""
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider,
            "providerID": self.provider_id,
            "cost": self.cost,
        }
    
    def to_anthropic(self) -> Dict[str, Any]:
        """Format attendu par `GET /v1/models`."""
        return {
            "id": self.id,
            "type": "model",
            "name": self.name,
            "supports_cached_previews": True,
            "supports_system_instructions": True,
        }


@dataclass
class Provider:
    """Provider déclaré par le backend."""
    id: str
    name: str
    source: Optional[str] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "source": self.source}


@dataclass
class UsageCounters:
    """Compteurs cumulés depuis le démarrage (ou le dernier reset)."""
    total_requests: int = 0
    total_tokens_used: int = 0
    
    def record(self, tokens: int) -> None:
        self.total_requests += 1
        self.total_tokens_used += max(0, tokens)
    
    def reset(self) -> None:
        self.total_requests = 0
        self.total_tokens_used = 0


@dataclass(frozen=True)
class RelayResult:
    """Réponse du backend réduite à son texte et ses tokens mesurés."""
    text: str
    tokens: int = 0


@dataclass
class BridgeState:
    """
    État partagé du bridge (une seule instance par processus).
    
    Détenu par la racine de composition (`create_app` ou le serveur stdio)
    et injecté dans le traducteur.
    """
    current_model: str = DEFAULT_MODEL
    usage: UsageCounters = field(default_factory=UsageCounters)
