"""
Registre des modèles disponibles côté backend.

Rempli depuis `GET /provider` au démarrage et sur rafraîchissement explicite;
remplacé en bloc, jamais mis à jour incrémentalement.
"""
import logging
from typing import Any, Dict, List, Optional

from ..core.models import BackendModel, Provider
from .client import BackendClient

logger = logging.getLogger(__name__)


def parse_provider_catalog(data: Any) -> tuple[List[Provider], List[BackendModel]]:
    """
    Convertit le catalogue backend en providers + modèles triés.
    
    Args:
        data: `{all: {providerID: {name, source, models: {modelID: {name, cost}}}}}`
        
    Returns:
        (providers, modèles triés par nom de provider puis nom de modèle)
    """
    providers: List[Provider] = []
    models: List[BackendModel] = []
    
    catalog = data.get("all") if isinstance(data, dict) else None
    if not isinstance(catalog, dict):
        return providers, models
    
    for provider_id, provider_data in catalog.items():
        if not isinstance(provider_data, dict):
            continue
        provider_name = provider_data.get("name") or provider_id
        providers.append(Provider(
            id=provider_id,
            name=provider_name,
            source=provider_data.get("source"),
        ))
        
        provider_models = provider_data.get("models")
        if not isinstance(provider_models, dict):
            continue
        for model_id, model_data in provider_models.items():
            model_data = model_data if isinstance(model_data, dict) else {}
            models.append(BackendModel(
                id=f"{provider_id}/{model_id}",
                name=model_data.get("name") or model_id,
                provider=provider_name,
                provider_id=provider_id,
                cost=model_data.get("cost"),
            ))
    
    models.sort(key=lambda m: (m.provider, m.name))
    return providers, models


class ModelRegistry:
    """Cache des modèles du backend."""
    
    def __init__(self, models: Optional[List[BackendModel]] = None,
                 providers: Optional[List[Provider]] = None):
        self._models: List[BackendModel] = list(models or [])
        self._providers: List[Provider] = list(providers or [])
    
    @property
    def models(self) -> List[BackendModel]:
        return list(self._models)
    
    @property
    def providers(self) -> List[Provider]:
        return list(self._providers)
    
    def __len__(self) -> int:
        return len(self._models)
    
    def replace(self, providers: List[Provider], models: List[BackendModel]) -> None:
        self._providers = list(providers)
        self._models = list(models)
    
    async def refresh(self, client: BackendClient) -> int:
        """
        Recharge tout le catalogue depuis le backend.
        
        Returns:
            Nombre de modèles chargés
            
        Raises:
            BackendUnavailableError: Le contenu précédent est alors conservé
        """
        data = await client.list_providers()
        providers, models = parse_provider_catalog(data)
        self.replace(providers, models)
        logger.info("[MODELS] %d modèle(s) chargé(s) depuis %d provider(s)",
                    len(models), len(providers))
        return len(models)
    
    def find(self, model_id: str) -> Optional[BackendModel]:
        for model in self._models:
            if model.id == model_id:
                return model
        return None
    
    def grouped(self) -> Dict[str, List[BackendModel]]:
        """Modèles groupés par nom de provider (ordre du tri conservé)."""
        groups: Dict[str, List[BackendModel]] = {}
        for model in self._models:
            groups.setdefault(model.provider, []).append(model)
        return groups
    
    def to_dashboard(self) -> Dict[str, Any]:
        """Payload de `GET /api/models`."""
        return {
            "models": [m.to_dict() for m in self._models],
            "grouped": {
                provider: [m.to_dict() for m in models]
                for provider, models in self.grouped().items()
            },
            "providers": [p.to_dict() for p in self._providers],
        }
    
    def to_anthropic_list(self) -> Dict[str, Any]:
        """Payload de `GET /v1/models`."""
        return {"data": [m.to_anthropic() for m in self._models]}
