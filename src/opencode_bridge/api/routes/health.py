"""
Routes API pour le health check.
"""
from fastapi import APIRouter, Depends

from ...config.settings import BridgeSettings
from ...proxy.translator import RequestTranslator
from ..deps import get_settings, get_translator

router = APIRouter()


@router.get("/health")
async def health_check(
    translator: RequestTranslator = Depends(get_translator),
    settings: BridgeSettings = Depends(get_settings)
):
    """Health check avec infos sur le backend, le registre et la session."""
    return {
        "status": "ok",
        "backend_url": settings.backend_url,
        "models_loaded": len(translator.registry),
        "session": "active" if translator.sessions.is_active else "inactive",
    }
