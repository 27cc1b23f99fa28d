"""
Routes de contrôle du dashboard: statut, reset de session, reset des stats.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...config.settings import BridgeSettings
from ...core.exceptions import BridgeError
from ...proxy.translator import RequestTranslator
from ..deps import get_settings, get_translator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status")
async def api_status(
    translator: RequestTranslator = Depends(get_translator),
    settings: BridgeSettings = Depends(get_settings)
):
    """Statut courant: modèle, compteurs, état de la session."""
    return {
        "proxyPort": settings.proxy_port,
        "backendUrl": settings.backend_url,
        **translator.status(),
    }


@router.post("/reset-session")
async def api_reset_session(translator: RequestTranslator = Depends(get_translator)):
    """Remplace la session backend par une nouvelle."""
    try:
        session_id = await translator.reset_session()
    except BridgeError as e:
        logger.error("[SESSION] Reset impossible: %s", e)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": e.message}
        )
    return {"success": True, "sessionId": session_id}


@router.post("/reset-stats")
async def api_reset_stats(translator: RequestTranslator = Depends(get_translator)):
    """Remet les compteurs d'usage à zéro."""
    await translator.reset_stats()
    return {"success": True}
