"""Routes API pour la liste et la sélection des modèles.

Convention dans ce repo:
- `/api/models` : format interne (models/grouped/providers) utilisé par le dashboard.
- `/v1/models`  : format API Messages (`{data: [...]}`).
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ...core.exceptions import BackendUnavailableError, UnknownModelError
from ...proxy.registry import ModelRegistry
from ...proxy.translator import RequestTranslator
from ..deps import get_registry, get_translator, read_json_body

logger = logging.getLogger(__name__)

# Router dashboard (monté sous /api)
router = APIRouter()

# Router API Messages (monté sous /v1)
anthropic_router = APIRouter()


@router.get("/models")
async def api_get_models(registry: ModelRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """Retourne les modèles groupés par provider pour le dashboard."""
    return registry.to_dashboard()


@router.post("/model")
async def api_select_model(
    request: Request,
    translator: RequestTranslator = Depends(get_translator)
):
    """Sélectionne le modèle courant; la session backend est invalidée."""
    body = await read_json_body(request)
    model_id = body.get("modelId")
    try:
        model = await translator.select_model(model_id if isinstance(model_id, str) else "")
    except UnknownModelError as e:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": e.message}
        )
    return {"success": True, "model": model.to_dict()}


@router.post("/refresh-models")
async def api_refresh_models(translator: RequestTranslator = Depends(get_translator)):
    """Recharge le catalogue depuis le backend."""
    try:
        count = await translator.registry.refresh(translator.client)
    except BackendUnavailableError as e:
        logger.error("[MODELS] Rafraîchissement impossible: %s", e)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": e.message}
        )
    return {"success": True, "count": count}


@anthropic_router.get("/models")
async def anthropic_models(registry: ModelRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """Endpoint API Messages: GET /v1/models."""
    return registry.to_anthropic_list()


@anthropic_router.get("/models/list")
async def anthropic_models_list(registry: ModelRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """Alias: `/v1/models/list` (même payload que `/v1/models`)."""
    return registry.to_anthropic_list()
