"""
Routes compatibles API Messages: /v1/messages et /v1/messages/count_tokens.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ...core.exceptions import BridgeError
from ...proxy.translator import RequestTranslator
from ..deps import get_translator, read_json_body

logger = logging.getLogger(__name__)

router = APIRouter()


def api_error_response(error: Exception, status_code: int = 500) -> JSONResponse:
    """Enveloppe d'erreur au format Anthropic."""
    message = error.message if isinstance(error, BridgeError) else str(error)
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": "api_error", "message": message}}
    )


@router.post("/messages")
async def create_message(
    request: Request,
    translator: RequestTranslator = Depends(get_translator)
):
    """
    Relaie une requête Messages vers la session OpenCode.
    
    Sans `max_tokens`, la requête est une sonde de comptage: `{tokens}`.
    """
    body = await read_json_body(request)
    try:
        return await translator.handle_chat(body)
    except BridgeError as e:
        logger.error("[MESSAGES] %s", e)
        return api_error_response(e)


@router.post("/messages/count_tokens")
async def count_tokens(
    request: Request,
    translator: RequestTranslator = Depends(get_translator)
):
    """Comptage local des tokens (aucun appel backend)."""
    body = await read_json_body(request)
    return translator.handle_count_tokens(body)
