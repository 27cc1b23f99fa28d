"""
Routes d'identité attendues par le client au démarrage.

Aucune authentification n'est vérifiée: le bridge répond toujours
"authentifié" pour satisfaire les contrôles préalables du client.
"""
from fastapi import APIRouter

from ...core.constants import WHOAMI_PAYLOAD

router = APIRouter()


@router.get("/authenticate")
async def authenticate():
    return {"type": "authentication", "authenticated": True}


@router.get("/whoami")
async def whoami():
    return dict(WHOAMI_PAYLOAD)
