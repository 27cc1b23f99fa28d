"""
Router principal de l'API.
"""
from fastapi import APIRouter

from .routes import (
    messages,
    models,
    auth,
    control,
    health,
)

# Router principal
api_router = APIRouter()

# === API MESSAGES (client) ===
api_router.include_router(messages.router, prefix="/v1", tags=["messages"])
api_router.include_router(models.anthropic_router, prefix="/v1", tags=["models-anthropic"])
api_router.include_router(auth.router, prefix="/v1", tags=["auth"])

# === DASHBOARD ===
api_router.include_router(models.router, prefix="/api", tags=["models"])
api_router.include_router(control.router, prefix="/api", tags=["control"])
api_router.include_router(health.router, prefix="", tags=["health"])
