"""
Traduction des requêtes Messages vers le backend OpenCode.
"""

from .client import BackendClient, create_backend_client
from .session import SessionManager
from .relay import relay, select_task_message, parse_backend_reply
from .registry import ModelRegistry, parse_provider_catalog
from .translator import RequestTranslator, is_count_probe

__all__ = [
    "BackendClient",
    "create_backend_client",
    "SessionManager",
    "relay",
    "select_task_message",
    "parse_backend_reply",
    "ModelRegistry",
    "parse_provider_catalog",
    "RequestTranslator",
    "is_count_probe",
]
