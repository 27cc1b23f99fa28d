"""
Cœur métier d'OpenCode Bridge.
Modules indépendants sans dépendances externes au package.
"""

from .exceptions import (
    BridgeError,
    ConfigurationError,
    BackendUnavailableError,
    RelayError,
    UnknownModelError,
)
from .constants import (
    DEFAULT_BACKEND_URL,
    DEFAULT_PROXY_PORT,
    DEFAULT_MODEL,
    SESSION_MODE,
    COUNT_PROBE_SENTINEL,
    CHARS_PER_TOKEN,
)
from .content import extract_text
from .tokens import estimate_tokens, count_message_tokens, estimate_serialized_tokens
from .models import (
    BackendModel,
    Provider,
    UsageCounters,
    RelayResult,
    BridgeState,
)

__all__ = [
    # Exceptions
    "BridgeError",
    "ConfigurationError",
    "BackendUnavailableError",
    "RelayError",
    "UnknownModelError",
    # Constants
    "DEFAULT_BACKEND_URL",
    "DEFAULT_PROXY_PORT",
    "DEFAULT_MODEL",
    "SESSION_MODE",
    "COUNT_PROBE_SENTINEL",
    "CHARS_PER_TOKEN",
    # Content / tokens
    "extract_text",
    "estimate_tokens",
    "count_message_tokens",
    "estimate_serialized_tokens",
    # Models
    "BackendModel",
    "Provider",
    "UsageCounters",
    "RelayResult",
    "BridgeState",
]
