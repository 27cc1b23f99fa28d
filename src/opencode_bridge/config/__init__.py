"""
Configuration d'OpenCode Bridge.
"""

from .loader import load_config, reload_config, get_config, get_bridge_settings
from .settings import BridgeSettings

__all__ = [
    "load_config",
    "reload_config",
    "get_config",
    "get_bridge_settings",
    "BridgeSettings",
]
