"""
Dataclasses pour la configuration.
"""
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..core.constants import (
    DEFAULT_BACKEND_URL,
    DEFAULT_MODEL,
    DEFAULT_PROXY_HOST,
    DEFAULT_PROXY_PORT,
)


@dataclass
class BridgeSettings:
    """Configuration globale du bridge."""
    backend_url: str = DEFAULT_BACKEND_URL
    backend_password: str = ""
    backend_timeout: Optional[float] = None  # None = pas de timeout
    proxy_host: str = DEFAULT_PROXY_HOST
    proxy_port: int = DEFAULT_PROXY_PORT
    default_model: str = DEFAULT_MODEL
    workspace: str = field(default_factory=os.getcwd)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BridgeSettings":
        """Crée une instance depuis la table `[bridge]` du TOML."""
        defaults = cls()
        return cls(
            backend_url=_as_str(data.get("backend_url"), defaults.backend_url).rstrip("/"),
            backend_password=_as_str(data.get("backend_password"), defaults.backend_password),
            backend_timeout=_as_float(data.get("backend_timeout"), defaults.backend_timeout),
            proxy_host=_as_str(data.get("proxy_host"), defaults.proxy_host),
            proxy_port=_as_int(data.get("proxy_port"), defaults.proxy_port),
            default_model=_as_str(data.get("default_model"), defaults.default_model),
            workspace=_as_str(data.get("workspace"), defaults.workspace),
        )
    
    def to_dict(self, mask_password: bool = True) -> Dict[str, Any]:
        """Convertit la configuration en dictionnaire."""
        return {
            "backend_url": self.backend_url,
            "backend_password": "***" if mask_password and self.backend_password else self.backend_password,
            "backend_timeout": self.backend_timeout,
            "proxy_host": self.proxy_host,
            "proxy_port": self.proxy_port,
            "default_model": self.default_model,
            "workspace": self.workspace,
        }


def _as_str(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_float(value: Any, default: Optional[float]) -> Optional[float]:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        return parsed if parsed > 0 else None
    return default
