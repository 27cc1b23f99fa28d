"""opencode_bridge.config.loader

Chargement de la configuration: `config.toml` (optionnel) + variables d'environnement.

Ordre de priorité:
1. Variables d'environnement (OPENCODE_SERVER_URL, OPENCODE_SERVER_PASSWORD, PROXY_PORT...)
2. Table `[bridge]` de config.toml (les valeurs `${VAR}` sont expansées)
3. Valeurs par défaut de `BridgeSettings`
"""
import os
import re
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..core.exceptions import ConfigurationError
from .settings import BridgeSettings

# Cache global de configuration
_config_cache: Optional[Dict[str, Any]] = None

# Variable d'environnement -> clé de `BridgeSettings`
ENV_OVERRIDES = {
    "OPENCODE_SERVER_URL": "backend_url",
    "OPENCODE_SERVER_PASSWORD": "backend_password",
    "OPENCODE_BACKEND_TIMEOUT": "backend_timeout",
    "PROXY_HOST": "proxy_host",
    "PROXY_PORT": "proxy_port",
    "OPENCODE_BRIDGE_MODEL": "default_model",
    "OPENCODE_BRIDGE_WORKSPACE": "workspace",
}


def _expand_env_vars(obj: Any) -> Any:
    """
    Récursivement étend les variables d'environnement ${VAR} dans la config.
    
    Args:
        obj: Valeur à traiter (str, dict, list)
        
    Returns:
        Valeur avec variables d'environnement expansées
    """
    if isinstance(obj, str):
        def replace_env_var(match):
            var_name = match.group(1)
            return os.environ.get(var_name, match.group(0))
        return re.sub(r'\$\{([^}]+)\}', replace_env_var, obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def _default_config_path() -> str:
    # Structure: project/src/opencode_bridge/config/loader.py
    current_file = os.path.abspath(__file__)
    project_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(current_file))))
    return os.environ.get("OPENCODE_BRIDGE_CONFIG") or os.path.join(project_dir, "config.toml")


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Charge la configuration depuis config.toml.
    
    Le fichier par défaut est optionnel: absent, la configuration est vide.
    Un chemin explicite doit exister.
    
    Args:
        config_path: Chemin vers le fichier config (optionnel)
        
    Returns:
        Dictionnaire de configuration
        
    Raises:
        ConfigurationError: Si le fichier explicite n'existe pas ou est invalide
    """
    global _config_cache
    
    if _config_cache is not None:
        return _config_cache
    
    explicit = config_path is not None
    path = Path(config_path if explicit else _default_config_path())
    
    if not path.exists():
        if explicit:
            raise ConfigurationError(
                message=f"Fichier de configuration non trouvé: {path}",
                config_key="config_path"
            )
        _config_cache = {}
        return _config_cache
    
    try:
        with open(path, "rb") as f:
            raw_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            message=f"config.toml invalide: {e}",
            config_key="config_path"
        ) from e
    
    _config_cache = _expand_env_vars(raw_config)
    return _config_cache


def reload_config(config_path: str = None) -> Dict[str, Any]:
    """
    Recharge la configuration depuis le fichier.
    
    Returns:
        Nouvelle configuration chargée
    """
    _clear_config_cache()
    return load_config(config_path)


def _clear_config_cache():
    """Vide le cache de configuration."""
    global _config_cache
    _config_cache = None


def get_config() -> Dict[str, Any]:
    """Retourne la configuration en cache (chargée si nécessaire)."""
    return load_config()


def get_bridge_settings(
    config: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> BridgeSettings:
    """
    Construit `BridgeSettings` à partir du TOML et de l'environnement.
    
    Args:
        config: Configuration déjà chargée (défaut: get_config())
        environ: Environnement à utiliser (défaut: os.environ)
        
    Returns:
        Settings résolus
    """
    if config is None:
        config = get_config()
    if environ is None:
        environ = os.environ
    
    bridge_obj = config.get("bridge")
    merged: Dict[str, Any] = dict(bridge_obj) if isinstance(bridge_obj, dict) else {}
    
    for env_name, key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is not None and value.strip():
            merged[key] = value
    
    return BridgeSettings.from_dict(merged)
