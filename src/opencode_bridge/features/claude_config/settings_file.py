"""
Configuration du client Claude Code pour passer par le bridge.

Modifie `~/.claude/settings.json` (clé `env`) sans toucher aux autres réglages.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

BRIDGE_ENV_KEYS = ("ANTHROPIC_BASE_URL", "ANTHROPIC_API_KEY")
PLACEHOLDER_API_KEY = "test-key"  # Le bridge n'authentifie pas


def default_settings_path() -> Path:
    return Path(os.path.expanduser("~")) / ".claude" / "settings.json"


def read_settings(path: Path) -> Dict[str, Any]:
    """Lit le fichier de réglages; `{}` s'il est absent ou illisible."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("[SETUP] Réglages illisibles (%s), repartis de zéro: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def write_settings(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def configure_claude_code(port: int, settings_path: Optional[Path] = None) -> Path:
    """
    Pointe Claude Code vers le bridge local.
    
    Args:
        port: Port d'écoute du bridge
        settings_path: Fichier de réglages (défaut: ~/.claude/settings.json)
        
    Returns:
        Chemin du fichier écrit
    """
    path = Path(settings_path) if settings_path else default_settings_path()
    settings = read_settings(path)
    
    env = settings.get("env")
    if not isinstance(env, dict):
        env = {}
    env["ANTHROPIC_BASE_URL"] = f"http://localhost:{port}"
    env["ANTHROPIC_API_KEY"] = PLACEHOLDER_API_KEY
    settings["env"] = env
    
    write_settings(path, settings)
    return path


def unconfigure_claude_code(settings_path: Optional[Path] = None) -> Path:
    """
    Retire la configuration du bridge.
    
    Supprime la clé `env` si elle devient vide, et le fichier s'il ne
    contient plus rien.
    """
    path = Path(settings_path) if settings_path else default_settings_path()
    settings = read_settings(path)
    
    env = settings.get("env")
    if isinstance(env, dict):
        for key in BRIDGE_ENV_KEYS:
            env.pop(key, None)
        if not env:
            settings.pop("env")
    
    if settings:
        write_settings(path, settings)
    elif path.exists():
        path.unlink()
    return path
