"""
Réglages client (Claude Code) pour utiliser le bridge.
"""

from .settings_file import configure_claude_code, unconfigure_claude_code, default_settings_path

__all__ = [
    "configure_claude_code",
    "unconfigure_claude_code",
    "default_settings_path",
]
