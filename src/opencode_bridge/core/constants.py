"""
Constantes globales pour OpenCode Bridge.
"""

# ============================================================================
# CONFIGURATION PAR DÉFAUT
# ============================================================================
DEFAULT_BACKEND_URL = "http://127.0.0.1:4096"
DEFAULT_PROXY_HOST = "0.0.0.0"
DEFAULT_PROXY_PORT = 8200
DEFAULT_MODEL = "minimax-m2.5-free"  # Modèle gratuit du backend

# Utilisateur HTTP Basic imposé par `opencode serve`
BACKEND_USERNAME = "opencode"

# ============================================================================
# SESSION BACKEND
# ============================================================================
SESSION_MODE = "agent"

# ============================================================================
# RELAY
# ============================================================================
# Sonde envoyée par le client pour compter les tokens: jamais relayée
COUNT_PROBE_SENTINEL = "count"
MIN_TASK_CHARS = 2  # Un message utilisateur doit dépasser cette longueur
NOOP_REPLY_TEXT = "OK"

# ============================================================================
# TOKENS
# ============================================================================
CHARS_PER_TOKEN = 4

# ============================================================================
# API ANTHROPIC
# ============================================================================
STOP_REASON = "end_turn"
WHOAMI_PAYLOAD = {"type": "user", "id": "opencode-user", "email": "opencode@local"}
