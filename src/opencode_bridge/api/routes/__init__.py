"""
Routes API par domaine.
"""

from . import messages
from . import models
from . import auth
from . import control
from . import health

__all__ = [
    "messages",
    "models",
    "auth",
    "control",
    "health",
]
