"""
Services transverses (diffusion temps réel vers le dashboard).
"""

from .websocket_manager import ConnectionManager

__all__ = ["ConnectionManager"]
