"""
Front stdio (outils JSON-RPC) au-dessus du traducteur.
"""

from .server import StdioToolServer, TOOLS, build_translator, format_model_listing, run

__all__ = [
    "StdioToolServer",
    "TOOLS",
    "build_translator",
    "format_model_listing",
    "run",
]
