"""
OpenCode Bridge - expose l'API Messages au-dessus d'un serveur OpenCode local.
"""

__version__ = "1.0.0"
