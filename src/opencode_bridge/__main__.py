"""
Point d'entrée pour `python -m opencode_bridge` / `opencode-bridge`.
"""
import argparse
import os
import sys

import uvicorn

from .config.loader import get_bridge_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="opencode-bridge", description="OpenCode Bridge")
    subparsers = parser.add_subparsers(dest="command")
    
    serve = subparsers.add_parser("serve", help="Démarre le bridge HTTP (défaut)")
    serve.add_argument("--host", default=None, help="Host (défaut: PROXY_HOST ou 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (défaut: PROXY_PORT ou 8200)")
    serve.add_argument("--reload", action="store_true", help="Activer le reload auto")
    
    subparsers.add_parser("mcp", help="Serveur d'outils sur stdio")
    
    setup = subparsers.add_parser("setup", help="Configure Claude Code pour utiliser le bridge")
    setup.add_argument("--port", type=int, default=None, help="Port du bridge")
    
    subparsers.add_parser("remove", help="Retire la configuration Claude Code")
    return parser


def main(argv=None):
    """Fonction principale."""
    args = build_parser().parse_args(argv)
    settings = get_bridge_settings()
    command = args.command or "serve"
    
    if command == "mcp":
        from .features.stdio_tools import run
        run(settings)
        return 0
    
    if command == "setup":
        from .features.claude_config import configure_claude_code
        path = configure_claude_code(args.port or settings.proxy_port)
        print(f"✅ Claude Code configuré: {path}")
        return 0
    
    if command == "remove":
        from .features.claude_config import unconfigure_claude_code
        path = unconfigure_claude_code()
        print(f"✅ Configuration Claude Code retirée: {path}")
        return 0
    
    host = getattr(args, "host", None) or settings.proxy_host
    port = getattr(args, "port", None) or settings.proxy_port
    
    # La factory relit la configuration: le port effectif doit y figurer
    os.environ["PROXY_PORT"] = str(port)

    print(f"🚀 Démarrage d'OpenCode Bridge sur {host}:{port}")
    
    uvicorn.run(
        "opencode_bridge.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=getattr(args, "reload", False)
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
