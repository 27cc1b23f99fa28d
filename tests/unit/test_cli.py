"""
Tests unitaires pour le point d'entrée CLI.
"""
from unittest.mock import patch

from opencode_bridge import __main__ as cli


def test_parser_defaults_to_serve():
    args = cli.build_parser().parse_args([])
    assert args.command is None


def test_serve_runs_uvicorn_factory(monkeypatch):
    monkeypatch.setenv("PROXY_PORT", "8200")
    with patch.object(cli.uvicorn, "run") as run:
        assert cli.main(["serve", "--port", "9300"]) == 0
    
    _, kwargs = run.call_args
    assert run.call_args.args[0] == "opencode_bridge.main:create_app"
    assert kwargs["factory"] is True
    assert kwargs["port"] == 9300


def test_setup_and_remove(tmp_path, monkeypatch):
    target = tmp_path / "settings.json"
    monkeypatch.setattr(
        "opencode_bridge.features.claude_config.settings_file.default_settings_path",
        lambda: target,
    )
    
    assert cli.main(["setup", "--port", "8300"]) == 0
    assert "http://localhost:8300" in target.read_text(encoding="utf-8")
    
    assert cli.main(["remove"]) == 0
    assert not target.exists()
