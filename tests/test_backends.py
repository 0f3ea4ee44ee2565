from unittest.mock import MagicMock

from filesearch.core.search.backends import create_backend
from filesearch.core.search.ripgrep import RipgrepBackend
from filesearch.core.search.walker import WalkBackend
from filesearch.core.settings import Settings


def test_python_backend_uses_walk_settings():
    backend = create_backend(Settings(BACKEND="python", FOLLOW_SYMLINKS=True, MAX_DEPTH=3))
    assert isinstance(backend, WalkBackend)
    assert backend.name == "python"
    assert backend.follow_symlinks is True
    assert backend.max_depth == 3


def test_ripgrep_backend_uses_configured_tool(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda _name: None)
    backend = create_backend(Settings(BACKEND="ripgrep", RG_PATH="/opt/rg/bin/rg"))
    assert isinstance(backend, RipgrepBackend)
    assert backend.tool_path == "/opt/rg/bin/rg"


def test_ripgrep_backend_without_tool_still_uses_ripgrep(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda _name: None)
    backend = create_backend(Settings(BACKEND="ripgrep"))
    assert isinstance(backend, RipgrepBackend)
    assert backend.tool_path == "rg"


def test_auto_prefers_ripgrep_when_found(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    logger = MagicMock()
    backend = create_backend(Settings(BACKEND="auto"), logger=logger)
    assert isinstance(backend, RipgrepBackend)
    assert backend.tool_path == "/usr/bin/rg"
    logger.warning.assert_not_called()


def test_auto_falls_back_to_walk_when_tool_missing(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda _name: None)
    logger = MagicMock()
    backend = create_backend(Settings(BACKEND="auto"), logger=logger)
    assert isinstance(backend, WalkBackend)
    logger.warning.assert_called_once()
    assert logger.warning.call_args.args[0] == "search_backend_fallback"
