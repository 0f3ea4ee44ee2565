import asyncio
import os
import stat

import pytest


@pytest.fixture(autouse=True)
def filesearch_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("FILESEARCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("FILESEARCH_LOG_LEVEL", "WARNING")


class FakeBackend:
    """In-memory listing backend: root URI -> relative paths it reports."""

    name = "fake"

    def __init__(self, listings=None, failures=None):
        self.listings = dict(listings or {})
        self.failures = dict(failures or {})
        self.calls = []
        self.delivered = []
        self.saw_cancellation = False

    async def search(self, root_uri, options, accept, token):
        self.calls.append((root_uri, options))
        if root_uri in self.failures:
            raise self.failures[root_uri]
        for rel in self.listings.get(root_uri, []):
            if token.is_cancellation_requested:
                self.saw_cancellation = True
                return
            self.delivered.append((root_uri, rel))
            accept(rel)
            # interleave roots the way concurrent processes would
            await asyncio.sleep(0)


@pytest.fixture
def fake_backend():
    return FakeBackend


@pytest.fixture
def workspace(tmp_path):
    """A root holding src/a.ts, src/b.ts and README.md."""
    root = tmp_path / "ws"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.ts").write_text("export const a = 1;\n", encoding="utf-8")
    (root / "src" / "b.ts").write_text("export const b = 2;\n", encoding="utf-8")
    (root / "README.md").write_text("# ws\n", encoding="utf-8")
    return root


@pytest.fixture
def fake_tool(tmp_path):
    """Write an executable shell script standing in for the listing tool."""
    if os.name == "nt":
        pytest.skip("shell-script tools need a POSIX shell")

    def _make(body: str, name: str = "fake-rg") -> str:
        path = tmp_path / "bin" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make
