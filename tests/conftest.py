"""Shared pytest fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from btlr.config.config import ENV_PREFIX


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the user's ``~/.btlr.toml`` and ``BTLR_*`` variables out of every test."""

    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)
    return home


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Create files (with parent directories) below ``tmp_path``."""

    def _make(*relative_paths: str) -> Path:
        for relative in relative_paths:
            target = tmp_path / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            _ = target.write_text("hello")
        return tmp_path

    return _make
