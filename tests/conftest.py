from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.app_builder import AppBuilder


@pytest.fixture
def app_builder(tmp_path: Path) -> AppBuilder:
    """Provide a reusable app builder rooted at the pytest tmp_path."""
    return AppBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("SPIN_INFO_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
