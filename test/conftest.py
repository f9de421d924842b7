"""
Shared pytest fixtures for twodo tests.
"""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch) -> None:
    """
    Ensure tests do not read/write the real settings file.

    Parameters
    ----------
    tmp_path : pathlib.Path
        Temporary path provided by pytest.
    monkeypatch : pytest.MonkeyPatch
        Monkeypatch fixture for environment updates.
    """
    monkeypatch.setenv("TWODO_CONFIG_PATH", str(tmp_path / "config.toml"))
