"""Shared pytest fixtures."""

import os

import pytest

import bintext.config


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.bintext and BINTEXT_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)

    for key in list(os.environ):
        if key.upper().startswith("BINTEXT_"):
            monkeypatch.delenv(key)

    bintext.config.reset_settings()
    yield home
    bintext.config.reset_settings()
