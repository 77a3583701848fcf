"""Shared fixtures for the notes app tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from notes_app.config import get_settings
from notes_app.store import NoteStore


@pytest.fixture()
def notes_path(tmp_path: Path) -> Path:
    """Path to a notes file that does not exist yet, in a nested directory."""
    return tmp_path / "data" / "notes.json"


@pytest.fixture()
def store(notes_path: Path) -> NoteStore:
    """Return a NoteStore backed by a temp JSON file."""
    return NoteStore.open(notes_path)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Isolate settings from the developer's environment and .env file."""
    monkeypatch.chdir(tmp_path)
    for var in ("NOTES_STORAGE_PATH", "NOTES_STRICT_LOAD", "NOTES_PORT", "NOTES_HOST"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
