"""Tests for notes_app.main and notes_app.config — startup wiring."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from notes_app.config import Settings, get_settings
from notes_app.console import EXIT, SERVE
from notes_app.main import main


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.storage_path == Path("data") / "notes.json"
        assert settings.port == 8080
        assert settings.strict_load is False

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOTES_PORT", "9000")
        monkeypatch.setenv("NOTES_STRICT_LOAD", "true")
        settings = Settings()
        assert settings.port == 9000
        assert settings.strict_load is True

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestMain:
    def test_web_mode_starts_server(self, notes_path: Path) -> None:
        with patch("notes_app.main.uvicorn.run") as run:
            code = main(["web", "--storage-path", str(notes_path), "--port", "9123"])
        assert code == 0
        run.assert_called_once()
        assert run.call_args.kwargs["port"] == 9123

    def test_cli_exit_does_not_serve(self, notes_path: Path) -> None:
        with (
            patch("notes_app.main.NotesConsole.run", return_value=EXIT),
            patch("notes_app.main.uvicorn.run") as run,
        ):
            code = main(["--storage-path", str(notes_path)])
        assert code == 0
        run.assert_not_called()

    def test_cli_serve_starts_server(self, notes_path: Path) -> None:
        with (
            patch("notes_app.main.NotesConsole.run", return_value=SERVE),
            patch("notes_app.main.uvicorn.run") as run,
        ):
            assert main(["--storage-path", str(notes_path)]) == 0
        run.assert_called_once()

    def test_strict_corrupt_file_exits_1(
        self, notes_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        notes_path.parent.mkdir(parents=True)
        notes_path.write_text("garbage", encoding="utf-8")
        monkeypatch.setenv("NOTES_STRICT_LOAD", "1")
        with patch("notes_app.main.uvicorn.run") as run:
            code = main(["web", "--storage-path", str(notes_path)])
        assert code == 1
        run.assert_not_called()

    def test_lenient_corrupt_file_starts_empty(self, notes_path: Path) -> None:
        notes_path.parent.mkdir(parents=True)
        notes_path.write_text("garbage", encoding="utf-8")
        with patch("notes_app.main.uvicorn.run") as run:
            assert main(["web", "--storage-path", str(notes_path)]) == 0
        store = run.call_args.args[0].state.store
        assert store.count() == 0
