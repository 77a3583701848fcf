"""Entry point for the notes app.

Usage:
    python -m notes_app.main          # interactive menu
    python -m notes_app.main web      # HTTP server only
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from .api import create_app
from .config import Settings, get_settings
from .console import SERVE, NotesConsole
from .exceptions import StorageError
from .store import NoteStore

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

logger = logging.getLogger("notes_app")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def run_server(store: NoteStore, settings: Settings) -> None:
    """Serve ``store`` over HTTP until interrupted."""
    url = f"http://{settings.host}:{settings.port}"
    print(f"Web server starting on {url}")
    print(f"API at {url}/api/*")
    print("-" * 60)
    logger.info("Serving %d notes from %s", store.count(), store.path)
    uvicorn.run(
        create_app(store, settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="notes-app", description="Personal notes")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=("cli", "web"),
        default="cli",
        help="'web' starts the HTTP server directly (default: cli)",
    )
    parser.add_argument("--storage-path", type=Path, help="Notes JSON file")
    parser.add_argument("--host", help="Web server bind address")
    parser.add_argument("--port", type=int, help="Web server port")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {
        key: value
        for key, value in (
            ("storage_path", args.storage_path),
            ("host", args.host),
            ("port", args.port),
        )
        if value is not None
    }
    settings = get_settings().model_copy(update=overrides)
    setup_logging(settings.log_level)

    try:
        store = NoteStore.open(settings.storage_path, strict=settings.strict_load)
    except StorageError as exc:
        logger.error("Cannot open notes store: %s", exc.to_dict())
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    if args.mode == "web":
        run_server(store, settings)
        return 0

    if NotesConsole(store).run() == SERVE:
        run_server(store, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
