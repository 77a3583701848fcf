"""JSON file-based storage layer for the notes app.

The whole collection lives in one JSON array. Writes go to a temp file in
the same directory which is then renamed over the target, so readers never
see a half-written document.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from .exceptions import CorruptStoreError, StorageError
from .models import Note, local_now

logger = logging.getLogger("notes_app.storage")

DEFAULT_STORAGE_PATH = Path("data") / "notes.json"

_NOTES = TypeAdapter(list[Note])


def load_notes(path: Path, strict: bool = False) -> list[Note]:
    """Load the note collection from ``path``.

    A missing or empty file yields an empty list. A file that cannot be
    parsed raises ``CorruptStoreError`` when ``strict`` is set; otherwise it
    is copied aside and an empty list is returned.
    """
    path = Path(path)
    if not path.exists():
        logger.info("No storage file found at %s — starting fresh", path)
        return []

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise StorageError(f"Failed to read notes from {path}: {exc}") from exc

    if not raw.strip():
        logger.warning("Storage file %s is empty — starting fresh", path)
        return []

    try:
        notes = _NOTES.validate_json(raw)
        _check_unique_ids(notes)
    except (ValidationError, ValueError) as exc:
        if strict:
            raise CorruptStoreError(
                f"Notes file {path} is corrupt: {exc}", {"path": str(path)}
            ) from exc
        backup = _quarantine(path)
        logger.error(
            "Failed to load notes from %s: %s — backup: %s, starting fresh",
            path,
            exc,
            backup or "none",
        )
        return []

    logger.info("Loaded %d notes from %s", len(notes), path)
    return notes


def save_notes(path: Path, notes: Sequence[Note]) -> None:
    """Atomically replace the file at ``path`` with ``notes``."""
    path = Path(path)
    payload = _NOTES.dump_json(list(notes), indent=2)
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path is not None:
            _discard(tmp_path)
        raise StorageError(f"Failed to write notes to {path}: {exc}") from exc
    logger.debug("Wrote %d notes to %s", len(notes), path)


def _check_unique_ids(notes: list[Note]) -> None:
    seen: set[str] = set()
    for note in notes:
        if note.id in seen:
            raise ValueError(f"duplicate note id {note.id}")
        seen.add(note.id)


def _quarantine(path: Path) -> Path | None:
    """Copy a corrupt notes file next to itself so it is not overwritten.

    Returns the backup path, or None when the copy could not be made.
    """
    stamp = local_now().strftime("%Y%m%d-%H%M%S-%f")
    backup = path.with_name(f"{path.name}.corrupt-{stamp}")
    counter = 1
    while backup.exists():
        backup = path.with_name(f"{path.name}.corrupt-{stamp}-{counter}")
        counter += 1
    try:
        shutil.copy2(path, backup)
    except OSError as exc:
        logger.error("Could not back up corrupt file %s to %s: %s", path, backup, exc)
        return None
    return backup


def _discard(tmp_path: Path) -> None:
    try:
        tmp_path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove temp file %s: %s", tmp_path, exc)


class JsonNoteStorage:
    """Manages note persistence using a local JSON file."""

    def __init__(
        self, storage_path: Path = DEFAULT_STORAGE_PATH, strict: bool = False
    ) -> None:
        self._path = Path(storage_path)
        self._strict = strict

    @property
    def path(self) -> Path:
        """Location of the notes file."""
        return self._path

    def load(self) -> list[Note]:
        return load_notes(self._path, strict=self._strict)

    def save(self, notes: Sequence[Note]) -> None:
        save_notes(self._path, notes)
