"""In-memory note collection kept in sync with a JSON file.

``NoteStore`` is the only owner of the collection. The console and the HTTP
handlers both go through its public methods, which all run under one lock.
Mutations are staged on a copy of the collection and only become visible
once the copy has been written to disk.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from .exceptions import (
    NoteIndexError,
    NoteNotFoundError,
    NotesError,
    NoteValidationError,
)
from .metrics import NOTES_STORED, STORE_OPERATIONS
from .models import Note, NotesStats, local_now
from .storage import JsonNoteStorage

logger = logging.getLogger("notes_app.store")


def _require_title(title: str) -> str:
    if not title or not title.strip():
        raise NoteValidationError("Title cannot be empty", {"field": "title"})
    return title.strip()


def _clean_tags(tags: Iterable[str] | None) -> list[str]:
    """Strip tags and drop blank ones. Order and duplicates are kept."""
    if not tags:
        return []
    return [t.strip() for t in tags if t and t.strip()]


class NoteStore:
    """Thread-safe CRUD and search over the note collection."""

    def __init__(self, storage: JsonNoteStorage) -> None:
        self._storage = storage
        self._lock = threading.Lock()
        self._notes: list[Note] = storage.load()
        NOTES_STORED.set(len(self._notes))

    @classmethod
    def open(cls, path: Path, strict: bool = False) -> NoteStore:
        """Load the store backed by the JSON file at ``path``."""
        return cls(JsonNoteStorage(path, strict=strict))

    @property
    def path(self) -> Path:
        return self._storage.path

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self, title: str, content: str = "", tags: list[str] | None = None
    ) -> Note:
        """Append a new note and persist the collection."""
        with self._operation("create"):
            note = Note.create(_require_title(title), content, _clean_tags(tags))
            self._commit([*self._notes, note])
        logger.info("Created note %s — '%s'", note.id, note.title)
        return note.model_copy(deep=True)

    def update(
        self,
        note_id: str,
        title: str | None = None,
        content: str | None = None,
        tags: list[str] | None = None,
    ) -> Note:
        """Change the given fields of a note. ``None`` leaves a field as is."""
        with self._operation("update"):
            note = self._update_at(self._position(note_id), title, content, tags)
        logger.info("Updated note %s", note.id)
        return note

    def update_by_index(
        self,
        index: int,
        title: str | None = None,
        content: str | None = None,
        tags: list[str] | None = None,
    ) -> Note:
        """Like ``update`` but addressed by position in the current listing."""
        with self._operation("update"):
            self._check_index(index)
            note = self._update_at(index, title, content, tags)
        logger.info("Updated note %s (index %d)", note.id, index)
        return note

    def delete_by_id(self, note_id: str) -> bool:
        """Remove a note. Returns False when no note has ``note_id``."""
        with self._operation("delete"):
            try:
                position = self._position(note_id)
            except NoteNotFoundError:
                return False
            self._remove_at(position)
        logger.info("Deleted note %s", note_id)
        return True

    def delete_by_index(self, index: int) -> Note:
        """Remove the note at ``index`` and return it."""
        with self._operation("delete"):
            self._check_index(index)
            removed = self._remove_at(index)
        logger.info("Deleted note %s (index %d)", removed.id, index)
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_notes(self) -> list[Note]:
        """Every note in insertion order."""
        with self._operation("list"):
            return [n.model_copy(deep=True) for n in self._notes]

    def get_by_id(self, note_id: str) -> Note:
        with self._operation("get"):
            return self._notes[self._position(note_id)].model_copy(deep=True)

    def get_by_index(self, index: int) -> Note:
        with self._operation("get"):
            self._check_index(index)
            return self._notes[index].model_copy(deep=True)

    def search(self, query: str) -> list[Note]:
        """Notes whose title, content or any tag contains ``query``.

        Matching is a case-insensitive substring test; results keep
        collection order.
        """
        q = query.casefold()
        with self._operation("search"):
            results = [
                n.model_copy(deep=True)
                for n in self._notes
                if q in n.title.casefold()
                or q in n.content.casefold()
                or any(q in t.casefold() for t in n.tags)
            ]
        logger.debug("Search '%s' matched %d notes", query, len(results))
        return results

    def count(self) -> int:
        with self._lock:
            return len(self._notes)

    def stats(self) -> NotesStats:
        """Note count and number of distinct tags."""
        with self._operation("stats"):
            tags = {t for n in self._notes for t in n.tags}
            return NotesStats(
                total_notes=len(self._notes),
                total_tags=len(tags),
                last_updated=local_now(),
            )

    # ------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except NotesError as exc:
                STORE_OPERATIONS.labels(operation=name, status="error").inc()
                logger.debug("Store %s failed: %s", name, exc.message)
                raise
            STORE_OPERATIONS.labels(operation=name, status="ok").inc()

    def _commit(self, notes: list[Note]) -> None:
        """Persist ``notes`` then make them the current collection."""
        self._storage.save(notes)
        self._notes = notes
        NOTES_STORED.set(len(notes))

    def _position(self, note_id: str) -> int:
        for i, note in enumerate(self._notes):
            if note.id == note_id:
                return i
        raise NoteNotFoundError(note_id)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._notes):
            raise NoteIndexError(index, len(self._notes))

    def _update_at(
        self,
        index: int,
        title: str | None,
        content: str | None,
        tags: list[str] | None,
    ) -> Note:
        staged = self._notes[index].model_copy(deep=True)
        staged.apply_update(
            title=None if title is None else _require_title(title),
            content=content,
            tags=None if tags is None else _clean_tags(tags),
        )
        notes = list(self._notes)
        notes[index] = staged
        self._commit(notes)
        return staged.model_copy(deep=True)

    def _remove_at(self, index: int) -> Note:
        notes = list(self._notes)
        removed = notes.pop(index)
        self._commit(notes)
        return removed
