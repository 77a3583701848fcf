"""Exceptions raised by the note store.

Front-ends decide how to present them: the console prints ``message``,
the HTTP layer maps each class to a status code.
"""

from __future__ import annotations

from typing import Any


class NotesError(Exception):
    """Base exception for all note store errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    code = "NOTES_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logs and API payloads."""
        return {"code": self.code, "message": self.message, "details": self.details}


class NoteValidationError(NotesError):
    """A required field is missing or empty."""

    code = "VALIDATION_FAILED"


class NoteNotFoundError(NotesError):
    """No note with the given id."""

    code = "NOTE_NOT_FOUND"

    def __init__(self, note_id: str) -> None:
        super().__init__(f"Note not found: {note_id}", {"note_id": note_id})
        self.note_id = note_id


class NoteIndexError(NotesError, IndexError):
    """Positional argument outside ``[0, count)``."""

    code = "INDEX_OUT_OF_RANGE"

    def __init__(self, index: int, count: int) -> None:
        super().__init__(
            f"Invalid note index {index} (have {count} notes)",
            {"index": index, "count": count},
        )
        self.index = index
        self.count = count


class StorageError(NotesError):
    """Reading or writing the notes file failed."""

    code = "STORAGE_FAILED"


class CorruptStoreError(StorageError):
    """The notes file exists but does not hold a valid note collection."""

    code = "STORE_CORRUPTED"
