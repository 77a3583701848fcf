"""Pydantic models for the notes app."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


def local_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


class Note(BaseModel):
    """A single note with metadata.

    Field order matches the persisted JSON layout.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str = Field(..., description="Note title")
    content: str = Field(default="", description="Note body, may span lines")
    created_at: datetime = Field(
        default_factory=local_now, description="ISO-8601 creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=local_now, description="ISO-8601 last update timestamp"
    )
    tags: list[str] = Field(default_factory=list, description="List of tags")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_local_time(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.astimezone()
        return value

    @classmethod
    def create(cls, title: str, content: str, tags: list[str]) -> Note:
        """Build a fresh note with a new id and matching timestamps."""
        now = local_now()
        return cls(
            title=title,
            content=content,
            tags=list(tags),
            created_at=now,
            updated_at=now,
        )

    def apply_update(
        self,
        title: str | None = None,
        content: str | None = None,
        tags: list[str] | None = None,
    ) -> None:
        """Replace the given fields and touch ``updated_at``.

        ``None`` means "leave as is". The timestamp is refreshed even when
        nothing else changes, and never moves backwards.
        """
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content
        if tags is not None:
            self.tags = list(tags)
        self.updated_at = max(local_now(), self.updated_at)


class NoteCreate(BaseModel):
    """Request body for creating a note."""

    title: str = Field(..., min_length=1, description="Note title")
    content: str = Field(default="", description="Note body")
    tags: list[str] = Field(default_factory=list, description="List of tags")


class NoteUpdate(BaseModel):
    """Request body for updating a note. Omitted fields are left unchanged."""

    title: str | None = Field(default=None, min_length=1)
    content: str | None = None
    tags: list[str] | None = None


class NotesStats(BaseModel):
    """Aggregate figures about the collection."""

    total_notes: int
    total_tags: int
    last_updated: datetime
