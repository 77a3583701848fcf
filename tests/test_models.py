"""Unit tests for notes_app.models — the Note entity."""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from notes_app.models import Note, NoteCreate, NoteUpdate


class TestNoteCreate:
    def test_create_sets_fields(self) -> None:
        note = Note.create("Hello", "World", ["a", "b"])
        assert note.id
        assert note.title == "Hello"
        assert note.content == "World"
        assert note.tags == ["a", "b"]

    def test_timestamps_equal_and_aware(self) -> None:
        note = Note.create("T", "", [])
        assert note.created_at == note.updated_at
        assert note.created_at.tzinfo is not None

    def test_ids_are_unique(self) -> None:
        ids = {Note.create("T", "", []).id for _ in range(200)}
        assert len(ids) == 200

    def test_tags_list_is_copied(self) -> None:
        tags = ["x"]
        note = Note.create("T", "", tags)
        tags.append("y")
        assert note.tags == ["x"]

    def test_content_may_span_lines(self) -> None:
        note = Note.create("T", "line one\nline two", [])
        assert note.content.splitlines() == ["line one", "line two"]


class TestApplyUpdate:
    def test_only_given_fields_change(self) -> None:
        note = Note.create("Title", "Body", ["tag"])
        note.apply_update(content="New body")
        assert note.title == "Title"
        assert note.content == "New body"
        assert note.tags == ["tag"]

    def test_empty_string_is_a_value_not_absent(self) -> None:
        note = Note.create("Title", "Body", ["tag"])
        note.apply_update(content="", tags=[])
        assert note.content == ""
        assert note.tags == []

    def test_touch_without_fields_advances_updated_at(self) -> None:
        note = Note.create("Title", "Body", [])
        later = note.created_at + timedelta(seconds=5)
        with patch("notes_app.models.local_now", return_value=later):
            note.apply_update()
        assert note.updated_at == later
        assert note.created_at < note.updated_at

    def test_updated_at_never_moves_backwards(self) -> None:
        note = Note.create("Title", "Body", [])
        earlier = note.created_at - timedelta(hours=1)
        with patch("notes_app.models.local_now", return_value=earlier):
            note.apply_update(title="Other")
        assert note.updated_at == note.created_at


class TestSerialization:
    def test_field_order_matches_file_layout(self) -> None:
        note = Note.create("T", "C", ["x"])
        assert list(note.model_dump()) == [
            "id",
            "title",
            "content",
            "created_at",
            "updated_at",
            "tags",
        ]

    def test_timestamps_serialize_with_offset(self) -> None:
        note = Note.create("T", "C", [])
        dumped = note.model_dump(mode="json")
        parsed = datetime.fromisoformat(dumped["created_at"])
        assert parsed.tzinfo is not None

    def test_naive_timestamp_is_read_as_local(self) -> None:
        note = Note.model_validate(
            {
                "id": "abc",
                "title": "T",
                "content": "",
                "created_at": "2024-01-01T10:00:00",
                "updated_at": "2024-01-01T10:00:00",
                "tags": [],
            }
        )
        assert note.created_at.tzinfo is not None


class TestRequestModels:
    def test_create_requires_title(self) -> None:
        with pytest.raises(ValidationError):
            NoteCreate(title="")

    def test_create_defaults(self) -> None:
        body = NoteCreate(title="T")
        assert body.content == ""
        assert body.tags == []

    def test_update_fields_optional(self) -> None:
        body = NoteUpdate()
        assert body.title is None
        assert body.content is None
        assert body.tags is None
