"""Interactive text menu over the note store.

Note numbers shown to the user are 1-based; everything handed to the store
is 0-based. ``input_fn`` and ``output`` are injectable so the loop can be
driven from tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .exceptions import NoteIndexError, NoteNotFoundError, NotesError
from .models import Note
from .store import NoteStore

logger = logging.getLogger(__name__)

CONTENT_END = "END"
CONTENT_KEEP = "KEEP"
PREVIEW_LENGTH = 50

MENU = (
    ("1", "Add new note"),
    ("2", "List all notes"),
    ("3", "View note details"),
    ("4", "Search notes"),
    ("5", "Update note"),
    ("6", "Delete note"),
    ("7", "Start web server"),
    ("8", "Exit"),
)

SERVE = "serve"
EXIT = "exit"


def parse_tags(line: str) -> list[str]:
    """Split a comma-separated line into non-empty, stripped tags."""
    return [t.strip() for t in line.split(",") if t.strip()]


def preview(content: str, limit: int = PREVIEW_LENGTH) -> str:
    if len(content) > limit:
        return content[: limit - 3] + "..."
    return content


class NotesConsole:
    """Numbered menu loop. ``run`` returns ``"serve"`` or ``"exit"``."""

    def __init__(
        self,
        store: NoteStore,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self._store = store
        self._input = input_fn
        self._output = output
        self._actions: dict[str, Callable[[], None]] = {
            "1": self.add_note,
            "2": self.list_notes,
            "3": self.view_note,
            "4": self.search_notes,
            "5": self.update_note,
            "6": self.delete_note,
        }

    def run(self) -> str:
        self._output("Notes App")
        self._output("-" * 40)
        while True:
            self._show_menu()
            try:
                choice = self._ask("\nEnter your choice: ")
                if choice == "7":
                    self._output("Starting web server...")
                    return SERVE
                if choice == "8":
                    self._output("Goodbye!")
                    return EXIT
                action = self._actions.get(choice)
                if action is None:
                    self._output(
                        "Invalid choice! Please enter a number between 1 and 8."
                    )
                    continue
                action()
            except EOFError:
                self._output("")
                return EXIT
            except NotesError as exc:
                logger.warning("Console action failed: %s", exc.to_dict())
                self._output(f"Error: {exc.message}")

    # ------------------------------------------------------------------
    # Menu actions
    # ------------------------------------------------------------------

    def add_note(self) -> None:
        self._header("ADD NEW NOTE")
        title = self._ask("Title: ")
        if not title:
            self._output("Title cannot be empty!")
            return

        self._output(f"Content (type '{CONTENT_END}' on a new line to finish):")
        content, _ = self._read_content()
        tags = parse_tags(
            self._ask("Enter tags (comma-separated, press Enter to skip): ")
        )

        note = self._store.create(title, content, tags)
        self._output(f"Note added successfully! ID: {note.id}")

    def list_notes(self) -> None:
        self._header("ALL NOTES")
        notes = self._store.list_notes()
        if not notes:
            self._output("No notes found.")
            return

        self._output(f"Total notes: {len(notes)}")
        for i, note in enumerate(notes, 1):
            self._output(f"[{i:2}] {note.title} ({preview(note.content)})")
            if note.tags:
                self._output("     " + " ".join(f"[{t}]" for t in note.tags))

    def view_note(self) -> None:
        self._header("VIEW NOTE")
        note = self._pick_note("Enter note number to view: ")
        if note is None:
            return

        self._output("-" * 60)
        self._output(f"ID: {note.id}")
        self._output(f"Title: {note.title}")
        self._output(f"Content:\n{note.content}")
        if note.tags:
            self._output("Tags: " + " ".join(f"#{t}" for t in note.tags))
        self._output(f"Created: {note.created_at.isoformat()}")
        self._output(f"Updated: {note.updated_at.isoformat()}")
        self._output("-" * 60)

    def search_notes(self) -> None:
        self._header("SEARCH NOTES")
        query = self._ask("Enter search query: ")
        if not query:
            return

        results = self._store.search(query)
        if not results:
            self._output(f"No notes found matching '{query}'")
            return

        self._output(f"Found {len(results)} notes:")
        for i, note in enumerate(results, 1):
            self._output(f"[{i:2}] {note.title} ({len(note.content)} chars)")

    def update_note(self) -> None:
        self._header("UPDATE NOTE")
        current = self._pick_note("Enter note number to update: ")
        if current is None:
            return

        self._output("Leave field blank to keep current value.")
        title = self._ask(f"Title [{current.title}]: ") or None

        self._output(
            f"Content (type '{CONTENT_END}' on new line to finish, "
            f"'{CONTENT_KEEP}' to keep current):"
        )
        self._output("Current content:")
        self._output(current.content)
        content, keep = self._read_content(allow_keep=True)
        if keep or not content:
            content = None

        tags_line = self._ask(f"Tags [{', '.join(current.tags)}]: ")
        tags = parse_tags(tags_line) if tags_line else None

        # Positions may have shifted while the user typed; update by id.
        try:
            self._store.update(current.id, title=title, content=content, tags=tags)
        except NoteNotFoundError:
            self._output("Note not found!")
            return
        self._output("Note updated successfully!")

    def delete_note(self) -> None:
        self._header("DELETE NOTE")
        index = self._ask_number("Enter note number to delete: ")
        if index is None:
            return
        try:
            self._store.delete_by_index(index - 1)
        except NoteIndexError:
            self._output("Invalid note number!")
            return
        self._output("Note deleted successfully!")

    # ------------------------------------------------------------------
    # Input helpers
    # ------------------------------------------------------------------

    def _ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def _ask_number(self, prompt: str) -> int | None:
        raw = self._ask(prompt)
        try:
            return int(raw)
        except ValueError:
            self._output("Please enter a valid number!")
            return None

    def _pick_note(self, prompt: str) -> Note | None:
        index = self._ask_number(prompt)
        if index is None:
            return None
        try:
            return self._store.get_by_index(index - 1)
        except NoteIndexError:
            self._output("Invalid note number!")
            return None

    def _read_content(self, allow_keep: bool = False) -> tuple[str, bool]:
        """Read lines until END. Returns (content, keep_current).

        KEEP is only a marker when ``allow_keep`` is set; otherwise it is text.
        """
        lines: list[str] = []
        while True:
            line = self._input("")
            marker = line.strip()
            if marker == CONTENT_END:
                return "\n".join(lines), False
            if allow_keep and marker == CONTENT_KEEP:
                return "", True
            lines.append(line)

    def _header(self, title: str) -> None:
        self._output("\n" + "=" * 60)
        self._output(f"  {title}  ")
        self._output("=" * 60)

    def _show_menu(self) -> None:
        self._output("\nAvailable commands:")
        for key, label in MENU:
            self._output(f"  {key} - {label}")
