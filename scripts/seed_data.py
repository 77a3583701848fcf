"""Seed a running notes server with sample notes.

Usage:
    python scripts/seed_data.py [--base-url http://localhost:8080]
"""

from __future__ import annotations

import argparse
import sys

import requests

DEFAULT_BASE_URL = "http://localhost:8080"
TIMEOUT = 10

# Each entry: (title, content, tags)
NOTES: list[tuple[str, str, list[str]]] = [
    ("Groceries", "milk, eggs, bread", ["home"]),
    (
        "Meeting Notes",
        "Discussed Q1 targets.\nAction: send the summary by Friday.",
        ["work", "meetings"],
    ),
    (
        "Reading List",
        "Designing Data-Intensive Applications\nThe Pragmatic Programmer",
        ["reading", "books"],
    ),
    ("Project Ideas", "A CLI that syncs notes between machines.", ["ideas", "work"]),
    ("Travel", "Renew passport before March.", []),
]


def check_health(base_url: str) -> bool:
    """Verify the server is reachable."""
    try:
        resp = requests.get(f"{base_url}/health", timeout=TIMEOUT)
        return resp.json().get("success") is True
    except (requests.RequestException, ValueError) as e:
        print(f"  Health check failed: {e}")
        return False


def create_note(base_url: str, title: str, content: str, tags: list[str]) -> dict:
    """POST one note and return the created note."""
    resp = requests.post(
        f"{base_url}/api/notes",
        json={"title": title, "content": content, "tags": tags},
        timeout=TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()["data"]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed sample notes")
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Notes API base URL (default: {DEFAULT_BASE_URL})",
    )
    args = parser.parse_args()
    base_url = args.base_url.rstrip("/")

    print(f"\n  Seeding notes via {base_url}")
    if not check_health(base_url):
        print("  FAIL: Server is not reachable. Is `notes-app web` running?")
        sys.exit(1)

    created = 0
    for i, (title, content, tags) in enumerate(NOTES, 1):
        try:
            note = create_note(base_url, title, content, tags)
        except requests.RequestException as e:
            print(f"  [{i}/{len(NOTES)}] ERROR: {title} — {e}")
            continue
        created += 1
        print(f"  [{i}/{len(NOTES)}] {note['title']} -> {note['id']}")

    stats = requests.get(f"{base_url}/api/stats", timeout=TIMEOUT).json()["data"]
    print()
    print(f"  Done! Created {created}/{len(NOTES)} notes.")
    print(f"  Server now holds {stats['total_notes']} notes, {stats['total_tags']} tags.")


if __name__ == "__main__":
    main()
