"""Shared pytest fixtures for the folio test suite."""

import json
from pathlib import Path

import pytest


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance with all paths pointing to tmp_path."""
    from config.settings import Settings
    return Settings(
        _env_file=None,
        library_dir=tmp_path / "library",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def store(settings):
    """Return a BookStore wired from the temp settings."""
    from storage.book_store import BookStore
    return BookStore.from_settings(settings)


# ---------------------------------------------------------------------------
# On-disk book fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def books_dir(tmp_path):
    """Return an empty parent folder for book projects."""
    path = tmp_path / "books"
    path.mkdir()
    return path


@pytest.fixture
def make_scaffold():
    """Factory creating chapters/, assets/ and versions/ under a folder."""

    def _make(root: Path, book: dict | None = None) -> Path:
        for name in ("chapters", "assets", "versions"):
            (root / name).mkdir(parents=True, exist_ok=True)
        if book is not None:
            write_json(root / "book.json", book)
        return root

    return _make


@pytest.fixture
def legacy_book(tmp_path):
    """A version-1 book.json with embedded chats and most optional blocks missing."""
    root = tmp_path / "legacy-book"
    write_json(root / "book.json", {
        "title": "Cuaderno viejo",
        "author": "Ana",
        "chapterOrder": ["01", "02"],
        "createdAt": "2023-01-01T00:00:00.000Z",
        "updatedAt": "2023-01-02T00:00:00.000Z",
        "chats": {
            "book": [
                {"id": "m0", "role": "user", "scope": "book", "content": "Plan general",
                 "createdAt": "2023-01-01T00:00:00.000Z"},
            ],
            "chapters": {
                "01": [
                    {"id": "m1", "role": "assistant", "scope": "chapter", "content": "Hola",
                     "createdAt": "2023-01-01T00:00:00.000Z"},
                ],
            },
        },
    })
    write_json(root / "chapters" / "01.json", {
        "id": "01",
        "title": "Inicio",
        "content": "<p>Era una vez</p>",
        "createdAt": "2023-01-01T00:00:00.000Z",
        "updatedAt": "2023-01-01T00:00:00.000Z",
    })
    return root
