"""Cross-book library index data models (``library.json``)."""

from dataclasses import dataclass, field
from typing import Optional

from models.enums import BookStatus

DEFAULT_ADVANCED_CHAPTER_THRESHOLD = 6


@dataclass
class LibraryStatusRules:
    advanced_chapter_threshold: int = DEFAULT_ADVANCED_CHAPTER_THRESHOLD


@dataclass
class LibraryBookEntry:
    """Denormalized summary of one book for listing without opening it."""
    id: str = ""
    path: str = ""
    title: str = ""
    author: str = ""
    status: BookStatus = BookStatus.RECIEN_CREADO
    chapter_count: int = 0
    word_count: int = 0
    cover_image: Optional[str] = None
    published_at: Optional[str] = None
    last_opened_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "path": self.path,
            "title": self.title,
            "author": self.author,
            "status": self.status.value,
            "chapterCount": self.chapter_count,
            "wordCount": self.word_count,
            "coverImage": self.cover_image,
            "publishedAt": self.published_at,
            "lastOpenedAt": self.last_opened_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class LibraryIndex:
    books: list[LibraryBookEntry] = field(default_factory=list)
    status_rules: LibraryStatusRules = field(default_factory=LibraryStatusRules)
    updated_at: str = ""

    def to_dict(self) -> dict:
        return {
            "books": [b.to_dict() for b in self.books],
            "statusRules": {
                "advancedChapterThreshold": self.status_rules.advanced_chapter_threshold,
            },
            "updatedAt": self.updated_at,
        }

    def find(self, path: str) -> Optional[LibraryBookEntry]:
        return next((b for b in self.books if b.path == path), None)
