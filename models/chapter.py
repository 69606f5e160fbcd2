"""Chapter and chapter snapshot data models."""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from models.enums import ChapterLengthPreset


@dataclass
class ChapterDocument:
    """One chapter as stored in ``chapters/<id>.json``.

    ``content_json`` is a deprecated structured-content field; HTML in
    ``content`` is the source of truth and the field is persisted as null.
    """
    id: str = ""
    title: str = ""
    content: str = ""
    content_json: Any = None
    length_preset: ChapterLengthPreset = ChapterLengthPreset.MEDIA
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "contentJson": self.content_json,
            "lengthPreset": self.length_preset.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def copy(self, **changes) -> "ChapterDocument":
        return replace(self, **changes)


@dataclass
class ChapterSnapshot:
    """An immutable versioned copy of a chapter (``versions/<id>_v<N>.json``)."""
    version: int = 1
    chapter_id: str = ""
    reason: str = ""
    created_at: str = ""
    chapter: ChapterDocument = field(default_factory=ChapterDocument)
    milestone_label: Optional[str] = None

    def to_dict(self) -> dict:
        payload = {
            "version": self.version,
            "chapterId": self.chapter_id,
            "reason": self.reason,
            "createdAt": self.created_at,
            "chapter": self.chapter.to_dict(),
        }
        if self.milestone_label is not None:
            payload["milestoneLabel"] = self.milestone_label
        return payload
