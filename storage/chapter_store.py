"""Chapter documents: one JSON file per chapter kept in lockstep with the order."""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from config.exceptions import CorruptDocumentError
from models.book import BookMetadata
from models.chapter import ChapterDocument
from models.enums import MoveDirection
from models.schema import build_default_chapter, decode_chapter, ensure_book_chats
from storage import layout
from storage.chat_store import ChatStore
from storage.descriptor import save_book_metadata
from storage.fs import aexists, alist_files, aread_json, aremove_file, awrite_json
from tools.text_utils import now_iso, parse_int_prefix

logger = logging.getLogger(__name__)

NEW_CHAPTER_TITLE = "Nuevo capitulo"
COPY_SUFFIX = " copia"


# ---- Chapter ids ----

def chapter_sort_key(chapter_id: str) -> tuple[int, str]:
    """Numeric ids first in numeric order, then the rest lexically."""
    numeric = parse_int_prefix(chapter_id)
    return (numeric if numeric is not None else sys.maxsize, chapter_id)


def sort_chapter_ids(chapter_ids: Iterable[str]) -> list[str]:
    return sorted(dict.fromkeys(chapter_ids), key=chapter_sort_key)


def next_chapter_id(order: Iterable[str]) -> str:
    """``max(numeric ids) + 1`` zero-padded to two digits; non-numeric ids are ignored."""
    highest = 0
    for chapter_id in order:
        value = parse_int_prefix(chapter_id)
        if value is not None:
            highest = max(highest, value)
    return str(highest + 1).zfill(2)


@dataclass
class LoadedChapters:
    """Result of loading the chapters of a book."""
    chapters: dict[str, ChapterDocument] = field(default_factory=dict)
    chapter_order: list[str] = field(default_factory=list)
    adopted: list[str] = field(default_factory=list)
    synthesized: list[str] = field(default_factory=list)
    corrupt: list[str] = field(default_factory=list)


class ChapterStore:
    """Create, rename, duplicate, delete, move and save chapters."""

    def __init__(self, chats: ChatStore):
        self.chats = chats

    async def infer_chapter_ids(self, root: str | Path) -> list[str]:
        """Chapter ids implied by ``chapters/*.json``, in reading order."""
        files = await alist_files(layout.chapters_dir(root), ".json")
        ids = [p.name[: -len(".json")].strip() for p in files]
        return sort_chapter_ids(i for i in ids if i)

    async def load_chapters(
        self, root: str | Path, chapter_order: list[str], reconcile: bool = False
    ) -> LoadedChapters:
        """Load every chapter named in ``chapter_order``.

        Missing or corrupt files are left out of the map. With ``reconcile``,
        chapter files on disk that the order does not mention are adopted
        (appended in reading order) and order entries without a file get a
        default chapter written to disk. Corrupt files are never overwritten;
        a placeholder stands in for them in memory.
        """
        now = now_iso()
        loaded = LoadedChapters(chapter_order=list(chapter_order))

        if reconcile:
            on_disk = await self.infer_chapter_ids(root)
            known = set(loaded.chapter_order)
            for chapter_id in on_disk:
                if chapter_id not in known:
                    loaded.chapter_order.append(chapter_id)
                    loaded.adopted.append(chapter_id)
            if loaded.adopted:
                logger.info("Adopted chapter files missing from the order: %s", loaded.adopted)

        for index, chapter_id in enumerate(loaded.chapter_order):
            path = layout.chapter_file(root, chapter_id)
            if await aexists(path):
                try:
                    loaded.chapters[chapter_id] = decode_chapter(
                        await aread_json(path), chapter_id, index, now, str(path)
                    )
                    continue
                except (OSError, CorruptDocumentError) as e:
                    logger.warning("Skipping unreadable chapter %s: %s", path, e)
                    loaded.corrupt.append(chapter_id)
                    if reconcile:
                        loaded.chapters[chapter_id] = build_default_chapter(chapter_id, index, now)
                    continue

            if reconcile:
                chapter = build_default_chapter(chapter_id, index, now)
                await awrite_json(path, chapter.to_dict())
                loaded.chapters[chapter_id] = chapter
                loaded.synthesized.append(chapter_id)
                logger.info("Created missing chapter file %s", path)

        return loaded

    async def save_chapter(self, root: str | Path, chapter: ChapterDocument) -> ChapterDocument:
        next_chapter = chapter.copy(updated_at=now_iso(), content_json=None)
        await awrite_json(layout.chapter_file(root, chapter.id), next_chapter.to_dict())
        return next_chapter

    async def create_chapter(
        self, root: str | Path, metadata: BookMetadata, title: str = NEW_CHAPTER_TITLE
    ) -> tuple[BookMetadata, ChapterDocument]:
        chapter_id = next_chapter_id(metadata.chapter_order)
        now = now_iso()
        chapter = ChapterDocument(
            id=chapter_id,
            title=title,
            content="<p></p>",
            created_at=now,
            updated_at=now,
        )
        await awrite_json(layout.chapter_file(root, chapter_id), chapter.to_dict())
        next_metadata = await save_book_metadata(
            root, metadata.copy(chapter_order=[*metadata.chapter_order, chapter_id])
        )
        logger.info("Created chapter %s in %s", chapter_id, root)
        return next_metadata, chapter

    async def duplicate_chapter(
        self, root: str | Path, metadata: BookMetadata, source: ChapterDocument
    ) -> tuple[BookMetadata, ChapterDocument]:
        chapter_id = next_chapter_id(metadata.chapter_order)
        now = now_iso()
        chapter = source.copy(
            id=chapter_id,
            title=f"{source.title}{COPY_SUFFIX}",
            content_json=None,
            created_at=now,
            updated_at=now,
        )
        await awrite_json(layout.chapter_file(root, chapter_id), chapter.to_dict())
        next_metadata = await save_book_metadata(
            root, metadata.copy(chapter_order=[*metadata.chapter_order, chapter_id])
        )
        logger.info("Duplicated chapter %s as %s", source.id, chapter_id)
        return next_metadata, chapter

    async def rename_chapter(
        self, root: str | Path, chapter: ChapterDocument, title: str
    ) -> ChapterDocument:
        return await self.save_chapter(root, chapter.copy(title=title))

    async def delete_chapter(
        self, root: str | Path, metadata: BookMetadata, chapter_id: str
    ) -> BookMetadata:
        """Remove a chapter file, its order entry and its chat log.

        Deleting an id that is not in the order returns ``metadata`` unchanged.
        """
        if chapter_id not in metadata.chapter_order:
            return metadata

        await aremove_file(layout.chapter_file(root, chapter_id))

        chats = ensure_book_chats(metadata.chats)
        chats.chapters.pop(chapter_id, None)
        chats = await self.chats.save_chats_to_disk(root, chats)

        next_metadata = await save_book_metadata(
            root,
            metadata.copy(
                chapter_order=[c for c in metadata.chapter_order if c != chapter_id],
                chats=chats,
            ),
        )
        logger.info("Deleted chapter %s from %s", chapter_id, root)
        return next_metadata

    async def move_chapter(
        self,
        root: str | Path,
        metadata: BookMetadata,
        chapter_id: str,
        direction: MoveDirection | str,
    ) -> BookMetadata:
        """Swap a chapter with its neighbour; a move past either end is a no-op."""
        direction = MoveDirection(direction)
        order = list(metadata.chapter_order)
        if chapter_id not in order:
            return metadata

        index = order.index(chapter_id)
        target = index - 1 if direction is MoveDirection.UP else index + 1
        if target < 0 or target >= len(order):
            return metadata

        order[index], order[target] = order[target], order[index]
        return await save_book_metadata(root, metadata.copy(chapter_order=order))
