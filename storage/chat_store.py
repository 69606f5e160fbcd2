"""Conversation logs: legacy embedded chats reconciled with ``chats/*.json``."""

import logging
from pathlib import Path
from typing import Any, Iterable

from config.exceptions import CorruptDocumentError
from models.book import BookMetadata
from models.chat import BookChats
from models.enums import ChatScope
from models.schema import ensure_book_chats, ensure_chat_messages
from storage import layout
from storage.descriptor import save_book_metadata
from storage.fs import aexists, alist_files, amake_dirs, aread_json, aremove_file, awrite_json

logger = logging.getLogger(__name__)


def _chapter_id_from_chat_file(path: Path) -> str:
    return path.name[: -len(".json")].strip()


def _shares_book_chat_file(chapter_id: str) -> bool:
    return f"{chapter_id}.json".lower() == layout.BOOK_CHAT_FILE


class ChatStore:
    """Persists book-scope and chapter-scope conversations, one file per scope."""

    async def load_chats_from_disk(
        self,
        root: str | Path,
        chapter_order: Iterable[str],
        legacy_chats: Any = None,
    ) -> BookChats:
        """Load chats, overlaying per-scope files on the legacy embedded shape.

        A corrupt file keeps the legacy value for its scope; chat files for
        chapter ids not known yet are adopted as they are found.
        """
        result = ensure_book_chats(legacy_chats).copy()
        directory = layout.chats_dir(root)
        if not await aexists(directory):
            return result

        book_path = layout.book_chat_file(root)
        if await aexists(book_path):
            try:
                result.book = ensure_chat_messages(await aread_json(book_path), ChatScope.BOOK)
            except (OSError, CorruptDocumentError) as e:
                logger.warning("Keeping legacy book chat, could not read %s: %s", book_path, e)

        known_ids = list(dict.fromkeys([*chapter_order, *result.chapters]))
        for chapter_id in known_ids:
            if _shares_book_chat_file(chapter_id):
                continue
            chapter_path = layout.chapter_chat_file(root, chapter_id)
            if not await aexists(chapter_path):
                continue
            try:
                result.chapters[chapter_id] = ensure_chat_messages(
                    await aread_json(chapter_path), ChatScope.CHAPTER
                )
            except (OSError, CorruptDocumentError) as e:
                logger.warning("Keeping legacy chat for chapter %s: %s", chapter_id, e)

        try:
            entries = await alist_files(directory, ".json")
        except OSError as e:
            logger.warning("Could not list chats folder %s: %s", directory, e)
            return result

        known = set(known_ids)
        for entry in entries:
            if entry.name.lower() == layout.BOOK_CHAT_FILE:
                continue
            chapter_id = _chapter_id_from_chat_file(entry)
            if not chapter_id or chapter_id in known:
                continue
            try:
                result.chapters[chapter_id] = ensure_chat_messages(
                    await aread_json(entry), ChatScope.CHAPTER
                )
            except (OSError, CorruptDocumentError) as e:
                logger.warning("Ignoring corrupt chat file %s: %s", entry, e)

        return result

    async def save_chats_to_disk(self, root: str | Path, chats: BookChats) -> BookChats:
        """Write every scope to its own file and prune stray chapter chat files."""
        normalized = ensure_book_chats(chats)
        directory = layout.chats_dir(root)
        await amake_dirs(directory)

        await awrite_json(layout.book_chat_file(root), [m.to_dict() for m in normalized.book])
        for chapter_id, messages in normalized.chapters.items():
            if _shares_book_chat_file(chapter_id):
                logger.warning(
                    "Not saving chat for chapter %r, its file would replace the book chat", chapter_id
                )
                continue
            await awrite_json(
                layout.chapter_chat_file(root, chapter_id), [m.to_dict() for m in messages]
            )

        try:
            entries = await alist_files(directory, ".json")
        except OSError as e:
            logger.warning("Could not list chats folder for cleanup %s: %s", directory, e)
            return normalized

        for entry in entries:
            if entry.name.lower() == layout.BOOK_CHAT_FILE:
                continue
            chapter_id = _chapter_id_from_chat_file(entry)
            if chapter_id and chapter_id not in normalized.chapters:
                try:
                    await aremove_file(entry)
                    logger.info("Removed stray chat file %s", entry)
                except OSError as e:
                    logger.warning("Could not remove stray chat file %s: %s", entry, e)

        return normalized

    async def update_book_chats(
        self, root: str | Path, metadata: BookMetadata, chats: BookChats
    ) -> BookMetadata:
        normalized = await self.save_chats_to_disk(root, chats)
        return await save_book_metadata(root, metadata.copy(chats=normalized))
