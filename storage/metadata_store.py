"""Opening, creating and saving book projects.

Opening a project reconciles the descriptor with what is actually on disk:
the project folders are created, a corrupt ``book.json`` is rebuilt from
the chapter files it can find, chapter files and the order are brought
into lockstep, and legacy embedded chats are moved under ``chats/``.
"""

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from config.exceptions import CorruptDocumentError, PreconditionError, StorageAccessError
from models.book import BookMetadata, BookProject
from models.schema import (
    build_initial_book_metadata,
    encode_book_metadata,
    ensure_book_metadata,
)
from storage import layout
from storage.app_config_store import AppConfigStore
from storage.chapter_store import ChapterStore
from storage.chat_store import ChatStore
from storage.descriptor import read_book_metadata, save_book_metadata
from storage.fs import aexists, ais_dir, amake_dirs, awrite_json
from storage.paths import PathResolver, ScaffoldDetector, sanitize_incoming_path
from tools.text_utils import join_path, normalize_folder_path, now_iso, slugify

logger = logging.getLogger(__name__)

DEFAULT_BOOK_TITLE = "Mi libro"
DEFAULT_AUTHOR = "Autor"
FIRST_CHAPTER_ID = "01"


def infer_title_from_book_path(path: str) -> str:
    """Human title from the book folder name (``mi-libro_nuevo`` -> ``mi libro nuevo``)."""
    parts = [p for p in normalize_folder_path(path).split("/") if p]
    folder = parts[-1] if parts else "mi-libro"
    return re.sub(r"[-_]+", " ", folder).strip() or DEFAULT_BOOK_TITLE


@dataclass
class CreationTarget:
    path: str
    reused: bool


class MetadataStore:
    """Owns ``book.json`` and the project-level open/create flows."""

    def __init__(
        self,
        resolver: PathResolver,
        chapters: ChapterStore,
        chats: ChatStore,
        app_config: AppConfigStore,
        default_author: str = DEFAULT_AUTHOR,
    ):
        self.resolver = resolver
        self.chapters = chapters
        self.chats = chats
        self.app_config = app_config
        self.default_author = default_author

    @property
    def detector(self) -> ScaffoldDetector:
        return self.resolver.detector

    async def load_book_project(self, raw_path: str) -> BookProject:
        """Resolve ``raw_path`` to a book root and open it.

        Raises:
            BookNotFoundError: Nothing that looks like a book was found.
            StorageAccessError: The book could not be read.
        """
        root = await self.resolver.resolve_book_directory(raw_path)
        return await self.ensure_project_files(root)

    async def save_book_metadata(self, root: str | Path, metadata: BookMetadata) -> BookMetadata:
        return await save_book_metadata(root, metadata)

    async def create_book_project(
        self, parent_directory: str, title: str, author: str = ""
    ) -> BookProject:
        """Scaffold a new book under ``parent_directory``.

        The folder name is the slugified title. An existing book folder of
        that name is reused; any other occupied name gets a ``-2``, ``-3``...
        suffix.
        """
        title = title.strip() or DEFAULT_BOOK_TITLE
        author = author.strip() or self.default_author
        folder_name = slugify(title) or f"book-{int(time.time() * 1000)}"
        parent = normalize_folder_path(sanitize_incoming_path(parent_directory))
        if not parent:
            raise PreconditionError("A parent folder is required to create a book")

        target = await self.resolve_creation_path(parent, folder_name)
        await amake_dirs(target.path)
        project = await self.ensure_project_files(target.path, title=title, author=author)
        logger.info(
            "%s book project %s", "Reopened" if target.reused else "Created", target.path
        )
        return project

    async def resolve_creation_path(self, parent: str, folder_name: str) -> CreationTarget:
        preferred = join_path(parent, folder_name)
        if not await aexists(preferred):
            return CreationTarget(preferred, reused=False)
        if await ais_dir(preferred) and await self.detector.ais_book_directory(preferred):
            return CreationTarget(preferred, reused=True)

        suffix = 2
        candidate = join_path(parent, f"{folder_name}-{suffix}")
        while await aexists(candidate):
            suffix += 1
            candidate = join_path(parent, f"{folder_name}-{suffix}")
        return CreationTarget(candidate, reused=False)

    async def ensure_project_files(
        self,
        root: str,
        title: Optional[str] = None,
        author: Optional[str] = None,
    ) -> BookProject:
        """Bring a book folder to a complete, consistent state and load it."""
        root = normalize_folder_path(sanitize_incoming_path(root))
        now = now_iso()
        try:
            for name in layout.PROJECT_DIRS:
                await amake_dirs(Path(root) / name)
        except OSError as e:
            raise StorageAccessError(root, str(e)) from e

        disk_ids = await self.chapters.infer_chapter_ids(root)
        default_title = (title or "").strip() or infer_title_from_book_path(root)
        default_author = (author or "").strip() or self.default_author

        metadata = await self._read_or_rebuild(root, default_title, default_author, disk_ids, now)

        order = metadata.chapter_order or disk_ids or [FIRST_CHAPTER_ID]
        title_value = metadata.title.strip() or default_title
        metadata = ensure_book_metadata(
            metadata.copy(
                title=title_value,
                author=metadata.author.strip() or default_author,
                chapter_order=list(order),
                spine_text=metadata.spine_text.strip() or title_value,
            )
        )

        loaded = await self.chapters.load_chapters(root, metadata.chapter_order, reconcile=True)
        metadata = metadata.copy(chapter_order=loaded.chapter_order)

        chats = await self.chats.load_chats_from_disk(root, metadata.chapter_order, metadata.chats)
        chats = await self.chats.save_chats_to_disk(root, chats)
        metadata = metadata.copy(chats=chats)

        await awrite_json(layout.book_file(root), encode_book_metadata(metadata))
        if not await aexists(layout.config_file(root)):
            await self.app_config.load_app_config(root)

        return BookProject(path=root, metadata=metadata, chapters=loaded.chapters)

    async def _read_or_rebuild(
        self,
        root: str,
        title: str,
        author: str,
        disk_ids: list[str],
        now: str,
    ) -> BookMetadata:
        fallback_order = disk_ids or [FIRST_CHAPTER_ID]
        if not await aexists(layout.book_file(root)):
            return build_initial_book_metadata(title, author, fallback_order, now)
        try:
            return await read_book_metadata(root)
        except CorruptDocumentError as e:
            logger.warning("Rebuilding corrupt book.json in %s from chapter files: %s", root, e)
            return build_initial_book_metadata(title, author, fallback_order, now)
        except OSError as e:
            raise StorageAccessError(str(layout.book_file(root)), str(e)) from e
