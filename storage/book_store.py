"""Single entry point composing every store, wired from settings."""

import logging
from pathlib import Path
from typing import Optional

from config.exceptions import PreconditionError
from config.settings import Settings, get_settings
from models.book import BookMetadata, BookProject
from models.chapter import ChapterDocument, ChapterSnapshot
from models.chat import BookChats
from models.enums import MoveDirection
from models.library import DEFAULT_ADVANCED_CHAPTER_THRESHOLD, LibraryIndex
from storage.app_config_store import AppConfigStore
from storage.assets import AssetStore
from storage.chapter_store import NEW_CHAPTER_TITLE, ChapterStore
from storage.chat_store import ChatStore
from storage.library_index import LibraryStore
from storage.metadata_store import DEFAULT_AUTHOR, MetadataStore
from storage.paths import DEFAULT_MAX_DEPTH, DEFAULT_MAX_DIRECTORIES, PathResolver, ScaffoldDetector
from storage.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class BookStore:
    """Book operations for front ends.

    Each mutation takes the caller's ``BookProject``, persists the change and
    returns the updated project; the library index is refreshed as a side
    effect of opening and mutating books.

    Args:
        library_dir: Directory holding ``library.json``.
        scan_max_depth: Depth bound for nested book discovery.
        scan_max_directories: Directory bound for nested book discovery.
        advanced_chapter_threshold: Chapters needed for the ``avanzado`` status.
        default_author: Author used when none is given.
    """

    def __init__(
        self,
        library_dir: str | Path,
        scan_max_depth: int = DEFAULT_MAX_DEPTH,
        scan_max_directories: int = DEFAULT_MAX_DIRECTORIES,
        advanced_chapter_threshold: int = DEFAULT_ADVANCED_CHAPTER_THRESHOLD,
        default_author: str = DEFAULT_AUTHOR,
    ):
        self.detector = ScaffoldDetector()
        self.resolver = PathResolver(self.detector, scan_max_depth, scan_max_directories)
        self.chats = ChatStore()
        self.chapters = ChapterStore(self.chats)
        self.snapshots = SnapshotStore(self.chapters)
        self.app_config = AppConfigStore()
        self.assets = AssetStore()
        self.metadata = MetadataStore(
            self.resolver, self.chapters, self.chats, self.app_config, default_author
        )
        self.library = LibraryStore(library_dir, self.detector, advanced_chapter_threshold)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "BookStore":
        settings = settings or get_settings()
        return cls(
            library_dir=settings.library_dir,
            scan_max_depth=settings.scan_max_depth,
            scan_max_directories=settings.scan_max_directories,
            advanced_chapter_threshold=settings.advanced_chapter_threshold,
            default_author=settings.default_author,
        )

    # ---- Projects ----

    async def resolve_book_directory(self, raw_path: str) -> str:
        return await self.resolver.resolve_book_directory(raw_path)

    async def open_book(self, raw_path: str) -> BookProject:
        project = await self.metadata.load_book_project(raw_path)
        await self.library.upsert_book(project, mark_opened=True)
        logger.info("Opened book %s (%d chapters)", project.path, len(project.chapters))
        return project

    async def create_book(self, parent_directory: str, title: str, author: str = "") -> BookProject:
        project = await self.metadata.create_book_project(parent_directory, title, author)
        await self.library.upsert_book(project, mark_opened=True)
        return project

    async def save_book_metadata(self, project: BookProject, metadata: BookMetadata) -> BookProject:
        metadata = await self.metadata.save_book_metadata(project.path, metadata)
        return await self._refresh(project, metadata)

    async def update_chats(self, project: BookProject, chats: BookChats) -> BookProject:
        metadata = await self.chats.update_book_chats(project.path, project.metadata, chats)
        return await self._refresh(project, metadata)

    # ---- Chapters ----

    def _chapter(self, project: BookProject, chapter_id: str) -> ChapterDocument:
        chapter = project.chapters.get(chapter_id)
        if chapter is None or chapter_id not in project.metadata.chapter_order:
            raise PreconditionError("Unknown chapter", {"chapter": chapter_id, "path": project.path})
        return chapter

    async def save_chapter(self, project: BookProject, chapter: ChapterDocument) -> BookProject:
        saved = await self.chapters.save_chapter(project.path, chapter)
        return await self._refresh(project, project.metadata, {chapter.id: saved})

    async def create_chapter(
        self, project: BookProject, title: str = NEW_CHAPTER_TITLE
    ) -> tuple[BookProject, ChapterDocument]:
        metadata, chapter = await self.chapters.create_chapter(project.path, project.metadata, title)
        return await self._refresh(project, metadata, {chapter.id: chapter}), chapter

    async def rename_chapter(self, project: BookProject, chapter_id: str, title: str) -> BookProject:
        chapter = await self.chapters.rename_chapter(
            project.path, self._chapter(project, chapter_id), title
        )
        return await self._refresh(project, project.metadata, {chapter_id: chapter})

    async def duplicate_chapter(
        self, project: BookProject, chapter_id: str
    ) -> tuple[BookProject, ChapterDocument]:
        metadata, chapter = await self.chapters.duplicate_chapter(
            project.path, project.metadata, self._chapter(project, chapter_id)
        )
        return await self._refresh(project, metadata, {chapter.id: chapter}), chapter

    async def delete_chapter(self, project: BookProject, chapter_id: str) -> BookProject:
        metadata = await self.chapters.delete_chapter(project.path, project.metadata, chapter_id)
        if metadata is project.metadata:
            return project
        chapters = {k: v for k, v in project.chapters.items() if k != chapter_id}
        updated = BookProject(project.path, metadata, chapters)
        await self.library.upsert_book(updated)
        return updated

    async def move_chapter(
        self, project: BookProject, chapter_id: str, direction: MoveDirection | str
    ) -> BookProject:
        metadata = await self.chapters.move_chapter(
            project.path, project.metadata, chapter_id, direction
        )
        return await self._refresh(project, metadata)

    # ---- Snapshots ----

    async def snapshot_chapter(
        self,
        project: BookProject,
        chapter_id: str,
        reason: str,
        milestone_label: Optional[str] = None,
    ) -> ChapterSnapshot:
        return await self.snapshots.save_chapter_snapshot(
            project.path, self._chapter(project, chapter_id), reason, milestone_label
        )

    async def list_snapshots(self, project: BookProject, chapter_id: str) -> list[ChapterSnapshot]:
        return await self.snapshots.list_chapter_snapshots(project.path, chapter_id)

    async def restore_last_snapshot(
        self, project: BookProject, chapter_id: str
    ) -> tuple[BookProject, Optional[ChapterDocument]]:
        restored = await self.snapshots.restore_last_snapshot(project.path, chapter_id)
        if restored is None:
            return project, None
        return await self._refresh(project, project.metadata, {chapter_id: restored}), restored

    # ---- Library ----

    async def list_library(self) -> LibraryIndex:
        return await self.library.load_library_index()

    async def remove_from_library(self, book_path: str, delete_files: bool = False) -> LibraryIndex:
        return await self.library.remove_book(book_path, delete_files)

    async def _refresh(
        self,
        project: BookProject,
        metadata: BookMetadata,
        changed: Optional[dict[str, ChapterDocument]] = None,
    ) -> BookProject:
        chapters = {**project.chapters, **(changed or {})}
        updated = BookProject(project.path, metadata, chapters)
        await self.library.upsert_book(updated)
        return updated
