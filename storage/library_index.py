"""The process-wide library catalog (``library.json``)."""

import logging
from pathlib import Path
from typing import Optional

from config.exceptions import UnsafeDeletionError
from models.book import BookMetadata, BookProject
from models.enums import BookStatus
from models.library import DEFAULT_ADVANCED_CHAPTER_THRESHOLD, LibraryBookEntry, LibraryIndex
from models.schema import build_default_library_index, decode_library_index
from storage import layout
from storage.fs import aexists, aread_json, aremove_tree, awrite_json
from storage.paths import ScaffoldDetector, sanitize_incoming_path
from tools.text_utils import count_words, normalize_folder_path, now_iso, random_id

logger = logging.getLogger(__name__)


def derive_book_status(
    metadata: BookMetadata, chapter_count: int, advanced_chapter_threshold: int
) -> BookStatus:
    if metadata.is_published:
        return BookStatus.PUBLICADO
    if chapter_count >= advanced_chapter_threshold:
        return BookStatus.AVANZADO
    return BookStatus.RECIEN_CREADO


def project_word_count(project: BookProject) -> int:
    return sum(count_words(chapter.content) for chapter in project.ordered_chapters())


class LibraryStore:
    """Reads and rewrites ``library.json`` in a configured directory.

    Every mutation is a full read-modify-write of the file.
    """

    def __init__(
        self,
        library_dir: str | Path,
        detector: Optional[ScaffoldDetector] = None,
        advanced_chapter_threshold: int = DEFAULT_ADVANCED_CHAPTER_THRESHOLD,
    ):
        self.library_dir = Path(library_dir)
        self.detector = detector or ScaffoldDetector()
        self.advanced_chapter_threshold = advanced_chapter_threshold

    @property
    def path(self) -> Path:
        return self.library_dir / layout.LIBRARY_FILE

    async def load_library_index(self) -> LibraryIndex:
        """Load the catalog, writing an empty one on first use.

        Raises:
            CorruptDocumentError: If ``library.json`` exists but is not valid.
        """
        if not await aexists(self.path):
            index = build_default_library_index(self.advanced_chapter_threshold)
            await self.save_library_index(index)
            logger.info("Created library index %s", self.path)
            return index
        return decode_library_index(
            await aread_json(self.path), str(self.path), self.advanced_chapter_threshold
        )

    async def save_library_index(self, index: LibraryIndex) -> None:
        await awrite_json(self.path, index.to_dict())

    async def upsert_book(self, project: BookProject, mark_opened: bool = False) -> LibraryIndex:
        index = await self.load_library_index()
        path = normalize_folder_path(project.path)
        chapter_count = len(project.metadata.chapter_order)
        now = now_iso()

        existing = next(
            (b for b in index.books if normalize_folder_path(b.path) == path), None
        )
        entry = LibraryBookEntry(
            id=existing.id if existing else random_id("book"),
            path=path,
            title=project.metadata.title,
            author=project.metadata.author,
            status=derive_book_status(
                project.metadata, chapter_count, index.status_rules.advanced_chapter_threshold
            ),
            chapter_count=chapter_count,
            word_count=project_word_count(project),
            cover_image=project.metadata.cover_image,
            published_at=project.metadata.published_at,
            last_opened_at=now if mark_opened or not existing else existing.last_opened_at,
            updated_at=now,
        )

        books = [b for b in index.books if normalize_folder_path(b.path) != path]
        books.append(entry)
        books.sort(key=lambda b: b.last_opened_at, reverse=True)
        index.books = books
        index.updated_at = now
        await self.save_library_index(index)
        return index

    async def remove_book(self, book_path: str, delete_files: bool = False) -> LibraryIndex:
        """Drop a book from the catalog, optionally deleting its folder.

        Raises:
            UnsafeDeletionError: ``delete_files`` was requested for a folder
                that is neither a scaffold nor holds ``book.json``.
        """
        path = normalize_folder_path(sanitize_incoming_path(book_path))

        if delete_files and await aexists(path):
            if not await self.detector.ais_book_directory(path):
                raise UnsafeDeletionError(path)
            await aremove_tree(path)
            logger.info("Deleted book folder %s", path)

        index = await self.load_library_index()
        index.books = [b for b in index.books if normalize_folder_path(b.path) != path]
        index.updated_at = now_iso()
        await self.save_library_index(index)
        return index
