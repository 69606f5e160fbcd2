"""Storage package: book discovery, per-book stores and the library index."""

from storage.app_config_store import AppConfigStore
from storage.assets import AssetStore
from storage.book_store import BookStore
from storage.chapter_store import ChapterStore, LoadedChapters, next_chapter_id, sort_chapter_ids
from storage.chat_store import ChatStore
from storage.library_index import LibraryStore, derive_book_status
from storage.metadata_store import MetadataStore, infer_title_from_book_path
from storage.paths import PathResolver, ScaffoldDetector, build_path_candidates
from storage.snapshot_store import SnapshotStore, parse_version

__all__ = [
    "AppConfigStore",
    "AssetStore",
    "BookStore",
    "ChapterStore",
    "ChatStore",
    "LibraryStore",
    "LoadedChapters",
    "MetadataStore",
    "PathResolver",
    "ScaffoldDetector",
    "SnapshotStore",
    "build_path_candidates",
    "derive_book_status",
    "infer_title_from_book_path",
    "next_chapter_id",
    "parse_version",
    "sort_chapter_ids",
]
