"""On-disk layout of a book project."""

from pathlib import Path

BOOK_FILE = "book.json"
CONFIG_FILE = "config.json"
LIBRARY_FILE = "library.json"

CHAPTERS_DIR = "chapters"
ASSETS_DIR = "assets"
VERSIONS_DIR = "versions"
CHATS_DIR = "chats"
EXPORTS_DIR = "exports"

BOOK_CHAT_FILE = "book.json"

# Minimal structural signature of a book project
SCAFFOLD_DIRS = (CHAPTERS_DIR, ASSETS_DIR, VERSIONS_DIR)
# Created for every new or reopened book
PROJECT_DIRS = (CHAPTERS_DIR, ASSETS_DIR, VERSIONS_DIR, CHATS_DIR)

# Directory names never descended into while searching for nested books
IGNORED_SCAN_DIRS = frozenset({
    ".git", ".hg", ".svn", "node_modules", "__pycache__",
    ".venv", "venv", "dist", "build", "target", ".tmp-tests",
})


def book_file(root: str | Path) -> Path:
    return Path(root) / BOOK_FILE


def config_file(root: str | Path) -> Path:
    return Path(root) / CONFIG_FILE


def chapters_dir(root: str | Path) -> Path:
    return Path(root) / CHAPTERS_DIR


def chapter_file(root: str | Path, chapter_id: str) -> Path:
    return chapters_dir(root) / f"{chapter_id}.json"


def versions_dir(root: str | Path) -> Path:
    return Path(root) / VERSIONS_DIR


def snapshot_file(root: str | Path, chapter_id: str, version: int) -> Path:
    return versions_dir(root) / f"{chapter_id}_v{version}.json"


def chats_dir(root: str | Path) -> Path:
    return Path(root) / CHATS_DIR


def book_chat_file(root: str | Path) -> Path:
    return chats_dir(root) / BOOK_CHAT_FILE


def chapter_chat_file(root: str | Path, chapter_id: str) -> Path:
    return chats_dir(root) / f"{chapter_id}.json"


def assets_dir(root: str | Path) -> Path:
    return Path(root) / ASSETS_DIR


def exports_dir(root: str | Path) -> Path:
    return Path(root) / EXPORTS_DIR
