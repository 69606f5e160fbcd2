"""Book root discovery: path candidates, scaffold detection and bounded scans."""

import asyncio
import errno
import logging
import os
import re
import stat
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from config.exceptions import BookNotFoundError, CorruptDocumentError, StorageAccessError
from storage import layout
from storage.fs import read_json
from tools.text_utils import normalize_folder_path, normalize_path

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3
DEFAULT_MAX_DIRECTORIES = 600

_MISSING_ERRNOS = {errno.ENOENT, errno.ENOTDIR}


def _format_os_error(error: OSError) -> str:
    parts = [type(error).__name__]
    if error.errno is not None:
        parts.append(f"code={error.errno}")
    if error.strerror:
        parts.append(error.strerror)
    return " | ".join(parts)


def _stat_mode(path: str | Path) -> Optional[int]:
    """``st_mode`` of a path, None when it does not exist.

    Permission and other I/O errors propagate so they can be reported.
    """
    try:
        return os.stat(path).st_mode
    except OSError as e:
        if e.errno in _MISSING_ERRNOS:
            return None
        raise


def _probe_dir(path: str | Path) -> bool:
    mode = _stat_mode(path)
    return mode is not None and stat.S_ISDIR(mode)


def _probe_file(path: str | Path) -> bool:
    mode = _stat_mode(path)
    return mode is not None and stat.S_ISREG(mode)


# ---- Path candidates ----

def sanitize_incoming_path(path: str) -> str:
    """Strip extended-length prefixes and decode ``file://`` URIs."""
    value = (path or "").strip()
    if not value:
        return value

    value = re.sub(r"^\\\\\?\\", "", value)
    value = re.sub(r"^//\?/", "", value)

    if value.lower().startswith("file://"):
        parsed = urlparse(value)
        decoded = unquote(parsed.path)
        if re.match(r"^[a-zA-Z]:$", parsed.netloc):
            decoded = f"{parsed.netloc}{decoded}"
        elif re.match(r"^/[a-zA-Z]:/", decoded):
            decoded = decoded[1:]
        value = decoded
    return value


def is_book_json_path(path: str) -> bool:
    return re.search(r"(^|/)book\.json$", normalize_path(path), re.IGNORECASE) is not None


def to_book_folder_path(path: str) -> str:
    return re.sub(r"/book\.json$", "", normalize_path(path), flags=re.IGNORECASE)


def build_path_candidates(path: str) -> list[str]:
    """All plausible spellings of a user-supplied book location, de-duplicated."""
    candidates: dict[str, None] = {}

    def push(value: str) -> None:
        normalized = normalize_folder_path(value)
        if normalized:
            candidates[normalized] = None

    sanitized = sanitize_incoming_path(path)
    push(path)
    push(sanitized)
    push(normalize_path(path))
    push(normalize_path(sanitized))

    for value in (path, sanitized):
        if is_book_json_path(value):
            push(to_book_folder_path(value))

    return list(candidates)


# ---- Scaffold detection ----

class ScaffoldDetector:
    """Decides whether a directory is (or can be salvaged as) a book project."""

    def is_scaffold(self, path: str | Path) -> bool:
        """True when chapters/, assets/ and versions/ all exist.

        Raises:
            OSError: When a probe fails for reasons other than absence.
        """
        return all(_probe_dir(Path(path) / name) for name in layout.SCAFFOLD_DIRS)

    def has_book_file(self, path: str | Path) -> bool:
        return _probe_file(layout.book_file(path))

    def is_book_directory(self, path: str | Path) -> bool:
        return self.has_book_file(path) or self.is_scaffold(path)

    def is_safe_book_directory(self, path: str | Path) -> bool:
        """Like ``is_book_directory`` but treats probe errors as "no"."""
        try:
            return self.is_book_directory(path)
        except OSError:
            return False

    async def ais_book_directory(self, path: str | Path) -> bool:
        return await asyncio.to_thread(self.is_safe_book_directory, path)


# ---- Resolution ----

@dataclass
class ScanResult:
    """Outcome of listing one directory during a scan."""
    path: str
    entries: list[Path] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class _ResolveState:
    books: dict[str, None] = field(default_factory=dict)
    first_error: Optional[tuple[str, str]] = None

    def record_error(self, path: str, cause: str) -> None:
        if self.first_error is None:
            self.first_error = (path, cause)


class PathResolver:
    """Turns arbitrary user-supplied paths into a canonical book root.

    Args:
        detector: Scaffold detector used to recognise book folders.
        max_depth: Deepest level below a candidate that the nested search visits.
        max_directories: Upper bound on directories listed per candidate.
    """

    def __init__(
        self,
        detector: Optional[ScaffoldDetector] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_directories: int = DEFAULT_MAX_DIRECTORIES,
    ):
        self.detector = detector or ScaffoldDetector()
        self.max_depth = max_depth
        self.max_directories = max_directories

    async def resolve_book_directory(self, raw_path: str) -> str:
        """Find the canonical book root for ``raw_path``.

        Raises:
            StorageAccessError: No book found and a filesystem error occurred.
            BookNotFoundError: No book found anywhere near the path.
        """
        return await asyncio.to_thread(self.resolve_sync, raw_path)

    def resolve_sync(self, raw_path: str) -> str:
        candidates = build_path_candidates(raw_path)
        state = _ResolveState()

        for candidate in candidates:
            try:
                if self.detector.is_book_directory(candidate):
                    return candidate
            except OSError as e:
                state.record_error(candidate, _format_os_error(e))

        for candidate in candidates:
            result = self._scan(candidate)
            if not result.ok:
                state.record_error(candidate, result.error)
                continue
            for entry in result.entries:
                child = self._child_path(candidate, entry)
                if child is not None:
                    self._check_book(child, state)
            self._collect_nested(candidate, state)

        books = list(state.books)
        if len(books) == 1:
            return books[0]
        if len(books) > 1:
            return self._most_recently_updated(books)

        if state.first_error:
            raise StorageAccessError(*state.first_error)
        raise BookNotFoundError(raw_path)

    def _scan(self, path: str) -> ScanResult:
        try:
            return ScanResult(path=path, entries=list(Path(path).iterdir()))
        except OSError as e:
            if e.errno in _MISSING_ERRNOS:
                return ScanResult(path=path)
            return ScanResult(path=path, error=_format_os_error(e))

    def _child_path(self, parent: str, entry: Path) -> Optional[str]:
        if entry.name in layout.IGNORED_SCAN_DIRS:
            return None
        try:
            if not entry.is_dir():
                return None
        except OSError:
            return None
        return normalize_folder_path(f"{parent.rstrip('/')}/{entry.name}")

    def _check_book(self, path: str, state: _ResolveState) -> None:
        try:
            if self.detector.is_book_directory(path):
                state.books[path] = None
        except OSError as e:
            state.record_error(path, _format_os_error(e))

    def _collect_nested(self, base: str, state: _ResolveState) -> None:
        """Bounded breadth-first search for book folders below ``base``."""
        visited: set[str] = set()
        queue: deque[tuple[str, int]] = deque([(base, 0)])
        scanned = 0

        while queue and scanned < self.max_directories:
            current, depth = queue.popleft()
            if depth > self.max_depth or current in visited:
                continue
            visited.add(current)
            scanned += 1

            result = self._scan(current)
            if not result.ok:
                logger.debug("Skipping unreadable directory %s: %s", current, result.error)
                state.record_error(current, result.error)
                continue

            for entry in result.entries:
                child = self._child_path(current, entry)
                if child is None or child in visited:
                    continue
                self._check_book(child, state)
                if depth < self.max_depth:
                    queue.append((child, depth + 1))

        logger.debug("Nested scan of %s visited %d directories", base, scanned)

    def _most_recently_updated(self, books: list[str]) -> str:
        dated = []
        for path in books:
            try:
                raw = read_json(layout.book_file(path))
            except (OSError, CorruptDocumentError):
                raw = {}
            stamp = ""
            if isinstance(raw, dict):
                stamp = raw.get("updatedAt") or raw.get("createdAt") or ""
            dated.append((stamp if isinstance(stamp, str) else "", path))

        dated.sort(key=lambda item: item[0], reverse=True)
        chosen = dated[0][1]
        logger.warning(
            "Found %d book folders, opening the most recently updated: %s", len(books), chosen
        )
        return chosen
