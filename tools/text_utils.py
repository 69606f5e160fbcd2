"""Text and path utilities: HTML stripping, word counts, slugs, ids, timestamps."""

import re
import uuid
from datetime import datetime, timezone

_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_ENTITY_RE = re.compile(r"&(?:[a-zA-Z]+|#\d+|#x[0-9a-fA-F]+);")
_DRIVE_ROOT_RE = re.compile(r"^[a-zA-Z]:/$")


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def random_id(prefix: str = "id") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def strip_html(html: str) -> str:
    """Remove markup from HTML, leaving whitespace-separated plain text.

    Style and script blocks are dropped with their content, every tag and
    character entity becomes a space, and whitespace runs are collapsed.
    """
    text = _STYLE_RE.sub(" ", html or "")
    text = _SCRIPT_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    text = _ENTITY_RE.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()


def count_words(html: str) -> int:
    """Count whitespace-separated words in the de-tagged HTML."""
    plain = strip_html(html)
    if not plain:
        return 0
    return len(plain.split())


def slugify(value: str) -> str:
    """Lower-case ASCII slug, at most 48 characters."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")[:48]


def safe_file_name(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9\-_]", "-", value)


def normalize_path(path: str) -> str:
    """Use forward slashes and collapse repeated separators."""
    return re.sub(r"/+", "/", path.replace("\\", "/"))


def normalize_folder_path(path: str) -> str:
    """Normalized path without a trailing slash, except for drive roots like ``C:/``."""
    normalized = normalize_path(path).strip()
    if not normalized:
        return normalized
    if _DRIVE_ROOT_RE.match(normalized) or normalized == "/":
        return normalized
    return normalized.rstrip("/")


def join_path(base: str, *parts: str) -> str:
    current = normalize_path(base).rstrip("/")
    for part in parts:
        current = f"{current}/{part.lstrip('/')}"
    return current


def parse_int_prefix(value: str) -> int | None:
    """Parse a leading integer the way chapter ids are ordered ("03" -> 3, "7b" -> 7)."""
    match = re.match(r"^\s*([+-]?\d+)", value or "")
    return int(match.group(1)) if match else None
