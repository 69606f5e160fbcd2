"""Schema decoding: raw JSON documents -> current typed models.

Every load boundary goes through this module. Raw documents are plain
``json.load`` output of any historical shape; the ``decode_*``/``ensure_*``
functions are pure and always return a fully populated value of the
current schema, or raise ``CorruptDocumentError`` when the document is not
even an object.

Book descriptor shapes seen on disk:

* version 1 (no ``schemaVersion`` key): chats embedded in ``book.json``,
  optional blocks (foundation, amazon, interiorFormat, cover fields,
  publish fields) may be missing or partially typed.
* version 2: chats live under ``chats/``, ``schemaVersion`` is written.
"""

import logging
import math
from typing import Any, Optional

from config.exceptions import CorruptDocumentError
from models.book import (
    AmazonContributor,
    AmazonKdpData,
    AmazonMarketPricing,
    BookFoundation,
    BookMetadata,
    InteriorFormat,
)
from models.chapter import ChapterDocument, ChapterSnapshot
from models.chat import BookChats, ChatMessage
from models.enums import (
    AmazonPresetType,
    BookStatus,
    ChapterLengthPreset,
    ChatRole,
    ChatScope,
    TrimSize,
)
from models.library import (
    DEFAULT_ADVANCED_CHAPTER_THRESHOLD,
    LibraryBookEntry,
    LibraryIndex,
    LibraryStatusRules,
)
from tools.text_utils import now_iso, parse_int_prefix, random_id

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2
AMAZON_KEYWORD_SLOTS = 7
DEFAULT_CHAPTER_CONTENT = "<p>Escribe aqui...</p>"
DEFAULT_AMAZON_CATEGORIES = [
    "Libros > Literatura y ficcion > Ensayos",
    "Libros > Salud familia y desarrollo personal > Escritura",
    "Libros > Negocios y dinero > Productividad",
]


# ---- Defaults ----

def build_default_amazon(title: str, author: str) -> AmazonKdpData:
    return AmazonKdpData(
        kdp_title=title,
        pen_name=author,
        market_pricing=[
            AmazonMarketPricing("Amazon.com", "USD", 4.99, 12.99),
            AmazonMarketPricing("Amazon.es", "EUR", 4.99, 12.99),
            AmazonMarketPricing("Amazon.com.mx", "MXN", 89, 249),
        ],
        keywords=[""] * AMAZON_KEYWORD_SLOTS,
        categories=list(DEFAULT_AMAZON_CATEGORIES),
    )


def build_initial_book_metadata(
    title: str, author: str, chapter_order: list[str], now: str
) -> BookMetadata:
    return BookMetadata(
        title=title,
        author=author,
        chapter_order=list(chapter_order),
        spine_text=title,
        amazon=build_default_amazon(title, author),
        created_at=now,
        updated_at=now,
    )


def chapter_display_title(chapter_id: str, index: int) -> str:
    numeric = parse_int_prefix(chapter_id)
    return f"Capitulo {numeric}" if numeric is not None else f"Capitulo {index + 1}"


def build_default_chapter(chapter_id: str, index: int, now: str) -> ChapterDocument:
    return ChapterDocument(
        id=chapter_id,
        title=chapter_display_title(chapter_id, index),
        content=DEFAULT_CHAPTER_CONTENT,
        created_at=now,
        updated_at=now,
    )


# ---- Scalar coercion ----

def _str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def parse_nullable_number(value: Any) -> Optional[float]:
    """Lenient number parsing: finite numbers and numeric strings, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        try:
            parsed = float(trimmed)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _number(value: Any, default: float) -> float:
    parsed = parse_nullable_number(value)
    return default if parsed is None else parsed


def normalize_language_code(value: Any) -> str:
    trimmed = _str(value).strip().lower()
    return trimmed or "es"


def resolve_length_preset(value: Any) -> ChapterLengthPreset:
    try:
        return ChapterLengthPreset(value)
    except ValueError:
        return ChapterLengthPreset.MEDIA


def _require_object(raw: Any, path: str) -> dict:
    if not isinstance(raw, dict):
        raise CorruptDocumentError(path, f"expected a JSON object, got {type(raw).__name__}")
    return raw


# ---- Chats ----

def ensure_chat_messages(values: Any, fallback_scope: ChatScope) -> list[ChatMessage]:
    """Normalize a raw message list, dropping entries with blank content."""
    if not isinstance(values, list):
        return []

    messages = []
    for entry in values:
        if not isinstance(entry, dict):
            continue
        content = _str(entry.get("content")).strip()
        if not content:
            continue

        raw_id = entry.get("id")
        raw_created = entry.get("createdAt")
        role = ChatRole.ASSISTANT if entry.get("role") == "assistant" else ChatRole.USER
        try:
            scope = ChatScope(entry.get("scope"))
        except ValueError:
            scope = fallback_scope

        messages.append(ChatMessage(
            id=raw_id.strip() if isinstance(raw_id, str) and raw_id.strip() else random_id("msg"),
            role=role,
            scope=scope,
            content=content,
            created_at=raw_created.strip() if isinstance(raw_created, str) and raw_created.strip() else now_iso(),
        ))
    return messages


def ensure_book_chats(raw: Any) -> BookChats:
    if isinstance(raw, BookChats):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        return BookChats()

    chats = BookChats(book=ensure_chat_messages(raw.get("book"), ChatScope.BOOK))
    chapters = raw.get("chapters")
    if isinstance(chapters, dict):
        for chapter_id, messages in chapters.items():
            safe_id = _str(chapter_id).strip()
            if safe_id:
                chats.chapters[safe_id] = ensure_chat_messages(messages, ChatScope.CHAPTER)
    return chats


# ---- Book descriptor blocks ----

def decode_foundation(raw: Any) -> BookFoundation:
    if not isinstance(raw, dict):
        return BookFoundation()
    defaults = BookFoundation()
    return BookFoundation(
        central_idea=_str(raw.get("centralIdea"), defaults.central_idea),
        promise=_str(raw.get("promise"), defaults.promise),
        audience=_str(raw.get("audience"), defaults.audience),
        narrative_voice=_str(raw.get("narrativeVoice"), defaults.narrative_voice),
        style_rules=_str(raw.get("styleRules"), defaults.style_rules),
        structure_notes=_str(raw.get("structureNotes"), defaults.structure_notes),
        glossary_preferred=_str(raw.get("glossaryPreferred"), defaults.glossary_preferred),
        glossary_avoid=_str(raw.get("glossaryAvoid"), defaults.glossary_avoid),
    )


def decode_interior_format(raw: Any) -> InteriorFormat:
    defaults = InteriorFormat()
    if not isinstance(raw, dict):
        return defaults
    try:
        trim_size = TrimSize(raw.get("trimSize"))
    except ValueError:
        trim_size = defaults.trim_size
    return InteriorFormat(
        trim_size=trim_size,
        page_width_in=_number(raw.get("pageWidthIn"), defaults.page_width_in),
        page_height_in=_number(raw.get("pageHeightIn"), defaults.page_height_in),
        margin_top_mm=_number(raw.get("marginTopMm"), defaults.margin_top_mm),
        margin_bottom_mm=_number(raw.get("marginBottomMm"), defaults.margin_bottom_mm),
        margin_inside_mm=_number(raw.get("marginInsideMm"), defaults.margin_inside_mm),
        margin_outside_mm=_number(raw.get("marginOutsideMm"), defaults.margin_outside_mm),
        paragraph_indent_em=_number(raw.get("paragraphIndentEm"), defaults.paragraph_indent_em),
        line_height=_number(raw.get("lineHeight"), defaults.line_height),
    )


def ensure_amazon_keywords(values: Any) -> list[str]:
    """Exactly seven keyword slots, padded with blanks or truncated."""
    source = values if isinstance(values, list) else []
    normalized = [_str(v).strip() for v in source]
    normalized.extend([""] * (AMAZON_KEYWORD_SLOTS - len(normalized)))
    return normalized[:AMAZON_KEYWORD_SLOTS]


def ensure_amazon_categories(values: Any, defaults: list[str]) -> list[str]:
    source = values if isinstance(values, list) else []
    normalized = [_str(v).strip() for v in source]
    normalized = [v for v in normalized if v]
    return normalized or list(defaults)


def ensure_amazon_contributors(values: Any) -> list[AmazonContributor]:
    if not isinstance(values, list):
        return []
    contributors = []
    for entry in values:
        if not isinstance(entry, dict):
            continue
        name = _str(entry.get("name")).strip()
        if not name:
            continue
        role = _str(entry.get("role")).strip() or "Contribuidor"
        contributors.append(AmazonContributor(role=role, name=name))
    return contributors


def ensure_amazon_market_pricing(
    values: Any, defaults: list[AmazonMarketPricing]
) -> list[AmazonMarketPricing]:
    if not isinstance(values, list):
        return list(defaults)
    rows = []
    for entry in values:
        if not isinstance(entry, dict):
            continue
        marketplace = _str(entry.get("marketplace")).strip()
        currency = _str(entry.get("currency")).strip().upper()
        if not marketplace or not currency:
            continue
        rows.append(AmazonMarketPricing(
            marketplace=marketplace,
            currency=currency,
            ebook_price=parse_nullable_number(entry.get("ebookPrice")),
            print_price=parse_nullable_number(entry.get("printPrice")),
        ))
    return rows or list(defaults)


def ensure_amazon_data(raw: Any, title: str, author: str) -> AmazonKdpData:
    defaults = build_default_amazon(title, author)
    if isinstance(raw, AmazonKdpData):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        return defaults

    try:
        preset_type = AmazonPresetType(raw.get("presetType"))
    except ValueError:
        preset_type = defaults.preset_type
    royalty = raw.get("ebookRoyaltyPlan")

    return AmazonKdpData(
        preset_type=preset_type,
        marketplace=_str(raw.get("marketplace"), defaults.marketplace),
        language=normalize_language_code(raw.get("language")),
        kdp_title=_str(raw.get("kdpTitle"), defaults.kdp_title),
        subtitle=_str(raw.get("subtitle")),
        pen_name=_str(raw.get("penName"), defaults.pen_name),
        series_name=_str(raw.get("seriesName")),
        edition=_str(raw.get("edition"), defaults.edition),
        contributors=ensure_amazon_contributors(raw.get("contributors")),
        own_copyright=_bool(raw.get("ownCopyright"), defaults.own_copyright),
        is_adult_content=_bool(raw.get("isAdultContent"), defaults.is_adult_content),
        isbn=_str(raw.get("isbn"), defaults.isbn),
        enable_drm=_bool(raw.get("enableDRM"), defaults.enable_drm),
        enroll_kdp_select=_bool(raw.get("enrollKDPSelect"), defaults.enroll_kdp_select),
        ebook_royalty_plan=royalty if royalty in (35, 70) and not isinstance(royalty, bool) else defaults.ebook_royalty_plan,
        print_cost_estimate=_number(raw.get("printCostEstimate"), defaults.print_cost_estimate),
        market_pricing=ensure_amazon_market_pricing(raw.get("marketPricing"), defaults.market_pricing),
        keywords=ensure_amazon_keywords(raw.get("keywords")),
        categories=ensure_amazon_categories(raw.get("categories"), defaults.categories),
        back_cover_text=_str(raw.get("backCoverText")),
        long_description=_str(raw.get("longDescription")),
        author_bio=_str(raw.get("authorBio")),
        kdp_notes=_str(raw.get("kdpNotes")),
    )


# ---- Book descriptor ----

def detect_schema_version(raw: dict) -> int:
    version = raw.get("schemaVersion")
    if isinstance(version, int) and not isinstance(version, bool) and version >= 1:
        return version
    return 1


def _chapter_order(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    order = []
    for value in raw:
        chapter_id = _str(value).strip()
        if chapter_id and chapter_id not in order:
            order.append(chapter_id)
    return order


def decode_book_metadata(raw: Any, path: str = "book.json") -> BookMetadata:
    """Decode any historical ``book.json`` shape into the current model.

    Legacy embedded chats are kept on ``metadata.chats`` so the chat store
    can use them as a fallback baseline.
    """
    raw = _require_object(raw, path)
    version = detect_schema_version(raw)
    if version > CURRENT_SCHEMA_VERSION:
        logger.warning(
            "%s declares schema version %d (newer than %d); decoding best-effort",
            path, version, CURRENT_SCHEMA_VERSION,
        )

    title = _str(raw.get("title"))
    author = _str(raw.get("author"))
    spine_text = raw.get("spineText")
    return BookMetadata(
        title=title,
        author=author,
        chapter_order=_chapter_order(raw.get("chapterOrder")),
        cover_image=_opt_str(raw.get("coverImage")),
        back_cover_image=_opt_str(raw.get("backCoverImage")),
        spine_text=spine_text if isinstance(spine_text, str) else title,
        foundation=decode_foundation(raw.get("foundation")),
        amazon=ensure_amazon_data(raw.get("amazon"), title, author),
        interior_format=decode_interior_format(raw.get("interiorFormat")),
        is_published=_bool(raw.get("isPublished"), False),
        published_at=_opt_str(raw.get("publishedAt")),
        created_at=_str(raw.get("createdAt")),
        updated_at=_str(raw.get("updatedAt")),
        chats=ensure_book_chats(raw.get("chats")),
    )


def ensure_book_metadata(metadata: BookMetadata) -> BookMetadata:
    """Re-normalize an in-memory descriptor that callers may have edited."""
    return decode_book_metadata(metadata.to_dict(include_chats=True), "<memory>")


def encode_book_metadata(metadata: BookMetadata) -> dict:
    """On-disk form of the descriptor: chats stripped, schema version stamped."""
    payload = metadata.to_dict(include_chats=False)
    payload["schemaVersion"] = CURRENT_SCHEMA_VERSION
    return payload


# ---- Chapters and snapshots ----

def decode_chapter(raw: Any, chapter_id: str, index: int, now: str, path: str = "") -> ChapterDocument:
    """Decode a chapter document. The file's chapter id always wins over a stored id."""
    raw = _require_object(raw, path or f"{chapter_id}.json")
    stored_id = _str(raw.get("id")).strip()
    if stored_id and stored_id != chapter_id:
        logger.warning(
            "Chapter file %s names chapter %r, using %r from the file name",
            path or f"{chapter_id}.json", stored_id, chapter_id,
        )
    created_at = _str(raw.get("createdAt")).strip() or now
    return ChapterDocument(
        id=chapter_id,
        title=_str(raw.get("title")).strip() or chapter_display_title(chapter_id, index),
        content=raw["content"] if isinstance(raw.get("content"), str) else DEFAULT_CHAPTER_CONTENT,
        content_json=None,
        length_preset=resolve_length_preset(raw.get("lengthPreset")),
        created_at=created_at,
        updated_at=_str(raw.get("updatedAt")).strip() or created_at,
    )


def decode_snapshot(raw: Any, chapter_id: str, path: str = "") -> ChapterSnapshot:
    raw = _require_object(raw, path)
    version = raw.get("version")
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise CorruptDocumentError(path, "snapshot version must be a positive integer")
    snapshot_chapter_id = _str(raw.get("chapterId")).strip() or chapter_id
    if snapshot_chapter_id != chapter_id:
        raise CorruptDocumentError(path, f"snapshot belongs to chapter {snapshot_chapter_id!r}")
    created_at = _str(raw.get("createdAt"))
    milestone = raw.get("milestoneLabel")
    return ChapterSnapshot(
        version=version,
        chapter_id=chapter_id,
        reason=_str(raw.get("reason")),
        created_at=created_at,
        chapter=decode_chapter(raw.get("chapter"), chapter_id, 0, created_at or now_iso(), path),
        milestone_label=milestone if isinstance(milestone, str) else None,
    )


# ---- Library ----

def _decode_library_entry(raw: Any) -> Optional[LibraryBookEntry]:
    if not isinstance(raw, dict):
        return None
    path = _str(raw.get("path")).strip()
    if not path:
        return None
    try:
        status = BookStatus(raw.get("status"))
    except ValueError:
        status = BookStatus.RECIEN_CREADO
    chapter_count = raw.get("chapterCount")
    word_count = raw.get("wordCount")
    return LibraryBookEntry(
        id=_str(raw.get("id")).strip() or random_id("book"),
        path=path,
        title=_str(raw.get("title")),
        author=_str(raw.get("author")),
        status=status,
        chapter_count=chapter_count if isinstance(chapter_count, int) else 0,
        word_count=word_count if isinstance(word_count, int) else 0,
        cover_image=_opt_str(raw.get("coverImage")),
        published_at=_opt_str(raw.get("publishedAt")),
        last_opened_at=_str(raw.get("lastOpenedAt")),
        updated_at=_str(raw.get("updatedAt")),
    )


def build_default_library_index(
    advanced_chapter_threshold: int = DEFAULT_ADVANCED_CHAPTER_THRESHOLD,
) -> LibraryIndex:
    return LibraryIndex(
        status_rules=LibraryStatusRules(advanced_chapter_threshold=advanced_chapter_threshold),
        updated_at=now_iso(),
    )


def decode_library_index(
    raw: Any,
    path: str = "library.json",
    advanced_chapter_threshold: int = DEFAULT_ADVANCED_CHAPTER_THRESHOLD,
) -> LibraryIndex:
    raw = _require_object(raw, path)
    index = build_default_library_index(advanced_chapter_threshold)

    rules = raw.get("statusRules")
    if isinstance(rules, dict):
        threshold = rules.get("advancedChapterThreshold")
        if isinstance(threshold, int) and not isinstance(threshold, bool) and threshold >= 1:
            index.status_rules.advanced_chapter_threshold = threshold

    books = raw.get("books")
    if isinstance(books, list):
        for entry in books:
            decoded = _decode_library_entry(entry)
            if decoded is not None and index.find(decoded.path) is None:
                index.books.append(decoded)

    if isinstance(raw.get("updatedAt"), str):
        index.updated_at = raw["updatedAt"]
    return index
