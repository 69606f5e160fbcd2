"""Book metadata data models (the ``book.json`` descriptor)."""

from dataclasses import dataclass, field, replace
from typing import Optional

from models.chapter import ChapterDocument
from models.chat import BookChats
from models.enums import AmazonPresetType, TrimSize


@dataclass
class BookFoundation:
    """Free-text authorial constraints that guide the whole book."""
    central_idea: str = ""
    promise: str = ""
    audience: str = ""
    narrative_voice: str = "Intimo, sobrio, reflexivo."
    style_rules: str = "Frases claras, sin relleno, evitar tono de autoayuda."
    structure_notes: str = ""
    glossary_preferred: str = ""
    glossary_avoid: str = ""

    def to_dict(self) -> dict:
        return {
            "centralIdea": self.central_idea,
            "promise": self.promise,
            "audience": self.audience,
            "narrativeVoice": self.narrative_voice,
            "styleRules": self.style_rules,
            "structureNotes": self.structure_notes,
            "glossaryPreferred": self.glossary_preferred,
            "glossaryAvoid": self.glossary_avoid,
        }


@dataclass
class AmazonContributor:
    role: str = ""
    name: str = ""


@dataclass
class AmazonMarketPricing:
    """Price row for one marketplace/currency pair."""
    marketplace: str = ""
    currency: str = ""
    ebook_price: Optional[float] = None
    print_price: Optional[float] = None


@dataclass
class AmazonKdpData:
    """Marketplace metadata for publishing on Amazon KDP."""
    preset_type: AmazonPresetType = AmazonPresetType.NON_FICTION_REFLEXIVE
    marketplace: str = "Amazon.com"
    language: str = "es"
    kdp_title: str = ""
    subtitle: str = ""
    pen_name: str = ""
    series_name: str = ""
    edition: str = "1"
    contributors: list[AmazonContributor] = field(default_factory=list)
    own_copyright: bool = True
    is_adult_content: bool = False
    isbn: str = ""
    enable_drm: bool = False
    enroll_kdp_select: bool = False
    ebook_royalty_plan: int = 70
    print_cost_estimate: float = 3.5
    market_pricing: list[AmazonMarketPricing] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    back_cover_text: str = ""
    long_description: str = ""
    author_bio: str = ""
    kdp_notes: str = ""

    def to_dict(self) -> dict:
        return {
            "presetType": self.preset_type.value,
            "marketplace": self.marketplace,
            "language": self.language,
            "kdpTitle": self.kdp_title,
            "subtitle": self.subtitle,
            "penName": self.pen_name,
            "seriesName": self.series_name,
            "edition": self.edition,
            "contributors": [{"role": c.role, "name": c.name} for c in self.contributors],
            "ownCopyright": self.own_copyright,
            "isAdultContent": self.is_adult_content,
            "isbn": self.isbn,
            "enableDRM": self.enable_drm,
            "enrollKDPSelect": self.enroll_kdp_select,
            "ebookRoyaltyPlan": self.ebook_royalty_plan,
            "printCostEstimate": self.print_cost_estimate,
            "marketPricing": [
                {
                    "marketplace": p.marketplace,
                    "currency": p.currency,
                    "ebookPrice": p.ebook_price,
                    "printPrice": p.print_price,
                }
                for p in self.market_pricing
            ],
            "keywords": list(self.keywords),
            "categories": list(self.categories),
            "backCoverText": self.back_cover_text,
            "longDescription": self.long_description,
            "authorBio": self.author_bio,
            "kdpNotes": self.kdp_notes,
        }


@dataclass
class InteriorFormat:
    """Print interior page geometry."""
    trim_size: TrimSize = TrimSize.SIZE_6X9
    page_width_in: float = 6
    page_height_in: float = 9
    margin_top_mm: float = 18
    margin_bottom_mm: float = 18
    margin_inside_mm: float = 20
    margin_outside_mm: float = 16
    paragraph_indent_em: float = 1.4
    line_height: float = 1.55

    def to_dict(self) -> dict:
        return {
            "trimSize": self.trim_size.value,
            "pageWidthIn": self.page_width_in,
            "pageHeightIn": self.page_height_in,
            "marginTopMm": self.margin_top_mm,
            "marginBottomMm": self.margin_bottom_mm,
            "marginInsideMm": self.margin_inside_mm,
            "marginOutsideMm": self.margin_outside_mm,
            "paragraphIndentEm": self.paragraph_indent_em,
            "lineHeight": self.line_height,
        }


@dataclass
class BookMetadata:
    """Top-level book descriptor.

    ``chats`` is an in-memory aggregate only; it is persisted by the chat
    store under ``chats/`` and stripped from ``book.json`` on every save.
    """
    title: str = ""
    author: str = ""
    chapter_order: list[str] = field(default_factory=list)
    cover_image: Optional[str] = None
    back_cover_image: Optional[str] = None
    spine_text: str = ""
    foundation: BookFoundation = field(default_factory=BookFoundation)
    amazon: AmazonKdpData = field(default_factory=AmazonKdpData)
    interior_format: InteriorFormat = field(default_factory=InteriorFormat)
    is_published: bool = False
    published_at: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    chats: BookChats = field(default_factory=BookChats)

    def to_dict(self, include_chats: bool = True) -> dict:
        payload = {
            "title": self.title,
            "author": self.author,
            "chapterOrder": list(self.chapter_order),
            "coverImage": self.cover_image,
            "backCoverImage": self.back_cover_image,
            "spineText": self.spine_text,
            "foundation": self.foundation.to_dict(),
            "amazon": self.amazon.to_dict(),
            "interiorFormat": self.interior_format.to_dict(),
            "isPublished": self.is_published,
            "publishedAt": self.published_at,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if include_chats:
            payload["chats"] = self.chats.to_dict()
        return payload

    def copy(self, **changes) -> "BookMetadata":
        if "chapter_order" not in changes:
            changes["chapter_order"] = list(self.chapter_order)
        return replace(self, **changes)


@dataclass
class BookProject:
    """An opened book: its canonical root, descriptor and loaded chapters."""
    path: str
    metadata: BookMetadata
    chapters: dict[str, ChapterDocument] = field(default_factory=dict)

    def ordered_chapters(self) -> list[ChapterDocument]:
        return [self.chapters[cid] for cid in self.metadata.chapter_order if cid in self.chapters]
