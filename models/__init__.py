"""Models package: book, chapter, chat and library documents, and enums."""

from models.app_config import AppConfig
from models.book import (
    AmazonContributor,
    AmazonKdpData,
    AmazonMarketPricing,
    BookFoundation,
    BookMetadata,
    BookProject,
    InteriorFormat,
)
from models.chapter import ChapterDocument, ChapterSnapshot
from models.chat import BookChats, ChatMessage
from models.enums import (
    AiResponseMode,
    AmazonPresetType,
    BookStatus,
    ChapterLengthPreset,
    ChatRole,
    ChatScope,
    MoveDirection,
    TrimSize,
)
from models.library import LibraryBookEntry, LibraryIndex, LibraryStatusRules

__all__ = [
    "AppConfig",
    "AmazonContributor",
    "AmazonKdpData",
    "AmazonMarketPricing",
    "BookFoundation",
    "BookMetadata",
    "BookProject",
    "InteriorFormat",
    "ChapterDocument",
    "ChapterSnapshot",
    "BookChats",
    "ChatMessage",
    "LibraryBookEntry",
    "LibraryIndex",
    "LibraryStatusRules",
    "AiResponseMode",
    "AmazonPresetType",
    "BookStatus",
    "ChapterLengthPreset",
    "ChatRole",
    "ChatScope",
    "MoveDirection",
    "TrimSize",
]
