"""Enumerations for book, chapter, chat and library state."""

from enum import Enum


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatScope(str, Enum):
    BOOK = "book"
    CHAPTER = "chapter"


class BookStatus(str, Enum):
    RECIEN_CREADO = "recien_creado"
    AVANZADO = "avanzado"
    PUBLICADO = "publicado"


class ChapterLengthPreset(str, Enum):
    CORTA = "corta"
    MEDIA = "media"
    LARGA = "larga"


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class AmazonPresetType(str, Enum):
    NON_FICTION_REFLEXIVE = "non-fiction-reflexive"
    PRACTICAL_ESSAY = "practical-essay"
    INTIMATE_NARRATIVE = "intimate-narrative"


class TrimSize(str, Enum):
    SIZE_5X8 = "5x8"
    SIZE_5_5X8_5 = "5.5x8.5"
    SIZE_6X9 = "6x9"
    A5 = "a5"
    CUSTOM = "custom"


class AiResponseMode(str, Enum):
    RAPIDO = "rapido"
    EQUILIBRADO = "equilibrado"
    CALIDAD = "calidad"
