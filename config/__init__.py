"""Configuration package: settings, logging, and exceptions."""

from config.exceptions import (
    FolioError,
    BookNotFoundError,
    StorageAccessError,
    CorruptDocumentError,
    PreconditionError,
    UnsafeDeletionError,
    InvalidConfigError,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "FolioError",
    "BookNotFoundError",
    "StorageAccessError",
    "CorruptDocumentError",
    "PreconditionError",
    "UnsafeDeletionError",
    "InvalidConfigError",
]
