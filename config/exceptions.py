"""Custom exception hierarchy for the manuscript store."""

from typing import Optional


class FolioError(Exception):
    """Base exception for all folio errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Lookup Errors ----

class BookNotFoundError(FolioError):
    """No book project could be discovered from the supplied path."""

    def __init__(self, path: str, message: str = ""):
        msg = message or (
            "No book.json found in the selected folder. Choose the book folder "
            "(the one containing chapters, assets and versions)."
        )
        super().__init__(msg, {"path": path})
        self.path = path


class StorageAccessError(FolioError):
    """A filesystem permission or I/O failure while probing a path."""

    def __init__(self, path: str, cause: str = ""):
        super().__init__(
            f"Could not access the selected folder ({path}: {cause or 'file access error'})",
            {"path": path},
        )
        self.path = path
        self.cause = cause


# ---- Document Errors ----

class CorruptDocumentError(FolioError):
    """A JSON document failed to parse or did not have the expected shape."""

    def __init__(self, path: str, reason: str = ""):
        details = {"path": path}
        if reason:
            details["reason"] = reason
        super().__init__("Corrupt document", details)
        self.path = path
        self.reason = reason


# ---- Mutation Errors ----

class PreconditionError(FolioError):
    """An operation was refused because the target is not in the expected state."""


class UnsafeDeletionError(PreconditionError):
    """Refused to delete a folder that does not look like a book project."""

    def __init__(self, path: str):
        super().__init__(
            "The folder does not look like a valid book project. Deletion cancelled for safety.",
            {"path": path},
        )
        self.path = path


# ---- Configuration Errors ----

class InvalidConfigError(FolioError):
    """Configuration value is invalid."""
