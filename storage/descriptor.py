"""Reading and writing the ``book.json`` descriptor."""

from pathlib import Path

from models.book import BookMetadata
from models.schema import decode_book_metadata, encode_book_metadata, ensure_book_metadata
from storage import layout
from storage.fs import aread_json, awrite_json
from tools.text_utils import now_iso


async def read_book_metadata(root: str | Path) -> BookMetadata:
    """Load and decode ``book.json``.

    Raises:
        CorruptDocumentError: Invalid JSON or not an object.
        OSError: File missing or unreadable.
    """
    path = layout.book_file(root)
    return decode_book_metadata(await aread_json(path), str(path))


async def save_book_metadata(root: str | Path, metadata: BookMetadata) -> BookMetadata:
    """Persist the descriptor, stamping ``updatedAt``.

    Returns the normalized descriptor, chats included in memory; the file
    itself never carries chats.
    """
    next_metadata = ensure_book_metadata(metadata.copy(updated_at=now_iso()))
    await awrite_json(layout.book_file(root), encode_book_metadata(next_metadata))
    return next_metadata
