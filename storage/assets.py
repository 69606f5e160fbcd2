"""Cover images under ``assets/`` and plain-text files under ``exports/``."""

import logging
import re
from pathlib import Path
from typing import Optional

from config.exceptions import PreconditionError
from models.book import BookMetadata
from storage import layout
from storage.descriptor import save_book_metadata
from storage.fs import acopy_file, aexists, ais_file, aremove_file, awrite_text
from tools.text_utils import join_path, normalize_path, safe_file_name

logger = logging.getLogger(__name__)

COVER_NAME = "cover"
BACK_COVER_NAME = "back-cover"
DEFAULT_IMAGE_EXTENSION = "png"

_EXTENSION_RE = re.compile(r"\.([a-zA-Z0-9]+)$")


def image_extension(source: str) -> str:
    match = _EXTENSION_RE.search(source)
    extension = match.group(1).lower() if match else DEFAULT_IMAGE_EXTENSION
    return safe_file_name(extension) or DEFAULT_IMAGE_EXTENSION


def sanitize_export_file_name(file_name: str, fallback_extension: str) -> str:
    """``"Mi libro final.MD"`` -> ``"Mi-libro-final.md"``."""
    trimmed = file_name.strip()
    match = _EXTENSION_RE.search(trimmed)
    extension = match.group(1).lower() if match else fallback_extension
    base = trimmed[: match.start()] if match else trimmed
    safe_base = safe_file_name(base) or "export"
    safe_extension = safe_file_name(extension) or fallback_extension
    return f"{safe_base}.{safe_extension}"


class AssetStore:
    """Copies cover images into the book and writes export files."""

    async def _set_image(
        self,
        root: str | Path,
        metadata: BookMetadata,
        source: str,
        target_name: str,
        field: str,
    ) -> BookMetadata:
        source = normalize_path(source)
        if not await ais_file(source):
            raise PreconditionError("Image file not found", {"path": source})

        relative = join_path(layout.ASSETS_DIR, f"{target_name}.{image_extension(source)}")
        await acopy_file(source, Path(root) / relative)
        logger.info("Copied %s to %s", source, relative)
        return await save_book_metadata(root, metadata.copy(**{field: relative}))

    async def _clear_image(
        self, root: str | Path, metadata: BookMetadata, field: str
    ) -> BookMetadata:
        relative = getattr(metadata, field)
        if relative:
            absolute = (Path(root) / relative).resolve()
            if not absolute.is_relative_to(Path(root).resolve()):
                logger.warning("Not deleting %s, it is outside the book folder %s", absolute, root)
            elif await aexists(absolute):
                await aremove_file(absolute)
        return await save_book_metadata(root, metadata.copy(**{field: None}))

    async def set_cover_image(
        self, root: str | Path, metadata: BookMetadata, source: str
    ) -> BookMetadata:
        return await self._set_image(root, metadata, source, COVER_NAME, "cover_image")

    async def set_back_cover_image(
        self, root: str | Path, metadata: BookMetadata, source: str
    ) -> BookMetadata:
        return await self._set_image(root, metadata, source, BACK_COVER_NAME, "back_cover_image")

    async def clear_cover_image(self, root: str | Path, metadata: BookMetadata) -> BookMetadata:
        return await self._clear_image(root, metadata, "cover_image")

    async def clear_back_cover_image(
        self, root: str | Path, metadata: BookMetadata
    ) -> BookMetadata:
        return await self._clear_image(root, metadata, "back_cover_image")

    @staticmethod
    def cover_absolute_path(root: str | Path, metadata: BookMetadata) -> Optional[str]:
        if not metadata.cover_image:
            return None
        return join_path(str(root), metadata.cover_image)

    @staticmethod
    def back_cover_absolute_path(root: str | Path, metadata: BookMetadata) -> Optional[str]:
        if not metadata.back_cover_image:
            return None
        return join_path(str(root), metadata.back_cover_image)

    async def write_text_export(
        self,
        root: str | Path,
        file_name: str,
        content: str,
        fallback_extension: str = "txt",
    ) -> str:
        """Write ``content`` under ``exports/`` and return the absolute path."""
        name = sanitize_export_file_name(file_name, fallback_extension)
        path = layout.exports_dir(root) / name
        await awrite_text(path, content)
        return str(path)

    async def write_markdown_export(self, root: str | Path, file_name: str, content: str) -> str:
        return await self.write_text_export(root, file_name, content, "md")
