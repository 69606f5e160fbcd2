"""Append-only per-chapter version history under ``versions/``."""

import logging
import re
from pathlib import Path
from typing import Optional

from config.exceptions import CorruptDocumentError
from models.chapter import ChapterDocument, ChapterSnapshot
from models.schema import decode_snapshot
from storage import layout
from storage.chapter_store import ChapterStore
from storage.fs import alist_files, amake_dirs, aread_json, awrite_json
from tools.text_utils import now_iso

logger = logging.getLogger(__name__)


def parse_version(file_name: str, chapter_id: str) -> int:
    """Version number encoded in ``<chapter_id>_v<N>.json``, or 0 if it does not match."""
    match = re.match(rf"^{re.escape(chapter_id)}_v(\d+)\.json$", file_name)
    return int(match.group(1)) if match else 0


class SnapshotStore:
    """Saves, lists and restores chapter snapshots."""

    def __init__(self, chapters: ChapterStore):
        self.chapters = chapters

    async def _versions(self, root: str | Path, chapter_id: str) -> list[tuple[int, Path]]:
        files = await alist_files(layout.versions_dir(root), ".json")
        versions = [(parse_version(p.name, chapter_id), p) for p in files]
        return sorted((v for v in versions if v[0] > 0), key=lambda v: v[0])

    async def save_chapter_snapshot(
        self,
        root: str | Path,
        chapter: ChapterDocument,
        reason: str,
        milestone_label: Optional[str] = None,
    ) -> ChapterSnapshot:
        await amake_dirs(layout.versions_dir(root))
        versions = await self._versions(root, chapter.id)
        next_version = versions[-1][0] + 1 if versions else 1

        snapshot = ChapterSnapshot(
            version=next_version,
            chapter_id=chapter.id,
            reason=reason,
            created_at=now_iso(),
            chapter=chapter.copy(content_json=None),
            milestone_label=milestone_label,
        )
        await awrite_json(layout.snapshot_file(root, chapter.id, next_version), snapshot.to_dict())
        logger.debug("Saved snapshot v%d of chapter %s", next_version, chapter.id)
        return snapshot

    async def list_chapter_snapshots(
        self, root: str | Path, chapter_id: str
    ) -> list[ChapterSnapshot]:
        """Snapshots of one chapter in ascending version order; corrupt files are skipped."""
        snapshots = []
        for version, path in await self._versions(root, chapter_id):
            try:
                snapshot = decode_snapshot(await aread_json(path), chapter_id, str(path))
            except (OSError, CorruptDocumentError) as e:
                logger.warning("Skipping unreadable snapshot %s: %s", path, e)
                continue
            if snapshot.version != version:
                logger.warning(
                    "Snapshot %s declares version %d, using the file name", path, snapshot.version
                )
                snapshot.version = version
            snapshots.append(snapshot)
        return snapshots

    async def restore_last_snapshot(
        self, root: str | Path, chapter_id: str
    ) -> Optional[ChapterDocument]:
        """Write the newest snapshot back over the live chapter.

        Returns None when the chapter has no readable snapshot.
        """
        snapshots = await self.list_chapter_snapshots(root, chapter_id)
        if not snapshots:
            return None

        last = snapshots[-1]
        restored = await self.chapters.save_chapter(root, last.chapter.copy(id=chapter_id))
        logger.info("Restored chapter %s from snapshot v%d", chapter_id, last.version)
        return restored
