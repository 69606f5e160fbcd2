"""Filesystem primitives shared by the stores.

Each helper is a small blocking function paired with an ``a*`` coroutine
that runs it in a worker thread, so the stores never block the event
loop. JSON files are UTF-8, two-space indented and newline-terminated.
"""

import asyncio
import json
import logging
import shutil
from pathlib import Path
from typing import Any

from config.exceptions import CorruptDocumentError

logger = logging.getLogger(__name__)


def read_json(path: str | Path) -> Any:
    """Read and parse a JSON file.

    Raises:
        CorruptDocumentError: If the file is not valid UTF-8 JSON.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorruptDocumentError(str(path), str(e)) from e


def write_json(path: str | Path, data: Any) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def write_text(path: str | Path, content: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def is_file(path: str | Path) -> bool:
    return Path(path).is_file()


def is_dir(path: str | Path) -> bool:
    return Path(path).is_dir()


def exists(path: str | Path) -> bool:
    return Path(path).exists()


def make_dirs(path: str | Path) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def list_dir(path: str | Path) -> list[Path]:
    """Entries of a directory sorted by name. Raises OSError on failure."""
    return sorted(Path(path).iterdir(), key=lambda p: p.name)


def list_files(path: str | Path, suffix: str = "") -> list[Path]:
    """Regular files in a directory, filtered by case-insensitive suffix.

    A missing directory yields an empty list.
    """
    path = Path(path)
    if not path.is_dir():
        return []
    suffix = suffix.lower()
    return [p for p in list_dir(path) if p.is_file() and p.name.lower().endswith(suffix)]


def remove_file(path: str | Path) -> bool:
    """Delete a file if present. Returns True when something was removed."""
    path = Path(path)
    if not path.exists():
        return False
    path.unlink()
    return True


def remove_tree(path: str | Path) -> None:
    shutil.rmtree(path)


def copy_file(source: str | Path, target: str | Path) -> None:
    Path(target).parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)


# ---- Async wrappers ----

async def aread_json(path: str | Path) -> Any:
    return await asyncio.to_thread(read_json, path)


async def awrite_json(path: str | Path, data: Any) -> None:
    await asyncio.to_thread(write_json, path, data)


async def awrite_text(path: str | Path, content: str) -> None:
    await asyncio.to_thread(write_text, path, content)


async def ais_file(path: str | Path) -> bool:
    return await asyncio.to_thread(is_file, path)


async def ais_dir(path: str | Path) -> bool:
    return await asyncio.to_thread(is_dir, path)


async def aexists(path: str | Path) -> bool:
    return await asyncio.to_thread(exists, path)


async def amake_dirs(path: str | Path) -> None:
    await asyncio.to_thread(make_dirs, path)


async def alist_dir(path: str | Path) -> list[Path]:
    return await asyncio.to_thread(list_dir, path)


async def alist_files(path: str | Path, suffix: str = "") -> list[Path]:
    return await asyncio.to_thread(list_files, path, suffix)


async def aremove_file(path: str | Path) -> bool:
    return await asyncio.to_thread(remove_file, path)


async def aremove_tree(path: str | Path) -> None:
    await asyncio.to_thread(remove_tree, path)


async def acopy_file(source: str | Path, target: str | Path) -> None:
    await asyncio.to_thread(copy_file, source, target)
