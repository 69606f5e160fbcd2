"""CLI entry point for the folio manuscript store.

Usage:
  folio create PARENT -t "Title"       create a new book under PARENT
  folio show PATH                     open a book and show its chapters
  folio library                       list every known book
  folio chapter add PATH              append a chapter
  folio snapshot PATH CHAPTER         save a version of a chapter
  folio --help                        list all commands
"""

import asyncio
import logging
import os
import sys

# Ensure UTF-8 output on Windows so Rich can print accented titles
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")

import click
from pydantic import ValidationError

from cli.theme import (
    app_header,
    book_summary_panel,
    chapter_table,
    command_panel,
    get_console,
    library_table,
    snapshot_table,
    success_panel,
)
from config.exceptions import FolioError, InvalidConfigError
from config.logging_config import setup_logging
from config.settings import Settings
from models.enums import MoveDirection
from storage.book_store import BookStore

console = get_console()
logger = logging.getLogger(__name__)


def _load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        raise InvalidConfigError("Invalid folio settings", {"errors": e.error_count()}) from e


def _run(ctx: click.Context, coro_factory):
    """Run a coroutine built from the context's store, turning errors into exit code 1."""
    try:
        store = ctx.obj["store"]
        return asyncio.run(coro_factory(store))
    except FolioError as e:
        console.print(f"[error]{e}[/]")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose):
    """folio: plain-file storage for long-form manuscripts.

    \b
    Settings come from FOLIO_* environment variables or a .env file:
      FOLIO_LIBRARY_DIR     where library.json lives
      FOLIO_LOG_DIR         where folio.log is written
    """
    try:
        settings = _load_settings()
    except FolioError as e:
        console.print(f"[error]{e}[/]")
        sys.exit(1)

    setup_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        log_dir=settings.log_dir,
        console_enabled=verbose,
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["store"] = BookStore.from_settings(settings)


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("parent", type=click.Path(file_okay=False))
@click.option("--title", "-t", required=True, help="Book title")
@click.option("--author", "-a", default="", help="Author name (defaults to FOLIO_DEFAULT_AUTHOR)")
@click.pass_context
def create(ctx, parent, title, author):
    """Create a new book folder under PARENT.

    Examples:
      folio create ~/books -t "Mi libro" -a "Ana"
    """
    console.print(app_header())
    console.print(command_panel("New book", {"Parent": parent, "Title": title}))

    project = _run(ctx, lambda store: store.create_book(parent, title, author))
    console.print(success_panel("Book created", f"  {project.metadata.title}\n  {project.path}"))


@cli.command()
@click.argument("path")
@click.pass_context
def show(ctx, path):
    """Open the book found at or below PATH and show its chapters."""
    project = _run(ctx, lambda store: store.open_book(path))

    console.print(app_header())
    console.print(book_summary_panel(project))
    console.print(chapter_table(project))


@cli.command()
@click.argument("path")
@click.pass_context
def resolve(ctx, path):
    """Print the canonical book folder for PATH."""
    root = _run(ctx, lambda store: store.resolve_book_directory(path))
    click.echo(root)


@cli.command()
@click.pass_context
def library(ctx):
    """List every book in the library, most recently opened first."""
    index = _run(ctx, lambda store: store.list_library())

    console.print(app_header())
    if not index.books:
        console.print("[warning]The library is empty. Use [info]folio create[/] to start a book.[/]")
        return
    console.print(library_table(index))


@cli.command()
@click.argument("path")
@click.option("--delete-files", is_flag=True, help="Also delete the book folder from disk")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
def forget(ctx, path, delete_files, force):
    """Remove a book from the library, optionally deleting its folder."""
    if delete_files and not force:
        if not click.confirm(f"Delete {path} from disk? This cannot be undone", default=False):
            console.print("[warning]Cancelled[/]")
            return

    index = _run(ctx, lambda store: store.remove_from_library(path, delete_files))
    action = "Deleted" if delete_files else "Removed from library"
    console.print(f"[success]{action}: {path}[/] [muted]({len(index.books)} books left)[/]")


# ---------------------------------------------------------------------------
# Chapters
# ---------------------------------------------------------------------------

@cli.group()
def chapter():
    """Add, rename, duplicate, move and delete chapters."""


@chapter.command(name="add")
@click.argument("path")
@click.option("--title", "-t", default="Nuevo capitulo", help="Chapter title")
@click.pass_context
def chapter_add(ctx, path, title):
    """Append a new chapter to the book at PATH."""

    async def _add(store: BookStore):
        project = await store.open_book(path)
        return await store.create_chapter(project, title)

    _, created = _run(ctx, _add)
    console.print(f"[success]Created chapter {created.id}:[/] {created.title}")


@chapter.command(name="rename")
@click.argument("path")
@click.argument("chapter_id")
@click.argument("title")
@click.pass_context
def chapter_rename(ctx, path, chapter_id, title):
    """Rename chapter CHAPTER_ID."""

    async def _rename(store: BookStore):
        project = await store.open_book(path)
        return await store.rename_chapter(project, chapter_id, title)

    _run(ctx, _rename)
    console.print(f"[success]Renamed chapter {chapter_id}:[/] {title}")


@chapter.command(name="duplicate")
@click.argument("path")
@click.argument("chapter_id")
@click.pass_context
def chapter_duplicate(ctx, path, chapter_id):
    """Copy chapter CHAPTER_ID to a new chapter at the end."""

    async def _duplicate(store: BookStore):
        project = await store.open_book(path)
        return await store.duplicate_chapter(project, chapter_id)

    _, created = _run(ctx, _duplicate)
    console.print(f"[success]Created chapter {created.id}:[/] {created.title}")


@chapter.command(name="move")
@click.argument("path")
@click.argument("chapter_id")
@click.argument("direction", type=click.Choice([d.value for d in MoveDirection]))
@click.pass_context
def chapter_move(ctx, path, chapter_id, direction):
    """Swap chapter CHAPTER_ID with its neighbour."""

    async def _move(store: BookStore):
        project = await store.open_book(path)
        return await store.move_chapter(project, chapter_id, direction)

    project = _run(ctx, _move)
    console.print(f"[info]Order:[/] {', '.join(project.metadata.chapter_order)}")


@chapter.command(name="delete")
@click.argument("path")
@click.argument("chapter_id")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
def chapter_delete(ctx, path, chapter_id, force):
    """Delete chapter CHAPTER_ID and its chat log."""
    if not force:
        if not click.confirm(f"Delete chapter {chapter_id}?", default=False):
            console.print("[warning]Cancelled[/]")
            return

    async def _delete(store: BookStore):
        project = await store.open_book(path)
        return await store.delete_chapter(project, chapter_id)

    project = _run(ctx, _delete)
    console.print(f"[success]Deleted chapter {chapter_id}[/] [muted]({len(project.metadata.chapter_order)} left)[/]")


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("path")
@click.argument("chapter_id")
@click.option("--reason", "-r", default="manual", help="Why the snapshot was taken")
@click.option("--milestone", "-m", default=None, help="Optional milestone label")
@click.pass_context
def snapshot(ctx, path, chapter_id, reason, milestone):
    """Save a new version of chapter CHAPTER_ID."""

    async def _snapshot(store: BookStore):
        project = await store.open_book(path)
        return await store.snapshot_chapter(project, chapter_id, reason, milestone)

    saved = _run(ctx, _snapshot)
    console.print(f"[success]Saved version {saved.version} of chapter {chapter_id}[/]")


@cli.command()
@click.argument("path")
@click.argument("chapter_id")
@click.pass_context
def snapshots(ctx, path, chapter_id):
    """List the saved versions of chapter CHAPTER_ID."""

    async def _list(store: BookStore):
        project = await store.open_book(path)
        return await store.list_snapshots(project, chapter_id)

    found = _run(ctx, _list)
    if not found:
        console.print(f"[warning]No snapshots for chapter {chapter_id}[/]")
        return
    console.print(snapshot_table(chapter_id, found))


@cli.command()
@click.argument("path")
@click.argument("chapter_id")
@click.pass_context
def restore(ctx, path, chapter_id):
    """Restore chapter CHAPTER_ID from its latest snapshot."""

    async def _restore(store: BookStore):
        project = await store.open_book(path)
        return await store.restore_last_snapshot(project, chapter_id)

    _, restored = _run(ctx, _restore)
    if restored is None:
        console.print(f"[warning]No snapshots for chapter {chapter_id}[/]")
        sys.exit(1)
    console.print(f"[success]Restored chapter {chapter_id}:[/] {restored.title}")


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
