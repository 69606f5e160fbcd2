"""Rich styles and renderables for books, chapters, snapshots and the library."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

from models.book import BookProject
from models.chapter import ChapterSnapshot
from models.library import LibraryIndex
from tools.text_utils import count_words

FOLIO_THEME = Theme({
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "field.label": "dim",
    "field.value": "bold",
    "chapter.id": "blue",
    "book.title": "bold cyan",
    "snapshot.milestone": "magenta",
    # One style per BookStatus value
    "status.recien_creado": "yellow",
    "status.avanzado": "green",
    "status.publicado": "cyan",
})


def get_console() -> Console:
    """Return a Console instance with the folio theme applied."""
    return Console(theme=FOLIO_THEME)


def app_header(title: str = "folio") -> Rule:
    """Return a Rule element for the application header banner."""
    return Rule(title=f"[bold]{title}[/]", style="dim")


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Return a Panel displaying command parameters.

    Args:
        title: Panel title (e.g. "New book").
        fields: Ordered dict of label -> value pairs.
    """
    lines = []
    for label, value in fields.items():
        lines.append(f"  [field.label]{label}:[/] [field.value]{value}[/]")
    body = "\n".join(lines)
    return Panel(body, title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def success_panel(title: str, body: str) -> Panel:
    """Return a green-bordered Panel for success results."""
    return Panel(body, title=f"[success]{title}[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))


def book_summary_panel(project: BookProject) -> Panel:
    """Return a Panel with the book's headline facts."""
    metadata = project.metadata
    words = sum(count_words(c.content) for c in project.ordered_chapters())
    published = (metadata.published_at or "yes") if metadata.is_published else "no"
    body = (
        f"  [field.label]Author:[/] [field.value]{metadata.author}[/]  "
        f"[muted]|[/]  [field.label]Chapters:[/] [field.value]{len(metadata.chapter_order)}[/]  "
        f"[muted]|[/]  [field.label]Words:[/] [field.value]{words:,}[/]\n"
        f"  [field.label]Published:[/] {published}  "
        f"[muted]|[/]  [field.label]Updated:[/] {metadata.updated_at}\n"
        f"  [field.label]Path:[/] {project.path}"
    )
    return Panel(
        body,
        title=f"[book.title]{metadata.title}[/]",
        box=box.ROUNDED,
        border_style="dim",
        padding=(0, 2),
    )


def chapter_table(project: BookProject) -> Table:
    """Build a Rich Table of the chapters in reading order."""
    table = Table(title="Chapters", border_style="dim")
    table.add_column("ID", style="chapter.id")
    table.add_column("Title")
    table.add_column("Words", justify="right")
    table.add_column("Length", style="muted")
    table.add_column("Updated", style="muted")

    for chapter_id in project.metadata.chapter_order:
        chapter = project.chapters.get(chapter_id)
        if chapter is None:
            table.add_row(chapter_id, "[warning]missing[/]", "-", "-", "-")
            continue
        table.add_row(
            chapter_id,
            chapter.title,
            str(count_words(chapter.content)),
            chapter.length_preset.value,
            chapter.updated_at,
        )
    return table


def library_table(index: LibraryIndex) -> Table:
    """Build a Rich Table of every book in the library, most recently opened first."""
    table = Table(title="Library", show_lines=True, border_style="dim")
    table.add_column("Title", style="bold", no_wrap=True)
    table.add_column("Author")
    table.add_column("Status")
    table.add_column("Chapters", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Path", style="muted", overflow="fold")

    for book in index.books:
        table.add_row(
            book.title,
            book.author,
            f"[status.{book.status.value}]{book.status.value}[/]",
            str(book.chapter_count),
            str(book.word_count),
            book.path,
        )
    return table


def snapshot_table(chapter_id: str, snapshots: list[ChapterSnapshot]) -> Table:
    table = Table(title=f"Snapshots of chapter {chapter_id}", border_style="dim")
    table.add_column("Version", style="chapter.id", justify="right")
    table.add_column("Reason")
    table.add_column("Milestone", style="snapshot.milestone")
    table.add_column("Created", style="muted")

    for snapshot in snapshots:
        table.add_row(
            str(snapshot.version),
            snapshot.reason or "-",
            snapshot.milestone_label or "",
            snapshot.created_at,
        )
    return table
