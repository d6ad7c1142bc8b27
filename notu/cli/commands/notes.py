"""
Note Commands.

List, create, edit and move notes between the active, archived and
trashed partitions.
"""

from collections.abc import Sequence
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from notu.cli.client import require_login, run
from notu.core.exceptions import NotFoundError
from notu.core.i18n import get_translation
from notu.schemas.note import Note, Partition, SortOrder, normalize_color
from notu.services.app import AppController
from notu.services.notes import NotesController

console = Console()

_LIVE = (Partition.ACTIVE, Partition.ARCHIVED)
_ANY = (Partition.ACTIVE, Partition.ARCHIVED, Partition.TRASHED)


def _ready(app: AppController) -> NotesController:
    if app.sync_enabled:
        require_login(app)
    return app.notes


async def _load_containing(notes: NotesController, note_id: str, partitions: Sequence[Partition]) -> None:
    """Switch to the first partition that holds the note."""
    for partition in partitions:
        if notes.partition is not partition:
            await notes.set_partition(partition)
        if any(note.id == note_id for note in notes.notes):
            return
    raise NotFoundError(f"Note {note_id} not found")


def _report(notes: NotesController) -> None:
    """Print the error of the last intent and exit non-zero."""
    if notes.error is not None:
        console.print(f"[yellow]{notes.error.text}[/yellow]")
        raise typer.Exit(1)


def _display_notes(notes: list[Note], partition: Partition, offline: bool, language: str) -> None:
    title = f"Notes ({partition.value})"
    if offline:
        title += " [dim]offline[/dim]"
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("", width=1)
    table.add_column("Title", style="bold")
    table.add_column("Content")
    table.add_column("Color")
    table.add_column("Modified")

    for note in notes:
        preview = note.content.replace("\n", " ")
        if len(preview) > 40:
            preview = preview[:37] + "..."
        table.add_row(
            note.id,
            "*" if note.is_pinned else "",
            note.title,
            preview,
            f"[on {note.color}]  [/] {note.color}",
            note.modified_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)
    console.print(f"[dim]{get_translation(language, 'notesCount', n=len(notes))}[/dim]")


def list_notes(
    archived: bool = typer.Option(False, "--archived", "-a", help="Show archived notes"),
    trash: bool = typer.Option(False, "--trash", "-t", help="Show notes in the trash"),
    sort: SortOrder = typer.Option(SortOrder.RECENCY, "--sort", "-s", help="Sort order"),
    search: str = typer.Option("", "--search", "-q", help="Filter by title or content"),
) -> None:
    """
    List notes of one partition.

    Pinned notes always come first.

    Examples:
        notu list
        notu list --archived --sort title
        notu list --search milk
    """
    if archived and trash:
        console.print("[red]Choose either --archived or --trash[/red]")
        raise typer.Exit(1)
    partition = Partition.TRASHED if trash else Partition.ARCHIVED if archived else Partition.ACTIVE

    async def _list(app: AppController) -> tuple[NotesController, str]:
        notes = _ready(app)
        if notes.partition is not partition:
            await notes.set_partition(partition)
        notes.set_sort(sort)
        notes.set_search(search)
        return notes, app.preferences.language

    notes, language = run(_list)
    _display_notes(
        notes.visible_notes, partition,
        offline=notes.sync_enabled and not notes.is_online,
        language=language,
    )
    if notes.error is not None:
        console.print(f"[yellow]{notes.error.text}[/yellow]")


def add(
    title: str = typer.Option("", "--title", "-t", help="Note title"),
    content: str = typer.Option("", "--content", "-c", help="Note content"),
    color: str = typer.Option("#E9D5FF", "--color", help="Palette color (hex)"),
    image: Optional[list[str]] = typer.Option(None, "--image", "-i", help="Image URL (repeatable)"),
    pin: bool = typer.Option(False, "--pin", help="Pin the note"),
) -> None:
    """Create a note. A blank title becomes the untitled placeholder."""

    async def _add(app: AppController) -> Note | None:
        notes = _ready(app)
        draft = notes.start_new(color)
        draft.title = title
        draft.content = content
        draft.is_pinned = pin
        for url in image or []:
            draft.add_image(url)
        note = await notes.save()
        _report(notes)
        return note

    note = run(_add)
    if note is None:
        console.print("[dim]Empty note discarded.[/dim]")
        return
    console.print(f"[green]Created[/green] {note.title} [dim]({note.id})[/dim]")


def edit(
    note_id: str = typer.Argument(..., help="Note ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New content"),
    color: Optional[str] = typer.Option(None, "--color", help="New palette color (hex)"),
    image: Optional[list[str]] = typer.Option(None, "--image", "-i", help="Attach an image URL (repeatable)"),
) -> None:
    """Change a note. Options left out keep their current value."""

    async def _edit(app: AppController) -> Note | None:
        notes = _ready(app)
        await _load_containing(notes, note_id, _LIVE)
        draft = notes.start_edit(note_id)
        if title is not None:
            draft.title = title
        if content is not None:
            draft.content = content
        if color is not None:
            draft.color = normalize_color(color)
        for url in image or []:
            draft.add_image(url)
        note = await notes.save()
        _report(notes)
        return note

    note = run(_edit)
    if note is None:
        console.print("[dim]Nothing to save.[/dim]")
        return
    console.print(f"[green]Saved[/green] {note.title}")


def delete(
    note_id: str = typer.Argument(..., help="Note ID"),
    permanent: bool = typer.Option(False, "--permanent", help="Delete for good instead of moving to the trash"),
) -> None:
    """Move a note to the trash, or delete it permanently."""

    async def _delete(app: AppController) -> None:
        notes = _ready(app)
        await _load_containing(notes, note_id, _ANY)
        if permanent:
            await notes.delete_permanently(note_id)
        else:
            await notes.delete(note_id)
        _report(notes)

    run(_delete)
    console.print("[green]Deleted permanently[/green]" if permanent else "[green]Moved to trash[/green]")


def restore(note_id: str = typer.Argument(..., help="Note ID")) -> None:
    """Bring a note back from the trash."""

    async def _restore(app: AppController) -> None:
        notes = _ready(app)
        await _load_containing(notes, note_id, (Partition.TRASHED,))
        await notes.restore(note_id)
        _report(notes)

    run(_restore)
    console.print("[green]Restored[/green]")


def empty_trash(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Permanently delete every note in the trash."""
    if not yes:
        typer.confirm("Delete every note in the trash for good?", abort=True)

    async def _empty(app: AppController) -> int:
        notes = _ready(app)
        await notes.set_partition(Partition.TRASHED)
        removed = await notes.empty_trash()
        _report(notes)
        return removed

    removed = run(_empty)
    console.print(f"[green]Trash emptied[/green] [dim]({removed} removed)[/dim]")


def pin(note_id: str = typer.Argument(..., help="Note ID")) -> None:
    """Pin or unpin a note."""

    async def _pin(app: AppController) -> Note:
        notes = _ready(app)
        await _load_containing(notes, note_id, _LIVE)
        note = await notes.toggle_pin(note_id)
        _report(notes)
        return note

    note = run(_pin)
    console.print("[green]Pinned[/green]" if note.is_pinned else "[green]Unpinned[/green]")


def archive(note_id: str = typer.Argument(..., help="Note ID")) -> None:
    """Archive an active note, or unarchive an archived one."""

    async def _archive(app: AppController) -> Note:
        notes = _ready(app)
        await _load_containing(notes, note_id, _LIVE)
        note = await notes.toggle_archive(note_id)
        _report(notes)
        return note

    note = run(_archive)
    console.print("[green]Archived[/green]" if note.is_archived else "[green]Unarchived[/green]")


def sync() -> None:
    """Reload notes from the server."""

    async def _sync(app: AppController) -> NotesController:
        require_login(app)
        return app.notes

    notes = run(_sync)
    _report(notes)
    console.print(f"[green]Synced[/green] [dim]({len(notes.notes)} active notes)[/dim]")
