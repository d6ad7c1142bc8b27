"""
Notes Controller.

Owns the in-memory note collection for exactly one partition (active,
archived or trashed) and applies every mutation intent against it.

Mutation policy: optimistic, without rollback. Each intent changes the
collection first, then asks the backing store to confirm. On success,
server-assigned fields (id, timestamp, processed images) are merged in.
On failure the optimistic state stays on screen and a kind-tagged error is
set; the next full sync brings back whatever the server actually holds.
This trades strict consistency for responsiveness.

Backing store per operation:
    sync enabled   → domain client (remote service)
    sync disabled  → local cache, ids generated locally

Two intents on the same note that overlap in time (e.g. pin + delete) are
not ordered by anything here; the last write to land wins.
"""

import locale
import unicodedata
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from notu.client.api import ApiClient
from notu.core.concurrency import SingleFlight
from notu.core.exceptions import (
    ApplicationError,
    NetworkError,
    NotFoundError,
    SessionExpiredError,
    StorageError,
    ValidationError,
)
from notu.core.utils import new_local_id, utc_now
from notu.schemas.note import DEFAULT_COLOR, Note, NoteDraft, Partition, SortOrder
from notu.services.base import BaseController
from notu.storage.cache import LocalNoteCache


class ErrorKind(str, Enum):
    SYNC = "sync"
    SAVE = "save"
    DELETE = "delete"
    RESTORE = "restore"


_ERROR_LABELS = {
    ErrorKind.SYNC: "syncFailed",
    ErrorKind.SAVE: "saveFailed",
    ErrorKind.DELETE: "deleteFailed",
    ErrorKind.RESTORE: "restoreFailed",
}


@dataclass(frozen=True)
class NoteError:
    """User-visible failure of one intent."""

    kind: ErrorKind
    message: str
    detail: str | None = None

    @property
    def text(self) -> str:
        return f"{self.message}: {self.detail}" if self.detail else self.message


def _title_key(note: Note) -> str:
    """Accent- and case-insensitive collation key, ordered by the current locale."""
    decomposed = unicodedata.normalize("NFKD", note.title)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return locale.strxfrm(folded)


def sort_notes(notes: list[Note], order: SortOrder) -> list[Note]:
    """
    Order notes for display.

    Primary order by `order`, then pinned notes are moved to the front
    without disturbing the order inside the pinned and unpinned groups.
    """
    if order is SortOrder.TITLE:
        ordered = sorted(notes, key=_title_key)
    elif order is SortOrder.COLOR:
        ordered = sorted(notes, key=lambda note: note.color)
    else:
        ordered = sorted(notes, key=lambda note: note.modified_at, reverse=True)
    return sorted(ordered, key=lambda note: not note.is_pinned)


def _unique(notes: list[Note]) -> list[Note]:
    seen: set[str] = set()
    result = []
    for note in notes:
        if note.id not in seen:
            seen.add(note.id)
            result.append(note)
    return result


_FAILED = object()


class NotesController(BaseController):
    """
    View state for the note list and the note editor.

    Usage:
        notes = NotesController(api, cache, sync_enabled=True)
        await notes.load()
        notes.start_new().title = "Groceries"
        await notes.save()
        await notes.set_partition(Partition.TRASHED)
    """

    def __init__(
        self,
        api: ApiClient | None,
        cache: LocalNoteCache,
        *,
        sync_enabled: bool,
        language: Callable[[], str] | None = None,
    ) -> None:
        super().__init__(language)
        if sync_enabled and api is None:
            raise ValueError("Sync needs an API client")
        self.api = api
        self.cache = cache
        self.sync_enabled = sync_enabled
        self._flight = SingleFlight("notes")
        self._loads_in_progress = 0
        self.reset()

    def reset(self) -> None:
        """Return to logged-out defaults; pending edits are discarded."""
        self.notes: list[Note] = []
        self.partition = Partition.ACTIVE
        self.sort_order = SortOrder.RECENCY
        self.search_query = ""
        self.draft: NoteDraft | None = None
        self.error: NoteError | None = None
        self.is_online = self.sync_enabled

    @property
    def is_syncing(self) -> bool:
        return self._loads_in_progress > 0

    @property
    def visible_notes(self) -> list[Note]:
        """Loaded partition, filtered by the search query, in display order."""
        if self.search_query:
            matching = [note for note in self.notes if note.matches(self.search_query)]
        else:
            matching = list(self.notes)
        return sort_notes(matching, self.sort_order)

    def set_search(self, query: str) -> None:
        self.search_query = query

    def set_sort(self, order: SortOrder) -> None:
        self.sort_order = order

    def clear_error(self) -> None:
        self.error = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        """Initial load at startup."""
        await self.sync()

    async def sync(self) -> bool:
        """
        Reload the current partition from its backing store.

        Single-flight: while a load of this partition is outstanding another
        trigger does nothing.

        Returns:
            False if the trigger was dropped
        """
        key = f"load:{self.partition.value}"
        if self._flight.in_flight(key):
            self._log_debug("Sync already running", partition=self.partition.value)
            return False
        partition = self.partition
        await self._flight.do(key, lambda: self._load_partition(partition))
        return True

    async def set_partition(self, partition: Partition) -> None:
        """
        Switch the view to another partition.

        Always a full reload of that partition; the previous partition's
        members are dropped, never re-filtered.
        """
        self.partition = partition
        self.notes = []
        await self._flight.do(
            f"load:{partition.value}", lambda: self._load_partition(partition),
        )

    async def _load_partition(self, partition: Partition) -> None:
        if not self.sync_enabled:
            notes = self.cache.load_partition(partition)
            if self.partition is partition:
                self.notes = notes
            return

        self._loads_in_progress += 1
        try:
            notes = _unique(await self.api.list_notes(partition))
        except SessionExpiredError:
            return
        except ApplicationError as e:
            self._log_failure("Sync", e, partition=partition.value)
            self.error = self._failure(ErrorKind.SYNC, e)
            self.is_online = False
            if self.partition is partition:
                self.notes = self.cache.load_partition(partition)
            return
        finally:
            self._loads_in_progress -= 1

        self.is_online = True
        if self.partition is not partition:
            return
        self.notes = notes
        if self.error is not None and self.error.kind is ErrorKind.SYNC:
            self.error = None
        self._log_operation("Partition loaded", partition=partition.value, count=len(notes))
        try:
            self.cache.replace_partition(partition, notes)
        except StorageError as e:
            self._log_failure("Cache snapshot", e)

    # -------------------------------------------------------------------------
    # Editor
    # -------------------------------------------------------------------------

    def start_new(self, color: str = DEFAULT_COLOR) -> NoteDraft:
        self.draft = NoteDraft(color=color)
        return self.draft

    def start_edit(self, note_id: str) -> NoteDraft:
        self.draft = NoteDraft.from_note(self._require(note_id))
        return self.draft

    def cancel_edit(self) -> None:
        self.draft = None

    async def save(self) -> Note | None:
        """
        Save the draft as a new note or as an edit of an existing one.

        An empty draft is discarded. A blank title becomes the localized
        "untitled" placeholder.

        Returns:
            The note as it stands in the collection, or None if nothing was saved
        """
        draft = self.draft
        if draft is None:
            raise ValidationError("No note is being edited")
        self.draft = None
        if draft.is_empty():
            return None

        payload = draft.to_payload(self._t("untitled"))
        if draft.note_id is None:
            return await self._create(draft, payload)
        return await self._update(draft, payload)

    async def _create(self, draft: NoteDraft, payload: dict[str, Any]) -> Note | None:
        note = Note(
            id=new_local_id(),
            title=payload["title"],
            content=draft.content,
            color=draft.color,
            images=draft.images,
            is_pinned=draft.is_pinned,
            modified_at=utc_now(),
        )
        self._insert(note)
        self._log_operation("Creating note", note_id=note.id)

        if not self.sync_enabled:
            self._write_local(ErrorKind.SAVE, lambda: self.cache.upsert(note))
            return note

        created = await self._confirm(ErrorKind.SAVE, lambda: self.api.create_note(payload))
        if created is _FAILED:
            return self._find(note.id)
        reconciled = note.model_copy(update={
            "id": created.id,
            "modified_at": created.modified_at,
            "images": created.images,
        })
        self._replace(note.id, reconciled)
        return reconciled

    async def _update(self, draft: NoteDraft, payload: dict[str, Any]) -> Note | None:
        current = self._require(draft.note_id)
        updated = current.model_copy(update={
            "title": payload["title"],
            "content": draft.content,
            "color": draft.color,
            "images": draft.images,
            "is_pinned": draft.is_pinned,
            "modified_at": utc_now(),
        })
        self._replace(current.id, updated)
        self._log_operation("Updating note", note_id=current.id)

        if not self.sync_enabled:
            self._write_local(ErrorKind.SAVE, lambda: self.cache.upsert(updated))
            return updated

        server = await self._confirm(
            ErrorKind.SAVE, lambda: self.api.update_note(current.id, payload),
        )
        if server is _FAILED:
            return self._find(current.id)
        return self._reconcile(current.id, server)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def toggle_pin(self, note_id: str) -> Note:
        note = self._require(note_id)
        updated = note.model_copy(update={"is_pinned": not note.is_pinned})
        self._replace(note_id, updated)

        if not self.sync_enabled:
            self._write_local(ErrorKind.SAVE, lambda: self.cache.upsert(updated))
            return updated

        server = await self._confirm(
            ErrorKind.SAVE,
            lambda: self.api.update_note(note_id, {"isPinned": updated.is_pinned}),
        )
        if server is _FAILED:
            return updated
        return self._reconcile(note_id, server) or updated

    async def toggle_archive(self, note_id: str) -> Note:
        """Move an active note to the archive or an archived note back."""
        note = self._require(note_id)
        if note.is_deleted:
            raise ValidationError("A note in the trash cannot be archived")
        updated = note.model_copy(update={
            "is_archived": not note.is_archived,
            "is_deleted": False,
        })
        self._remove(note_id)

        if not self.sync_enabled:
            self._write_local(ErrorKind.SAVE, lambda: self.cache.upsert(updated))
            return updated

        await self._confirm(
            ErrorKind.SAVE,
            lambda: self.api.update_note(note_id, {"isArchived": updated.is_archived}),
        )
        return updated

    async def delete(self, note_id: str) -> None:
        """Move a note to the trash. A note already in the trash is deleted for good."""
        note = self._require(note_id)
        if note.is_deleted:
            await self.delete_permanently(note_id)
            return

        self._remove(note_id)
        self._log_operation("Deleting note", note_id=note_id)

        if not self.sync_enabled:
            trashed = note.model_copy(update={"is_deleted": True, "is_archived": False})
            self._write_local(ErrorKind.DELETE, lambda: self.cache.upsert(trashed))
            return

        await self._confirm(ErrorKind.DELETE, lambda: self.api.delete_note(note_id))

    async def delete_permanently(self, note_id: str) -> None:
        self._require(note_id)
        self._remove(note_id)
        self._log_operation("Deleting note permanently", note_id=note_id)

        if not self.sync_enabled:
            self._write_local(ErrorKind.DELETE, lambda: self.cache.remove(note_id))
            return

        await self._confirm(
            ErrorKind.DELETE, lambda: self.api.delete_note(note_id, permanent=True),
        )

    async def restore(self, note_id: str) -> Note:
        """Bring a note back from the trash to the active partition."""
        note = self._require(note_id)
        if not note.is_deleted:
            raise ValidationError("Only notes in the trash can be restored")
        restored = note.model_copy(update={"is_deleted": False, "is_archived": False})
        self._remove(note_id)

        if not self.sync_enabled:
            self._write_local(ErrorKind.RESTORE, lambda: self.cache.upsert(restored))
            return restored

        await self._confirm(ErrorKind.RESTORE, lambda: self.api.restore_note(note_id))
        return restored

    async def empty_trash(self) -> int:
        """
        Permanently delete everything in the trash.

        Returns:
            Number of notes removed from the loaded collection
        """
        removed = 0
        if self.partition is Partition.TRASHED:
            removed = len(self.notes)
            self.notes = []
        self._log_operation("Emptying trash", count=removed)

        if not self.sync_enabled:
            self._write_local(ErrorKind.DELETE, lambda: self.cache.remove_partition(Partition.TRASHED))
            return removed

        await self._confirm(ErrorKind.DELETE, self.api.empty_trash)
        return removed

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _confirm(self, kind: ErrorKind, call: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run the remote half of an intent.

        Returns:
            The call's result, or _FAILED after recording a user-visible error
        """
        try:
            result = await call()
        except SessionExpiredError:
            return _FAILED
        except ApplicationError as e:
            self._log_failure(kind.value, e)
            self.error = self._failure(kind, e)
            if isinstance(e, NetworkError):
                self.is_online = False
            return _FAILED
        self.is_online = True
        return result

    def _write_local(self, kind: ErrorKind, write: Callable[[], Any]) -> None:
        """Persist an offline-mode change; a failed write becomes a user-visible error."""
        try:
            write()
        except StorageError as e:
            self._log_failure(kind.value, e)
            self.error = self._failure(kind, e)

    def _failure(self, kind: ErrorKind, error: ApplicationError) -> NoteError:
        return NoteError(
            kind=kind,
            message=self._t(_ERROR_LABELS[kind]),
            detail=self._server_detail(error),
        )

    def _find(self, note_id: str) -> Note | None:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def _require(self, note_id: str | None) -> Note:
        note = self._find(note_id) if note_id is not None else None
        if note is None:
            raise NotFoundError(f"Note {note_id} not found")
        return note

    def _insert(self, note: Note) -> None:
        if note.partition is self.partition and self._find(note.id) is None:
            self.notes.insert(0, note)

    def _replace(self, note_id: str, note: Note) -> None:
        for index, existing in enumerate(self.notes):
            if existing.id == note_id:
                if note.partition is self.partition:
                    self.notes[index] = note
                else:
                    del self.notes[index]
                return

    def _remove(self, note_id: str) -> None:
        self.notes = [note for note in self.notes if note.id != note_id]

    def _reconcile(self, note_id: str, server: Note) -> Note | None:
        """Merge server-assigned fields into the note still in the collection."""
        current = self._find(note_id)
        if current is None:
            return None
        reconciled = current.model_copy(update={
            "modified_at": server.modified_at,
            "images": server.images,
        })
        self._replace(note_id, reconciled)
        return reconciled
