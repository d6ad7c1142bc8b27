"""
Local Note Cache.

Durable mirror of the note collection. It is the only store when sync is
disabled and a best-effort snapshot when the first remote sync fails.
It is not a queue: nothing here remembers which changes reached a server.

All partitions are stored together under one key; the partition helpers
read-modify-write the whole document.
"""

from pydantic import ValidationError

from notu.core.logging import get_logger, log_with_source
from notu.schemas.note import Note, Partition
from notu.storage.store import KeyValueStore

logger = get_logger(__name__)

NOTES_KEY = "notes"


class LocalNoteCache:
    """Note collection persisted under the `notes` key."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load(self) -> list[Note]:
        """
        Load every cached note.

        A missing or corrupt document yields an empty list. Individual
        records that no longer validate are skipped.
        """
        raw = self._store.get(NOTES_KEY)
        if not isinstance(raw, list):
            if raw is not None:
                log_with_source(logger, "storage", "warning", "Ignoring corrupt note cache")
            return []

        notes: list[Note] = []
        seen: set[str] = set()
        for item in raw:
            try:
                note = Note.model_validate(item)
            except ValidationError:
                log_with_source(logger, "storage", "warning", "Skipping malformed cached note")
                continue
            if note.id in seen:
                continue
            seen.add(note.id)
            notes.append(note)
        return notes

    def save(self, notes: list[Note]) -> None:
        self._store.set(NOTES_KEY, [note.to_wire() for note in notes])

    def load_partition(self, partition: Partition) -> list[Note]:
        return [note for note in self.load() if note.partition == partition]

    def replace_partition(self, partition: Partition, notes: list[Note]) -> None:
        """Swap the cached members of one partition for `notes`."""
        incoming = {note.id for note in notes}
        kept = [
            note for note in self.load()
            if note.partition != partition and note.id not in incoming
        ]
        self.save(list(notes) + kept)

    def upsert(self, note: Note) -> None:
        """Insert `note` at the front or replace the cached note with its id."""
        notes = self.load()
        for index, existing in enumerate(notes):
            if existing.id == note.id:
                notes[index] = note
                break
        else:
            notes.insert(0, note)
        self.save(notes)

    def remove(self, note_id: str) -> None:
        self.save([note for note in self.load() if note.id != note_id])

    def remove_partition(self, partition: Partition) -> int:
        """Drop every note in `partition`. Returns how many were removed."""
        notes = self.load()
        kept = [note for note in notes if note.partition != partition]
        self.save(kept)
        return len(notes) - len(kept)

    def clear(self) -> None:
        self._store.remove(NOTES_KEY)
