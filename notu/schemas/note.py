"""
Note Schemas.

Explicit note record with every optional field defaulted once, here, when a
server or cache payload is parsed.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from notu.core.utils import new_local_id, to_naive_utc, utc_now
from notu.schemas.base import WireModel

COLOR_PALETTE: tuple[str, ...] = (
    "#FFFFFF",
    "#FAE8C8",
    "#E9D5FF",
    "#DBEAFE",
    "#FCE7F3",
    "#F3E8FF",
    "#E0E7FF",
)
DEFAULT_COLOR = "#E9D5FF"


def normalize_color(value: Any) -> str:
    """Map a color onto the palette; anything else becomes the default."""
    if isinstance(value, str) and value.upper() in COLOR_PALETTE:
        return value.upper()
    return DEFAULT_COLOR


class Partition(str, Enum):
    """Mutually exclusive note membership classes."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    TRASHED = "trashed"


class SortOrder(str, Enum):
    """Selectable primary orderings for the note list."""

    RECENCY = "recency"
    TITLE = "title"
    COLOR = "color"


class NoteImage(WireModel):
    """Attachment reference. The url is usually an encoded data URI."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    url: str

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> str:
        return str(value)


class Note(WireModel):
    """A note as held in the controller's collection and the local cache."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    title: str = ""
    content: str = ""
    color: str = DEFAULT_COLOR
    images: list[NoteImage] = Field(default_factory=list)
    modified_at: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices(
            "date", "updatedAt", "modifiedAt", "modified_at", "createdAt",
        ),
    )
    is_pinned: bool = False
    is_archived: bool = False
    is_deleted: bool = False
    is_public: bool = False
    likes_count: int = 0
    is_liked: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> str:
        return str(value)

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> str:
        return "" if value is None else value

    @field_validator("color", mode="before")
    @classmethod
    def _palette_color(cls, value: Any) -> str:
        return normalize_color(value)

    @field_validator("images", mode="before")
    @classmethod
    def _none_as_no_images(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("modified_at", mode="after")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @property
    def partition(self) -> Partition:
        if self.is_deleted:
            return Partition.TRASHED
        if self.is_archived:
            return Partition.ARCHIVED
        return Partition.ACTIVE

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match over title and content."""
        needle = query.casefold()
        return needle in self.title.casefold() or needle in self.content.casefold()


class NoteDraft(BaseModel):
    """
    The note currently being edited, before it is saved.

    `note_id` is None for a new note. Images are collected one at a time
    from user attachments.
    """

    note_id: str | None = None
    title: str = ""
    content: str = ""
    color: str = DEFAULT_COLOR
    images: list[NoteImage] = Field(default_factory=list)
    is_pinned: bool = False

    @field_validator("color", mode="before")
    @classmethod
    def _palette_color(cls, value: Any) -> str:
        return normalize_color(value)

    @classmethod
    def from_note(cls, note: Note) -> "NoteDraft":
        return cls(
            note_id=note.id,
            title=note.title,
            content=note.content,
            color=note.color,
            images=[image.model_copy() for image in note.images],
            is_pinned=note.is_pinned,
        )

    def add_image(self, url: str) -> NoteImage:
        image = NoteImage(id=new_local_id(), url=url)
        self.images.append(image)
        return image

    def remove_image(self, image_id: str) -> None:
        self.images = [image for image in self.images if image.id != image_id]

    def is_empty(self) -> bool:
        return not (self.title.strip() or self.content.strip() or self.images)

    def to_payload(self, untitled: str) -> dict[str, Any]:
        """
        Body for POST /notes and PUT /notes/:id.

        Args:
            untitled: Localized placeholder used when the title is blank
        """
        return {
            "title": self.title.strip() or untitled,
            "content": self.content,
            "color": self.color,
            "images": [image.to_wire() for image in self.images],
            "isPinned": self.is_pinned,
        }
