"""
Schemas Package.

Pydantic models for remote payloads, the local cache and edit drafts.
"""

from notu.schemas.note import (
    COLOR_PALETTE,
    DEFAULT_COLOR,
    Note,
    NoteDraft,
    NoteImage,
    Partition,
    SortOrder,
)
from notu.schemas.user import AuthResult, Credentials, LikeResult, UserIdentity, UserSummary

__all__ = [
    "COLOR_PALETTE",
    "DEFAULT_COLOR",
    "AuthResult",
    "Credentials",
    "LikeResult",
    "Note",
    "NoteDraft",
    "NoteImage",
    "Partition",
    "SortOrder",
    "UserIdentity",
    "UserSummary",
]
