"""
User and Auth Schemas.

Identity, credential pair, and the small response shapes of the auth,
friends and like endpoints.
"""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from notu.schemas.base import WireModel


class Credentials(WireModel):
    """Access/refresh credential pair. Stored and cleared as one record."""

    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)

    def __repr__(self) -> str:
        return "Credentials(access_token=***, refresh_token=***)"

    __str__ = __repr__


class UserIdentity(WireModel):
    """The signed-in user, as returned by /auth/me."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    email: str = ""
    bio: str | None = None
    is_private: bool = False
    auth_provider: str = "local"

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> str:
        return str(value)


class UserSummary(WireModel):
    """Another user: search hit, friend, pending request or public profile."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    email: str | None = None
    bio: str | None = None
    avatar: str | None = None
    is_private: bool = False
    is_friend: bool = False
    is_pending: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> str:
        return str(value)


class AuthResult(WireModel):
    """Response of /auth/login and /auth/register."""

    user: UserIdentity
    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)

    @property
    def credentials(self) -> Credentials:
        return Credentials(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
        )


class LikeResult(WireModel):
    """Response of POST /notes/:id/like."""

    liked: bool
    likes_count: int = 0
