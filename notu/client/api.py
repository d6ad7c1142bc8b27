"""
Domain API Client.

Typed operations for auth, notes and friends. The only gateway the rest of
the application uses to reach the remote service.

Stateless: no retry, no caching. Calls go through the session manager and
payloads are parsed into schemas here, once. Errors from the session
manager pass through unchanged; a body that does not parse raises
ResponseFormatError, and list records that do not parse are skipped.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from notu.client.session import SessionManager
from notu.core.exceptions import ResponseFormatError
from notu.core.logging import get_logger, log_with_source
from notu.schemas.note import Note, Partition
from notu.schemas.user import AuthResult, LikeResult, UserIdentity, UserSummary

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def _partition_params(partition: Partition | None) -> dict[str, str]:
    """Query contract for GET /notes: nothing for active, one flag otherwise."""
    if partition is Partition.ARCHIVED:
        return {"archived": "true"}
    if partition is Partition.TRASHED:
        return {"deleted": "true"}
    return {}


def _unwrap_user(payload: Any) -> Any:
    """Some endpoints answer {user: {...}}, others the bare user."""
    if isinstance(payload, dict) and isinstance(payload.get("user"), dict):
        return payload["user"]
    return payload


def _as_list(payload: Any) -> list:
    return payload if isinstance(payload, list) else []


def _parse(model: type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        log_with_source(
            logger, "client", "warning", "Malformed response",
            model=model.__name__, errors=e.error_count(),
        )
        raise ResponseFormatError(f"Unexpected {model.__name__} in server response") from e


def _parse_list(model: type[M], payload: Any) -> list[M]:
    """Parse a list response; records that do not validate are skipped."""
    parsed: list[M] = []
    for item in _as_list(payload):
        try:
            parsed.append(model.model_validate(item))
        except ValidationError:
            log_with_source(
                logger, "client", "warning", "Skipping malformed record",
                model=model.__name__,
            )
    return parsed


class ApiClient:
    """
    Façade over SessionManager.

    Usage:
        api = ApiClient(session)
        result = await api.login("a@b.c", "secret")
        notes = await api.list_notes(Partition.ARCHIVED)
    """

    def __init__(self, session: SessionManager) -> None:
        self.session = session

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        payload = await self.session.post(
            "/auth/register",
            json={"name": name, "email": email, "password": password},
            authenticated=False,
        )
        return _parse(AuthResult, payload)

    async def login(self, email: str, password: str) -> AuthResult:
        payload = await self.session.post(
            "/auth/login",
            json={"email": email, "password": password},
            authenticated=False,
        )
        return _parse(AuthResult, payload)

    async def logout(self) -> None:
        await self.session.post("/auth/logout")

    async def get_current_user(self) -> UserIdentity:
        payload = await self.session.get("/auth/me")
        return _parse(UserIdentity, _unwrap_user(payload))

    async def update_profile(
        self,
        name: str | None = None,
        bio: str | None = None,
        is_private: bool | None = None,
    ) -> UserIdentity:
        """PUT /auth/profile with only the fields that were given."""
        body: dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if bio is not None:
            body["bio"] = bio
        if is_private is not None:
            body["isPrivate"] = is_private
        payload = await self.session.put("/auth/profile", json=body)
        return _parse(UserIdentity, _unwrap_user(payload))

    async def get_user_profile(self, user_id: str) -> UserSummary:
        payload = await self.session.get(f"/auth/users/{user_id}")
        return _parse(UserSummary, _unwrap_user(payload))

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    async def list_notes(self, partition: Partition | None = None) -> list[Note]:
        """
        List one partition.

        Args:
            partition: ARCHIVED → ?archived=true, TRASHED → ?deleted=true,
                ACTIVE or None → no query
        """
        payload = await self.session.get("/notes", params=_partition_params(partition))
        return _parse_list(Note, payload)

    async def get_note(self, note_id: str) -> Note:
        return _parse(Note, await self.session.get(f"/notes/{note_id}"))

    async def create_note(self, data: dict[str, Any]) -> Note:
        return _parse(Note, await self.session.post("/notes", json=data))

    async def update_note(self, note_id: str, changes: dict[str, Any]) -> Note:
        return _parse(Note, await self.session.put(f"/notes/{note_id}", json=changes))

    async def delete_note(self, note_id: str, permanent: bool = False) -> None:
        """Soft delete by default; `permanent=True` removes it for good."""
        params = {"permanent": "true"} if permanent else None
        await self.session.delete(f"/notes/{note_id}", params=params)

    async def restore_note(self, note_id: str) -> None:
        await self.session.post(f"/notes/{note_id}/restore")

    async def empty_trash(self) -> None:
        await self.session.delete("/notes/trash/empty")

    async def like_note(self, note_id: str) -> LikeResult:
        return _parse(LikeResult, await self.session.post(f"/notes/{note_id}/like"))

    async def duplicate_note(self, note_id: str) -> Note:
        return _parse(Note, await self.session.post(f"/notes/{note_id}/duplicate"))

    async def set_visibility(self, note_id: str, is_public: bool) -> Note:
        """Publish a note on the owner's profile, or withdraw it."""
        return _parse(
            Note, await self.session.put(f"/notes/{note_id}/visibility", json={"isPublic": is_public}),
        )

    async def list_user_notes(self, user_id: str) -> list[Note]:
        """Published notes of another user."""
        payload = await self.session.get(
            f"/notes/user/{user_id}", params={"published": "true"},
        )
        return _parse_list(Note, payload)

    # -------------------------------------------------------------------------
    # Friends
    # -------------------------------------------------------------------------

    async def search_users(self, query: str) -> list[UserSummary]:
        payload = await self.session.get("/auth/users/search", params={"q": query})
        return _parse_list(UserSummary, payload)

    async def list_friends(self) -> list[UserSummary]:
        payload = await self.session.get("/auth/friends")
        return _parse_list(UserSummary, payload)

    async def list_friend_requests(self) -> list[UserSummary]:
        payload = await self.session.get("/auth/friends/requests")
        return _parse_list(UserSummary, payload)

    async def send_friend_request(self, user_id: str) -> None:
        await self.session.post(f"/auth/friends/request/{user_id}")

    async def accept_friend_request(self, user_id: str) -> None:
        await self.session.post(f"/auth/friends/accept/{user_id}")

    async def decline_friend_request(self, user_id: str) -> None:
        await self.session.post(f"/auth/friends/decline/{user_id}")

    async def remove_friend(self, user_id: str) -> None:
        await self.session.delete(f"/auth/friends/{user_id}")
