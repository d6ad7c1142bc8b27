"""
Friends Controller.

Friend list, incoming requests, user search, and a friend's public
profile with its published notes.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from notu.client.api import ApiClient
from notu.core.exceptions import ApplicationError, SessionExpiredError
from notu.schemas.note import Note
from notu.schemas.user import UserSummary
from notu.services.base import BaseController

MIN_QUERY_LENGTH = 2


@dataclass
class FriendProfile:
    user: UserSummary
    notes: list[Note] = field(default_factory=list)


class FriendsController(BaseController):
    """View state for the friends screens."""

    def __init__(self, api: ApiClient, language: Callable[[], str] | None = None) -> None:
        super().__init__(language)
        self.api = api
        self.reset()

    def reset(self) -> None:
        self.friends: list[UserSummary] = []
        self.requests: list[UserSummary] = []
        self.search_query = ""
        self.search_results: list[UserSummary] = []
        self.profile: FriendProfile | None = None
        self.error: str | None = None

    async def load(self) -> None:
        """Load friends and pending requests."""
        await self._load_friends()
        try:
            self.requests = await self.api.list_friend_requests()
        except SessionExpiredError:
            return
        except ApplicationError as e:
            self._log_failure("Loading friend requests", e)

    async def _load_friends(self) -> None:
        try:
            self.friends = await self.api.list_friends()
        except SessionExpiredError:
            return
        except ApplicationError as e:
            self._log_failure("Loading friends", e)
            self.error = self._server_detail(e) or self._t("friendsFailed")

    async def search(self, query: str) -> list[UserSummary]:
        """Search users. Queries shorter than two characters clear the results."""
        self.search_query = query
        if len(query.strip()) < MIN_QUERY_LENGTH:
            self.search_results = []
            return self.search_results

        try:
            results = await self.api.search_users(query)
        except SessionExpiredError:
            return []
        except ApplicationError as e:
            self._log_failure("Searching users", e, query=query)
            self.error = self._error_text(e)
            return self.search_results

        # a newer query may have been issued while this one was in flight
        if self.search_query == query:
            self.search_results = results
            self.error = None
        return results

    async def send_request(self, user_id: str) -> bool:
        if not await self._attempt("Sending friend request", self.api.send_friend_request(user_id)):
            return False
        self.search_results = [
            user.model_copy(update={"is_pending": True}) if user.id == user_id else user
            for user in self.search_results
        ]
        return True

    async def accept(self, user_id: str) -> bool:
        if not await self._attempt("Accepting friend request", self.api.accept_friend_request(user_id)):
            return False
        self.requests = [user for user in self.requests if user.id != user_id]
        await self._load_friends()
        return True

    async def decline(self, user_id: str) -> bool:
        if not await self._attempt("Declining friend request", self.api.decline_friend_request(user_id)):
            return False
        self.requests = [user for user in self.requests if user.id != user_id]
        return True

    async def remove(self, user_id: str) -> bool:
        if not await self._attempt("Removing friend", self.api.remove_friend(user_id)):
            return False
        self.friends = [user for user in self.friends if user.id != user_id]
        return True

    async def view_profile(self, user_id: str) -> FriendProfile | None:
        """Load a user's public profile and published notes together."""
        try:
            user, notes = await asyncio.gather(
                self.api.get_user_profile(user_id),
                self.api.list_user_notes(user_id),
            )
        except SessionExpiredError:
            return None
        except ApplicationError as e:
            self._log_failure("Loading profile", e, user_id=user_id)
            self.error = self._error_text(e)
            return None
        self.profile = FriendProfile(user=user, notes=notes)
        return self.profile

    async def like(self, note_id: str) -> bool:
        try:
            result = await self.api.like_note(note_id)
        except SessionExpiredError:
            return False
        except ApplicationError as e:
            self._log_failure("Liking note", e, note_id=note_id)
            self.error = self._error_text(e)
            return False
        self.error = None
        if self.profile is not None:
            self.profile.notes = [
                note.model_copy(update={"is_liked": result.liked, "likes_count": result.likes_count})
                if note.id == note_id else note
                for note in self.profile.notes
            ]
        return result.liked

    async def duplicate(self, note_id: str) -> Note | None:
        """Copy a friend's published note into the signed-in user's notes."""
        try:
            return await self.api.duplicate_note(note_id)
        except SessionExpiredError:
            return None
        except ApplicationError as e:
            self._log_failure("Duplicating note", e, note_id=note_id)
            self.error = self._error_text(e)
            return None

    async def _attempt(self, operation: str, call) -> bool:
        try:
            await call
        except SessionExpiredError:
            return False
        except ApplicationError as e:
            self._log_failure(operation, e)
            self.error = self._error_text(e)
            return False
        self.error = None
        return True
