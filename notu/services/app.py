"""
Application Controller.

Composition root of the client. Builds every layer from configuration,
holds the signed-in identity, and is the single subscriber to the
SessionEnded event: when the session layer announces the end of the
session, this controller drops identity and note state back to the
logged-out defaults.

Usage:
    app = AppController.from_config()
    await app.start()
    await app.login("me@example.com", "secret")
    app.notes.visible_notes
    await app.close()
"""

import httpx

from notu.client.api import ApiClient
from notu.client.session import SessionManager
from notu.client.transport import HttpTransport
from notu.core.config import ClientConfig, get_client_config
from notu.core.exceptions import ApplicationError, SessionExpiredError, ValidationError
from notu.core.i18n import get_translation
from notu.core.logging import get_logger, log_with_source
from notu.events.bus import EventBus
from notu.events.schemas import SESSION_ENDED, EventEnvelope
from notu.schemas.user import AuthResult, UserIdentity
from notu.services.friends import FriendsController
from notu.services.notes import NotesController
from notu.storage.cache import LocalNoteCache
from notu.storage.credentials import CredentialStore
from notu.storage.preferences import Preferences
from notu.storage.store import KeyValueStore

logger = get_logger(__name__)


class AppController:
    """Top-level state: identity, preferences, and the view controllers."""

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Effective client configuration
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.config = config
        self.bus = EventBus()

        self.store = KeyValueStore(config.storage_dir)
        self.credentials = CredentialStore(self.store)
        self.preferences = Preferences(self.store, config.default_language)
        self.cache = LocalNoteCache(self.store)

        self.transport = HttpTransport(config.base_url, config.timeout, transport=transport)
        self.session = SessionManager(self.transport, self.credentials, self.bus)
        self.api = ApiClient(self.session)

        self.notes = NotesController(
            self.api,
            self.cache,
            sync_enabled=config.sync_enabled,
            language=lambda: self.preferences.language,
        )
        self.friends = FriendsController(self.api, language=lambda: self.preferences.language)

        self.user: UserIdentity | None = self.credentials.get_user() if config.sync_enabled else None
        self.notice: str | None = None
        self._unsubscribe = self.bus.subscribe(SESSION_ENDED, self._on_session_ended)

    @classmethod
    def from_config(cls) -> "AppController":
        return cls(get_client_config())

    @property
    def sync_enabled(self) -> bool:
        return self.config.sync_enabled

    @property
    def is_authenticated(self) -> bool:
        return self.sync_enabled and self.session.is_authenticated

    async def start(self) -> None:
        """
        Bring the client up.

        Offline: load notes from the local cache. Online with stored
        credentials: refresh the cached identity, then sync. Online without
        credentials: stay logged out.
        """
        if not self.sync_enabled:
            await self.notes.load()
            return
        if not self.session.is_authenticated:
            return

        try:
            user = await self.api.get_current_user()
        except SessionExpiredError:
            return
        except ApplicationError as e:
            log_with_source(
                logger, "session", "warning", "Could not refresh identity",
                error_code=e.code,
            )
        else:
            self.user = user
            self.credentials.set_user(user)

        await self.notes.sync()

    async def login(self, email: str, password: str) -> UserIdentity:
        """
        Sign in and sync.

        Raises:
            HttpError: Rejected credentials (server message preserved)
            NetworkError: Server unreachable
        """
        self._require_sync()
        return await self._begin(await self.api.login(email, password))

    async def register(self, name: str, email: str, password: str) -> UserIdentity:
        self._require_sync()
        return await self._begin(await self.api.register(name, email, password))

    async def _begin(self, auth: AuthResult) -> UserIdentity:
        self.user = self.session.start_session(auth)
        self.notice = None
        self.notes.reset()
        self.friends.reset()
        await self.notes.sync()
        return self.user

    async def logout(self) -> None:
        """
        Sign out.

        Credentials, cached identity, cached notes and preferences are
        cleared even when the server cannot be told.
        """
        try:
            await self.api.logout()
        except ApplicationError as e:
            log_with_source(
                logger, "session", "warning", "Remote logout failed",
                error_code=e.code,
            )
        finally:
            self.session.clear_session()
            self._reset_state()

    async def update_profile(
        self,
        name: str | None = None,
        bio: str | None = None,
        is_private: bool | None = None,
    ) -> UserIdentity:
        user = await self.api.update_profile(name=name, bio=bio, is_private=is_private)
        self.user = user
        self.credentials.set_user(user)
        return user

    async def refresh(self) -> bool:
        """User-initiated sync of the current partition."""
        return await self.notes.sync()

    async def close(self) -> None:
        self._unsubscribe()
        await self.transport.close()

    def _require_sync(self) -> None:
        if not self.sync_enabled:
            raise ValidationError("Sync is disabled; set NOTU_API_URL to sign in")

    def _reset_state(self) -> None:
        self.user = None
        self.preferences.reset()
        self.notes.reset()
        self.friends.reset()
        self.cache.clear()

    def _on_session_ended(self, event: EventEnvelope) -> None:
        log_with_source(
            logger, "session", "info", "Resetting to logged-out state",
            reason=event.payload.get("reason"),
        )
        language = self.preferences.language
        self._reset_state()
        self.notice = get_translation(language, "sessionExpired")
