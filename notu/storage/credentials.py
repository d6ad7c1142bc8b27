"""
Credential Store.

Holds the access/refresh credential pair and the cached user identity.
Pure storage: no network, no refresh logic.
"""

from pydantic import ValidationError

from notu.core.logging import get_logger, log_with_source
from notu.schemas.user import Credentials, UserIdentity
from notu.storage.store import KeyValueStore

logger = get_logger(__name__)

CREDENTIALS_KEY = "credentials"
USER_KEY = "user"


class CredentialStore:
    """
    Credential pair and identity over the key-value store.

    The pair is one document, so a reader sees both tokens or neither.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get_credentials(self) -> Credentials | None:
        raw = self._store.get(CREDENTIALS_KEY)
        if raw is None:
            return None
        try:
            return Credentials.model_validate(raw)
        except ValidationError:
            log_with_source(logger, "storage", "warning", "Discarding malformed credentials")
            return None

    def set_credentials(self, credentials: Credentials) -> None:
        self._store.set(CREDENTIALS_KEY, credentials.to_wire())

    def get_user(self) -> UserIdentity | None:
        raw = self._store.get(USER_KEY)
        if raw is None:
            return None
        try:
            return UserIdentity.model_validate(raw)
        except ValidationError:
            log_with_source(logger, "storage", "warning", "Discarding malformed cached user")
            return None

    def set_user(self, user: UserIdentity) -> None:
        self._store.set(USER_KEY, user.to_wire())

    def clear(self) -> None:
        """Forget credentials and identity (logged-out state)."""
        self._store.remove(CREDENTIALS_KEY)
        self._store.remove(USER_KEY)
