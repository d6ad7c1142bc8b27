"""
Unit Test Fixtures.

Fixtures for unit tests. The remote service is the in-process fake from
the root conftest or a mocked ApiClient; storage lives under tmp_path.
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest

from notu.client.api import ApiClient
from notu.client.session import SessionManager
from notu.client.transport import HttpTransport
from notu.events.bus import EventBus
from notu.schemas.user import AuthResult
from notu.storage.cache import LocalNoteCache
from notu.storage.credentials import CredentialStore
from notu.storage.store import KeyValueStore


# =============================================================================
# Client Stack Fixtures
# =============================================================================


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def credential_store(store: KeyValueStore) -> CredentialStore:
    return CredentialStore(store)


@pytest.fixture
def cache(store: KeyValueStore) -> LocalNoteCache:
    return LocalNoteCache(store)


@pytest.fixture
async def transport(fake_service) -> AsyncGenerator[HttpTransport, None]:
    """Transport wired to the fake service."""
    transport = HttpTransport("http://notes.test/api", 5.0, transport=fake_service.transport)
    yield transport
    await transport.close()


@pytest.fixture
def session(transport: HttpTransport, credential_store: CredentialStore, bus: EventBus) -> SessionManager:
    return SessionManager(transport, credential_store, bus)


@pytest.fixture
def signed_in(session: SessionManager, fake_service) -> SessionManager:
    """Session holding the fake service's current credential pair."""
    session.start_session(AuthResult.model_validate(fake_service.auth_payload()))
    return session


@pytest.fixture
def api(session: SessionManager) -> ApiClient:
    return ApiClient(session)


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_api() -> AsyncMock:
    """
    Mocked domain client for controller tests.

    Usage:
        def test_sync(mock_api):
            mock_api.list_notes.return_value = [note]
    """
    api = AsyncMock(spec=ApiClient)
    api.list_notes.return_value = []
    return api
