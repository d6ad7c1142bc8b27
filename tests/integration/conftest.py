"""
Integration Test Fixtures.

Integration tests drive the full controller stack: application
controller, session manager, domain client and HTTP transport, against
the in-process fake service from the root conftest. Nothing is mocked
below the transport.
"""

from collections.abc import Callable

import pytest

from notu.core.config import ClientConfig
from notu.services.app import AppController


@pytest.fixture
def restart(
    make_app: Callable[[ClientConfig], AppController],
) -> Callable[[AppController], AppController]:
    """
    Simulate a client restart: a new controller over the same storage.

    Usage:
        async def test_flow(signed_in_app, restart):
            await signed_in_app.close()
            app = restart(signed_in_app)
    """
    def _restart(app: AppController) -> AppController:
        return make_app(app.config)

    return _restart
