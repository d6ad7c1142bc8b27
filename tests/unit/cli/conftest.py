"""
CLI Test Fixtures.

Commands build their controller through notu.cli.client; these fixtures
point it at the test storage directory and, in sync mode, at the fake
service.
"""

import pytest

from notu.core.config import ClientConfig
from notu.services.app import AppController


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the CLI callback from reconfiguring the root logger."""
    monkeypatch.setattr("notu.cli.app.setup_logging", lambda **kwargs: None)
    # wide enough that Rich tables never wrap a title
    monkeypatch.setenv("COLUMNS", "200")


@pytest.fixture
def offline_cli(monkeypatch: pytest.MonkeyPatch, offline_config: ClientConfig) -> ClientConfig:
    monkeypatch.setattr("notu.cli.client.get_client_config", lambda: offline_config)
    return offline_config


@pytest.fixture
def sync_cli(monkeypatch: pytest.MonkeyPatch, sync_config: ClientConfig, fake_service) -> ClientConfig:
    monkeypatch.setattr("notu.cli.client.get_client_config", lambda: sync_config)
    monkeypatch.setattr(
        "notu.cli.client.AppController",
        lambda config: AppController(config, transport=fake_service.transport),
    )
    return sync_config
