"""Unit tests for the account and friends commands against the fake service."""

import pytest
from typer.testing import CliRunner

from notu.cli.app import app
from notu.storage.credentials import CredentialStore
from notu.storage.store import KeyValueStore

runner = CliRunner()

pytestmark = pytest.mark.usefixtures("sync_cli")


def _login() -> None:
    result = runner.invoke(app, ["login", "--email", "ana@example.com", "--password", "secret"])
    assert result.exit_code == 0, result.stdout


class TestAuthCommands:
    def test_login_stores_credentials(self, store: KeyValueStore) -> None:
        result = runner.invoke(app, ["login", "--email", "ana@example.com", "--password", "secret"])

        assert result.exit_code == 0
        assert "Signed in as Ana" in result.stdout
        assert CredentialStore(store).get_credentials() is not None

    def test_login_prompts(self) -> None:
        result = runner.invoke(app, ["login"], input="ana@example.com\nsecret\n")
        assert result.exit_code == 0
        assert "Signed in as Ana" in result.stdout

    def test_rejected_login_shows_server_message(self, store: KeyValueStore) -> None:
        result = runner.invoke(app, ["login", "-e", "ana@example.com", "-p", "wrong"])

        assert result.exit_code == 1
        assert "Invalid email or password" in result.stdout
        assert CredentialStore(store).get_credentials() is None

    def test_whoami(self) -> None:
        _login()
        result = runner.invoke(app, ["whoami"])
        assert result.exit_code == 0
        assert "ana@example.com" in result.stdout

    def test_whoami_logged_out(self) -> None:
        result = runner.invoke(app, ["whoami"])
        assert result.exit_code == 1
        assert "Not logged in" in result.stdout

    def test_logout(self, store: KeyValueStore, fake_service) -> None:
        _login()
        result = runner.invoke(app, ["logout"])
        assert result.exit_code == 0
        assert CredentialStore(store).get_credentials() is None
        assert len(fake_service.calls("POST", "/auth/logout")) == 1

    def test_expired_session_is_reported(self, store: KeyValueStore, fake_service) -> None:
        _login()
        fake_service.expire_access()
        fake_service.fail_refresh = True

        result = runner.invoke(app, ["list"])

        assert result.exit_code == 1
        assert "Session expired, please sign in again" in result.stdout
        assert CredentialStore(store).get_credentials() is None


class TestSyncedNotes:
    def test_list_shows_server_notes(self, fake_service) -> None:
        fake_service.add_note("From the server")
        _login()
        result = runner.invoke(app, ["list"])
        assert "From the server" in result.stdout

    def test_add_creates_on_server(self, fake_service) -> None:
        _login()
        result = runner.invoke(app, ["add", "--title", "Remote"])
        assert result.exit_code == 0
        assert [note["title"] for note in fake_service.notes.values()] == ["Remote"]

    def test_archive_on_server(self, fake_service) -> None:
        note = fake_service.add_note("Old")
        _login()
        result = runner.invoke(app, ["archive", note["_id"]])
        assert result.exit_code == 0
        assert fake_service.notes[note["_id"]]["isArchived"] is True

    def test_unreachable_server_falls_back_to_cache(self, fake_service) -> None:
        fake_service.add_note("Cached")
        _login()
        fake_service.offline = True

        result = runner.invoke(app, ["list"])

        assert "Cached" in result.stdout
        assert "offline" in result.stdout

    def test_sync(self, fake_service) -> None:
        _login()
        fake_service.add_note("Later")
        result = runner.invoke(app, ["sync"])
        assert result.exit_code == 0
        assert "1 active notes" in result.stdout


class TestFriendsCommands:
    def test_search(self) -> None:
        _login()
        result = runner.invoke(app, ["friends", "search", "bu"])
        assert result.exit_code == 0
        assert "Budi" in result.stdout
        assert "Citra" not in result.stdout

    def test_add(self, fake_service) -> None:
        _login()
        result = runner.invoke(app, ["friends", "add", "u2"])
        assert "Friend request sent" in result.stdout
        assert fake_service.outgoing == {"u2"}

    def test_accept(self, fake_service) -> None:
        fake_service.incoming.add("u3")
        _login()

        result = runner.invoke(app, ["friends", "accept", "u3"])

        assert result.exit_code == 0
        assert fake_service.friends == {"u3"}
        assert "Citra" in runner.invoke(app, ["friends", "list"]).stdout

    def test_unknown_user(self) -> None:
        _login()
        result = runner.invoke(app, ["friends", "add", "nobody"])
        assert result.exit_code == 1
        assert "User not found" in result.stdout

    def test_requires_login(self) -> None:
        result = runner.invoke(app, ["friends", "list"])
        assert result.exit_code == 1
        assert "Not logged in" in result.stdout
