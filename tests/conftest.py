"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Remote Service:
    Tests never reach a real server. `fake_service` is an in-process
    stand-in for the notes service, served to the client through
    httpx.MockTransport. It keeps notes, users and friendships in memory,
    issues and rotates tokens, and records every request it receives.

Local Storage:
    Every test gets its own storage directory under tmp_path.
"""

import json
import re
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest

from notu.core.config import ClientConfig
from notu.services.app import AppController
from notu.storage.store import KeyValueStore

BASE_URL = "http://notes.test/api"


# =============================================================================
# Fake Remote Service
# =============================================================================


class FakeNotesService:
    """
    In-memory notes service speaking the remote contract.

    Knobs:
        expire_access()     - the client's access token is now stale
        fail_refresh        - POST /auth/refresh answers 401
        reject_renewed      - renewed tokens are rejected too (retry gets 401)
        offline             - every call raises httpx.ConnectError
        failures            - {(METHOD, path): (status, body)} forced answers
    """

    def __init__(self) -> None:
        self.user = {
            "_id": "u1",
            "name": "Ana",
            "email": "ana@example.com",
            "bio": "",
            "isPrivate": False,
            "authProvider": "local",
        }
        self.others: dict[str, dict[str, Any]] = {
            "u2": {"_id": "u2", "name": "Budi", "email": "budi@example.com"},
            "u3": {"_id": "u3", "name": "Citra", "email": "citra@example.com"},
        }
        self.friends: set[str] = set()
        self.incoming: set[str] = set()
        self.outgoing: set[str] = set()
        self.public_notes: dict[str, list[dict[str, Any]]] = {}
        self.likes: dict[str, set[str]] = {}

        self.notes: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], tuple[int, dict[str, Any]]] = {}

        self.offline = False
        self.fail_refresh = False
        self.reject_renewed = False
        self.refresh_calls = 0

        self._token_serial = 1
        self.access_token = "access-1"
        self.refresh_token = "refresh-1"
        self._note_serial = 0
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    # -- setup helpers --------------------------------------------------------

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(lambda request: self.handle(request))

    def auth_payload(self) -> dict[str, Any]:
        return {
            "user": dict(self.user),
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
        }

    def expire_access(self) -> None:
        self._token_serial += 1
        self.access_token = f"access-{self._token_serial}"

    def add_note(self, title: str, **fields: Any) -> dict[str, Any]:
        self._note_serial += 1
        self._clock += timedelta(minutes=1)
        note = {
            "_id": f"n{self._note_serial}",
            "title": title,
            "content": fields.pop("content", ""),
            "color": fields.pop("color", "#E9D5FF"),
            "images": fields.pop("images", []),
            "isPinned": fields.pop("isPinned", False),
            "isArchived": fields.pop("isArchived", False),
            "isDeleted": fields.pop("isDeleted", False),
            "isPublic": fields.pop("isPublic", False),
            "updatedAt": self._clock.isoformat().replace("+00:00", "Z"),
        }
        note.update(fields)
        self.notes[note["_id"]] = note
        return note

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == "/api" + path]

    # -- dispatch -------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path.removeprefix("/api")
        forced = self.failures.get((request.method, path))
        if forced is not None:
            status, body = forced
            return httpx.Response(status, json=body)

        body = json.loads(request.content) if request.content else {}

        if path == "/auth/login" and request.method == "POST":
            if body.get("password") == "wrong":
                return httpx.Response(401, json={"message": "Invalid email or password"})
            return httpx.Response(200, json=self.auth_payload())
        if path == "/auth/register" and request.method == "POST":
            if body.get("email") == self.user["email"]:
                return httpx.Response(400, json={"message": "Email already registered"})
            self.user.update({"name": body["name"], "email": body["email"]})
            return httpx.Response(201, json=self.auth_payload())
        if path == "/auth/refresh" and request.method == "POST":
            return self._refresh(body)

        if not self._authorized(request):
            return httpx.Response(401, json={"message": "Token expired", "code": "TOKEN_EXPIRED"})

        return self._route(request, path, body)

    def _authorized(self, request: httpx.Request) -> bool:
        if self.reject_renewed and self.refresh_calls:
            return False
        return request.headers.get("Authorization") == f"Bearer {self.access_token}"

    def _refresh(self, body: dict[str, Any]) -> httpx.Response:
        self.refresh_calls += 1
        if self.fail_refresh or body.get("refreshToken") != self.refresh_token:
            return httpx.Response(401, json={"message": "Invalid refresh token"})
        self._token_serial += 1
        self.access_token = f"access-{self._token_serial}"
        self.refresh_token = f"refresh-{self._token_serial}"
        return httpx.Response(200, json={
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
        })

    def _route(self, request: httpx.Request, path: str, body: dict[str, Any]) -> httpx.Response:
        method = request.method
        params = request.url.params

        if path == "/auth/logout":
            return httpx.Response(200, json={"message": "Logged out"})
        if path == "/auth/me":
            return httpx.Response(200, json={"user": self.user})
        if path == "/auth/profile" and method == "PUT":
            for key in ("name", "bio", "isPrivate"):
                if key in body:
                    self.user[key] = body[key]
            return httpx.Response(200, json={"user": self.user})

        if path == "/auth/users/search":
            needle = params.get("q", "").casefold()
            hits = [
                {**user, "isFriend": uid in self.friends, "isPending": uid in self.outgoing}
                for uid, user in self.others.items()
                if needle in user["name"].casefold() or needle in user["email"].casefold()
            ]
            return httpx.Response(200, json=hits)
        if path == "/auth/friends" and method == "GET":
            return httpx.Response(200, json=[self.others[uid] for uid in sorted(self.friends)])
        if path == "/auth/friends/requests":
            return httpx.Response(200, json=[self.others[uid] for uid in sorted(self.incoming)])
        match = re.fullmatch(r"/auth/friends/(request|accept|decline)/(\w+)", path)
        if match:
            action, uid = match.groups()
            if uid not in self.others:
                return httpx.Response(404, json={"message": "User not found"})
            if action == "request":
                self.outgoing.add(uid)
            elif action == "accept":
                self.incoming.discard(uid)
                self.friends.add(uid)
            else:
                self.incoming.discard(uid)
            return httpx.Response(200, json={"message": "ok"})
        match = re.fullmatch(r"/auth/friends/(\w+)", path)
        if match and method == "DELETE":
            self.friends.discard(match.group(1))
            return httpx.Response(200, json={"message": "ok"})
        match = re.fullmatch(r"/auth/users/(\w+)", path)
        if match:
            user = self.others.get(match.group(1))
            if user is None:
                return httpx.Response(404, json={"message": "User not found"})
            return httpx.Response(200, json={"user": {**user, "isFriend": match.group(1) in self.friends}})

        return self._route_notes(method, path, params, body)

    def _route_notes(self, method: str, path: str, params: Any, body: dict[str, Any]) -> httpx.Response:
        if path == "/notes" and method == "GET":
            if params.get("deleted") == "true":
                found = [n for n in self.notes.values() if n["isDeleted"]]
            elif params.get("archived") == "true":
                found = [n for n in self.notes.values() if n["isArchived"] and not n["isDeleted"]]
            else:
                found = [n for n in self.notes.values() if not n["isArchived"] and not n["isDeleted"]]
            return httpx.Response(200, json=list(reversed(found)))
        if path == "/notes" and method == "POST":
            images = [{"_id": f"img{i}", "url": image["url"]} for i, image in enumerate(body.get("images", []))]
            note = self.add_note(
                body.get("title", ""),
                content=body.get("content", ""),
                color=body.get("color", "#E9D5FF"),
                images=images,
                isPinned=body.get("isPinned", False),
            )
            return httpx.Response(201, json=note)
        if path == "/notes/trash/empty" and method == "DELETE":
            for note_id in [k for k, n in self.notes.items() if n["isDeleted"]]:
                del self.notes[note_id]
            return httpx.Response(200, json={"message": "Trash emptied"})

        match = re.fullmatch(r"/notes/user/(\w+)", path)
        if match:
            return httpx.Response(200, json=self.public_notes.get(match.group(1), []))

        match = re.fullmatch(r"/notes/(\w+)(?:/(restore|like|duplicate|visibility))?", path)
        if not match:
            return httpx.Response(404, json={"message": "Not found"})
        note_id, action = match.groups()

        if action == "like":
            likers = self.likes.setdefault(note_id, set())
            likers ^= {self.user["_id"]}
            return httpx.Response(200, json={"liked": self.user["_id"] in likers, "likesCount": len(likers)})
        if action == "duplicate":
            source = next(
                (n for notes in self.public_notes.values() for n in notes if n["_id"] == note_id), None,
            )
            if source is None:
                return httpx.Response(404, json={"message": "Note not found"})
            return httpx.Response(201, json=self.add_note(source["title"], content=source.get("content", "")))

        note = self.notes.get(note_id)
        if note is None:
            return httpx.Response(404, json={"message": "Note not found"})

        if action == "restore":
            note.update(isDeleted=False, isArchived=False)
            return httpx.Response(200, json=note)
        if action == "visibility":
            note["isPublic"] = bool(body.get("isPublic"))
            return httpx.Response(200, json=note)
        if method == "GET":
            return httpx.Response(200, json=note)
        if method == "PUT":
            self._clock += timedelta(minutes=1)
            for key in ("title", "content", "color", "isPinned", "isArchived"):
                if key in body:
                    note[key] = body[key]
            if "images" in body:
                note["images"] = [
                    {"_id": image.get("_id") or f"img{i}", "url": image["url"]}
                    for i, image in enumerate(body["images"])
                ]
            note["updatedAt"] = self._clock.isoformat().replace("+00:00", "Z")
            return httpx.Response(200, json=note)
        if method == "DELETE":
            if params.get("permanent") == "true":
                del self.notes[note_id]
            else:
                note.update(isDeleted=True, isArchived=False)
            return httpx.Response(200, json={"message": "Note deleted"})

        return httpx.Response(405, json={"message": "Method not allowed"})


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_service() -> FakeNotesService:
    """A fresh in-memory remote service."""
    return FakeNotesService()


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def store(storage_dir: Path) -> KeyValueStore:
    return KeyValueStore(storage_dir)


@pytest.fixture
def offline_config(storage_dir: Path) -> ClientConfig:
    """Sync disabled: every read and write goes to the local cache."""
    return ClientConfig(
        base_url=BASE_URL,
        timeout=5.0,
        sync_enabled=False,
        storage_dir=storage_dir,
        default_language="en",
    )


@pytest.fixture
def sync_config(storage_dir: Path) -> ClientConfig:
    return ClientConfig(
        base_url=BASE_URL,
        timeout=5.0,
        sync_enabled=True,
        storage_dir=storage_dir,
        default_language="en",
    )


@pytest.fixture
def make_app(fake_service: FakeNotesService) -> Callable[[ClientConfig], AppController]:
    """
    Build application controllers wired to the fake service.

    Several controllers built from the same config share the storage
    directory, which is how a client restart is simulated.
    """
    def _make(config: ClientConfig) -> AppController:
        return AppController(config, transport=fake_service.transport)

    return _make


@pytest.fixture
async def signed_in_app(
    make_app: Callable[[ClientConfig], AppController],
    sync_config: ClientConfig,
) -> AsyncGenerator[AppController, None]:
    """A sync-mode controller after a successful login."""
    app = make_app(sync_config)
    await app.login("ana@example.com", "secret")
    yield app
    await app.close()
