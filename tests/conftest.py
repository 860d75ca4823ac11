"""
Shared pytest fixtures for request pipeline tests.

FakeTransport stands in for the HTTP layer: responses are scripted in FIFO
order and every ``send`` is recorded so tests can assert how many requests a
logical operation issued and what they carried.
"""

from __future__ import annotations

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import parse_qs, urlsplit

import pytest

from src.soundcloud_client.client import SoundcloudClient
from src.soundcloud_client.executor import RawResponse, RequestExecutor, TransportError
from src.soundcloud_client.session import Session


# ---------------------------------------------------------------------------
# Transport double
# ---------------------------------------------------------------------------

class FakeTransport:
    """Scripted transport recording ``(method, url, data)`` for each send."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._script: list[RawResponse | Exception] = []
        self.calls: list[tuple[str, str, dict | None]] = []

    def queue(self, payload=None, status: int = 200, body: bytes | None = None) -> None:
        if body is None:
            body = b"" if payload is None else json.dumps(payload).encode("utf-8")
        with self._lock:
            self._script.append(RawResponse(status_code=status, body=body))

    def queue_error(self, message: str = "Connection refused") -> None:
        with self._lock:
            self._script.append(TransportError(message))

    def send(self, method: str, url: str, data: dict | None = None) -> RawResponse:
        with self._lock:
            self.calls.append((method, url, data))
            if not self._script:
                raise AssertionError(f"Unexpected request: {method} {url}")
            outcome = self._script.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def query(self, index: int) -> dict[str, str]:
        """Query parameters of the ``index``-th recorded call, single-valued."""
        _, url, _ = self.calls[index]
        return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


class Recorder:
    """Completion callback collecting every response it receives."""

    def __init__(self) -> None:
        self.calls: list = []

    def __call__(self, response) -> None:
        self.calls.append(response)

    @property
    def single(self):
        assert len(self.calls) == 1, f"expected one completion, got {len(self.calls)}"
        return self.calls[0]


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------

def make_user(identifier: int = 1, username: str = "artist") -> dict:
    return {
        "id": identifier,
        "username": username,
        "full_name": "Some Artist",
        "permalink_url": f"https://soundcloud.com/{username}",
    }


def make_track(identifier: int = 100, title: str = "Track") -> dict:
    return {
        "id": identifier,
        "title": f"{title} {identifier}",
        "duration": 215000,
        "genre": "Ambient",
        "streamable": True,
        "user": make_user(),
    }


def make_comment(identifier: int = 500, body: str = "Nice drop") -> dict:
    return {
        "id": identifier,
        "body": body,
        "timestamp": 42000,
        "track_id": 100,
        "user": make_user(2, "listener"),
    }


def make_envelope(items: list[dict], next_href: str | None = None) -> dict:
    return {"collection": items, "next_href": next_href}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def completion():
    return Recorder()


@pytest.fixture
def executor(transport):
    pool = ThreadPoolExecutor(max_workers=2)
    yield RequestExecutor(transport, pool)
    pool.shutdown(wait=True)


@pytest.fixture
def session():
    return Session(access_token="token-1", refresh_token="refresh-1", expires_in=3600)


@pytest.fixture
def client(transport):
    c = SoundcloudClient(client_id="test-client", client_secret="test-secret", transport=transport)
    yield c
    c.close()


@pytest.fixture
def logged_in_client(client, session):
    client.login(session)
    return client
