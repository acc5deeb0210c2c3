"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from spacebook.api.client import SpacebookClient
from spacebook.api.transport import Transport
from spacebook.content.models import Session
from spacebook.content.storage import KeyValueStore

BASE_URL = "http://spacebook.test/api/1.0.0/"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def kv(tmp_path: Path) -> KeyValueStore:
    """A fresh SQLite key/value store per test."""
    store = KeyValueStore(tmp_path / "spacebook.db")
    yield store
    store.close()


@pytest.fixture
def session() -> Session:
    return Session(user_id=1, session_token="tok-abc")


@pytest.fixture
def make_client() -> Callable[[Handler], SpacebookClient]:
    """Build a SpacebookClient whose HTTP calls are answered by ``handler``."""

    def _make(handler: Handler) -> SpacebookClient:
        http = httpx.AsyncClient(
            base_url=BASE_URL, transport=httpx.MockTransport(handler)
        )
        return SpacebookClient(Transport(BASE_URL, client=http))

    return _make


def json_response(status: int, data=None) -> httpx.Response:
    if data is None:
        return httpx.Response(status)
    return httpx.Response(status, content=json.dumps(data), headers={"Content-Type": "application/json"})


def post_json(post_id: int, author_id: int, text: str = "hello", likes: int = 0) -> dict:
    """A post as the server sends it."""
    return {
        "post_id": post_id,
        "text": text,
        "timestamp": "2026-03-01T10:00:00.000Z",
        "author": {
            "user_id": author_id,
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
        },
        "numLikes": likes,
    }


def user_json(user_id: int, first: str = "Grace", last: str = "Hopper") -> dict:
    """A friends / search list entry as the server sends it."""
    return {
        "user_id": user_id,
        "user_givenname": first,
        "user_familyname": last,
        "user_email": f"{first.lower()}@example.com",
    }
