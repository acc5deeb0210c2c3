"""Tests for spacebook/content/storage.py and session.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from spacebook.content.models import Session
from spacebook.content.session import NotAuthenticatedError, SessionStore
from spacebook.content.storage import KeyValueStore


# ---------------------------------------------------------------------------
# KeyValueStore
# ---------------------------------------------------------------------------


class TestKeyValueStore:
    def test_get_missing_returns_none(self, kv: KeyValueStore):
        assert kv.get("nope") is None

    def test_set_and_get(self, kv: KeyValueStore):
        kv.set("a", "1")
        assert kv.get("a") == "1"

    def test_set_overwrites(self, kv: KeyValueStore):
        kv.set("a", "1")
        kv.set("a", "2")
        assert kv.get("a") == "2"
        assert kv.keys() == ["a"]

    def test_remove(self, kv: KeyValueStore):
        kv.set("a", "1")
        assert kv.remove("a") is True
        assert kv.get("a") is None
        assert kv.remove("a") is False

    def test_values_survive_reopen(self, tmp_path: Path):
        path = tmp_path / "kv.db"
        with KeyValueStore(path) as first:
            first.set("drafts", "[]")
        with KeyValueStore(path) as second:
            assert second.get("drafts") == "[]"


class TestTransactions:
    def test_commit_applies_all_writes(self, kv: KeyValueStore):
        with kv.transaction():
            kv.set("a", "1")
            kv.set("b", "2")
        assert (kv.get("a"), kv.get("b")) == ("1", "2")

    def test_error_rolls_back(self, kv: KeyValueStore):
        kv.set("a", "before")
        with pytest.raises(RuntimeError):
            with kv.transaction():
                kv.set("a", "after")
                kv.set("b", "new")
                raise RuntimeError("boom")
        assert kv.get("a") == "before"
        assert kv.get("b") is None

    def test_nested_transactions_join_outer(self, kv: KeyValueStore):
        with pytest.raises(RuntimeError):
            with kv.transaction():
                with kv.transaction():
                    kv.set("inner", "x")
                raise RuntimeError("outer fails")
        assert kv.get("inner") is None

    def test_writes_visible_to_second_connection(self, tmp_path: Path):
        path = tmp_path / "shared.db"
        with KeyValueStore(path) as fg, KeyValueStore(path) as bg:
            with fg.transaction():
                fg.set("in_schedule", "[1]")
            assert bg.get("in_schedule") == "[1]"


# ---------------------------------------------------------------------------
# SessionStore
# ---------------------------------------------------------------------------


class TestSessionStore:
    def test_load_without_session(self, kv: KeyValueStore):
        assert SessionStore(kv).load() is None

    def test_require_without_session_raises(self, kv: KeyValueStore):
        with pytest.raises(NotAuthenticatedError):
            SessionStore(kv).require()

    def test_authenticate_then_load(self, kv: KeyValueStore):
        store = SessionStore(kv)
        store.authenticate(Session(user_id=5, session_token="t"))
        assert store.load() == Session(user_id=5, session_token="t")
        assert kv.get("user_id") == "5"
        assert kv.get("session_token") == "t"

    def test_unauthenticate_clears_both_keys(self, kv: KeyValueStore):
        store = SessionStore(kv)
        store.authenticate(Session(user_id=5, session_token="t"))
        store.unauthenticate()
        assert store.load() is None
        assert kv.keys() == []

    def test_non_numeric_user_id_means_no_session(self, kv: KeyValueStore):
        kv.set("user_id", "abc")
        kv.set("session_token", "t")
        assert SessionStore(kv).load() is None

    def test_token_without_user_id_means_no_session(self, kv: KeyValueStore):
        kv.set("session_token", "t")
        assert SessionStore(kv).load() is None
