"""Tests for spacebook/content/models.py"""

from __future__ import annotations

import pytest

from spacebook.content.models import (
    Credentials,
    Draft,
    IncompleteRegistrationError,
    Post,
    Registration,
    ScheduleEntry,
    Session,
    UserSummary,
)


class TestWireAliases:
    def test_credentials_from_login_body(self):
        creds = Credentials.model_validate({"id": 3, "token": "abc"})
        assert creds.to_session() == Session(user_id=3, session_token="abc")

    def test_user_summary_accepts_both_namings(self):
        wire = UserSummary.model_validate(
            {"user_id": 1, "user_givenname": "A", "user_familyname": "B", "user_email": "e"}
        )
        local = UserSummary(user_id=1, first_name="A", last_name="B", email="e")
        assert wire == local

    def test_post_timestamp_from_iso_string(self):
        post = Post.model_validate(
            {
                "post_id": 1,
                "text": "t",
                "timestamp": "1970-01-01T00:00:01Z",
                "author": {"user_id": 1, "first_name": "A", "last_name": "B"},
                "numLikes": 2,
            }
        )
        assert post.timestamp == 1000
        assert post.num_likes == 2

    def test_post_ignores_unknown_fields(self):
        post = Post.model_validate(
            {
                "post_id": 1,
                "text": "t",
                "timestamp": 5,
                "author": {"user_id": 1, "first_name": "A", "last_name": "B"},
                "extra": "ignored",
            }
        )
        assert post.num_likes == 0

    def test_session_token_hidden_from_repr(self):
        assert "secret" not in repr(Session(user_id=1, session_token="secret"))


class TestScheduleEntry:
    def test_due_at_exact_timestamp(self):
        entry = ScheduleEntry(draft=Draft(id=1, text="x"), timestamp=1000)
        assert entry.is_due(1000) is True
        assert entry.is_due(999) is False


class TestRegistration:
    def test_steps_return_new_instances(self):
        empty = Registration()
        step1 = empty.with_credentials(" a@b.com ", "pw")
        assert empty.email is None
        assert step1.email == "a@b.com"
        assert step1.is_complete is False

    def test_complete_payload(self):
        reg = Registration().with_credentials("a@b.com", "pw").with_details("Ada", "L")
        assert reg.is_complete
        assert reg.to_payload()["first_name"] == "Ada"

    def test_incomplete_payload_names_missing_fields(self):
        with pytest.raises(IncompleteRegistrationError, match="first_name"):
            Registration().with_credentials("a@b.com", "pw").to_payload()
