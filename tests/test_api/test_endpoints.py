"""
Tests for spacebook/api/users.py, posts.py and friends.py against a fake server.
"""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import json_response, post_json, user_json
from spacebook.api.result import ErrorKind
from spacebook.content.models import (
    IncompleteRegistrationError,
    LikeConflict,
    Registration,
    Session,
)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class TestUsers:
    @pytest.mark.asyncio
    async def test_login_then_get_user(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/login"):
                body = json.loads(request.content)
                assert body == {"email": "ada@example.com", "password": "hunter22"}
                return json_response(200, {"id": 5, "token": "t-5"})
            if request.url.path.endswith("/user/5"):
                assert request.headers["X-Authorization"] == "t-5"
                return json_response(
                    200,
                    {
                        "user_id": 5,
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "email": "ada@example.com",
                        "friend_count": 3,
                    },
                )
            return httpx.Response(404)

        async with make_client(handler) as api:
            login = await api.users.login("ada@example.com", "hunter22")
            assert login.ok
            session = login.body.to_session()
            user = await api.users.get_user(session, session.user_id)

        assert session == Session(user_id=5, session_token="t-5")
        assert user.ok
        assert user.body.full_name == "Ada Lovelace"
        assert user.body.friend_count == 3

    @pytest.mark.asyncio
    async def test_bad_login(self, make_client):
        async with make_client(lambda r: httpx.Response(400)) as api:
            result = await api.users.login("a@b.com", "wrong")
        assert result.ok is False
        assert result.message == "invalid email or password."

    @pytest.mark.asyncio
    async def test_signup_sends_completed_registration(self, make_client):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return json_response(201, {"id": 9})

        reg = Registration().with_credentials("g@h.com", "pw123456").with_details("Grace", "Hopper")
        async with make_client(handler) as api:
            result = await api.users.signup(reg)
        assert result.ok and result.body.id == 9
        assert seen == {
            "email": "g@h.com",
            "password": "pw123456",
            "first_name": "Grace",
            "last_name": "Hopper",
        }

    @pytest.mark.asyncio
    async def test_signup_incomplete_raises_before_request(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with make_client(handler) as api:
            with pytest.raises(IncompleteRegistrationError):
                await api.users.signup(Registration().with_credentials("a@b.com", "pw"))

    @pytest.mark.asyncio
    async def test_update_user_sends_only_given_fields(self, make_client, session):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PATCH"
            seen.update(json.loads(request.content))
            return httpx.Response(200)

        async with make_client(handler) as api:
            result = await api.users.update_user(session, 1, first_name="Ada")
        assert result.ok
        assert seen == {"first_name": "Ada"}

    @pytest.mark.asyncio
    async def test_expired_token_needs_login(self, make_client, session):
        async with make_client(lambda r: httpx.Response(401)) as api:
            result = await api.users.get_user(session, 1)
        assert result.needs_login is True


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class TestPosts:
    @pytest.mark.asyncio
    async def test_get_posts_translates_wire_names(self, make_client, session):
        async with make_client(
            lambda r: json_response(200, [post_json(10, author_id=2, likes=4)])
        ) as api:
            result = await api.posts.get_posts(session, 2)
        post = result.body[0]
        assert post.num_likes == 4
        assert post.author.user_id == 2
        assert isinstance(post.timestamp, int)

    @pytest.mark.asyncio
    async def test_stranger_posts_forbidden(self, make_client, session):
        async with make_client(lambda r: httpx.Response(403)) as api:
            result = await api.posts.get_posts(session, 99)
        assert result.error is ErrorKind.PERMISSION
        assert "friends" in result.message

    @pytest.mark.asyncio
    async def test_like_conflict_carries_flag(self, make_client, session):
        async with make_client(lambda r: httpx.Response(400)) as api:
            liked = await api.posts.like_post(session, 2, 10)
            unliked = await api.posts.unlike_post(session, 2, 10)
        assert liked.body == LikeConflict(is_already_liked=True)
        assert unliked.body == LikeConflict(is_already_unliked=True)

    @pytest.mark.asyncio
    async def test_like_and_unlike_methods(self, make_client, session):
        methods = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append((request.method, request.url.path))
            return httpx.Response(200)

        async with make_client(handler) as api:
            await api.posts.like_post(session, 2, 10)
            await api.posts.unlike_post(session, 2, 10)
        assert methods == [
            ("POST", "/api/1.0.0/user/2/post/10/like"),
            ("DELETE", "/api/1.0.0/user/2/post/10/like"),
        ]


# ---------------------------------------------------------------------------
# Friends
# ---------------------------------------------------------------------------


class TestFriends:
    @pytest.mark.asyncio
    async def test_friends_list_translates_wire_names(self, make_client, session):
        async with make_client(lambda r: json_response(200, [user_json(3)])) as api:
            result = await api.friends.get_friends(session, 1)
        friend = result.body[0]
        assert friend.user_id == 3
        assert friend.full_name == "Grace Hopper"
        assert friend.email == "grace@example.com"

    @pytest.mark.asyncio
    async def test_search_query_params(self, make_client, session):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return json_response(200, [])

        async with make_client(handler) as api:
            result = await api.friends.search_users(
                session, "gra", search_in="friends", limit=5, offset=10
            )
        assert result.ok and result.body == []
        assert seen == {"q": "gra", "search_in": "friends", "limit": "5", "offset": "10"}

    @pytest.mark.asyncio
    async def test_add_friend_twice_is_forbidden(self, make_client, session):
        async with make_client(lambda r: httpx.Response(403)) as api:
            result = await api.friends.add_friend(session, 3)
        assert result.ok is False
        assert result.message == "user is already added as a friend."


class TestProfilePhoto:
    @pytest.mark.asyncio
    async def test_download_returns_bytes(self, make_client, session):
        async with make_client(lambda r: httpx.Response(200, content=b"\x89PNG...")) as api:
            result = await api.users.get_profile_photo(session, 1)
        assert result.body == b"\x89PNG..."

    @pytest.mark.asyncio
    async def test_upload_sends_image(self, make_client, session):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["type"] = request.headers["content-type"]
            seen["body"] = request.content
            return httpx.Response(200)

        async with make_client(handler) as api:
            result = await api.users.upload_profile_photo(session, 1, b"img", "image/jpeg")
        assert result.ok
        assert seen == {"type": "image/jpeg", "body": b"img"}
