"""
Tests for spacebook/feed/engine.py — CRUD pass-through and like reconciliation.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from conftest import json_response, post_json
from spacebook.api.posts import LIKE_POST, UNLIKE_POST
from spacebook.api.result import ErrorKind, Result
from spacebook.api.transport import UnreachableError
from spacebook.content.models import CreatedId, LikeConflict, Session
from spacebook.feed.engine import LikeOutcome, PostEngine

SESSION = Session(user_id=1, session_token="t")


def _like_ok() -> Result:
    return Result.success("liked post.", status=200)


def _already_liked() -> Result:
    o = LIKE_POST[400]
    return Result.failure(o.message, ErrorKind.CONFLICT, body=o.body, status=400)


def _unlike_ok() -> Result:
    return Result.success("unliked post.", status=200)


def _already_unliked() -> Result:
    o = UNLIKE_POST[400]
    return Result.failure(o.message, ErrorKind.CONFLICT, body=o.body, status=400)


def _posts_api(**overrides) -> AsyncMock:
    api = AsyncMock()
    for name, value in overrides.items():
        setattr(api, name, AsyncMock(**value))
    return api


# ---------------------------------------------------------------------------
# toggle_like branches
# ---------------------------------------------------------------------------


class TestToggleLike:
    @pytest.mark.asyncio
    async def test_like_succeeds(self):
        api = _posts_api(like_post={"return_value": _like_ok()})
        result = await PostEngine(api).toggle_like(SESSION, 2, 10)

        assert result.outcome is LikeOutcome.LIKED
        assert result.ok
        api.unlike_post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_already_liked_falls_back_to_unlike(self):
        api = _posts_api(
            like_post={"return_value": _already_liked()},
            unlike_post={"return_value": _unlike_ok()},
        )
        result = await PostEngine(api).toggle_like(SESSION, 2, 10)

        assert result.outcome is LikeOutcome.UNLIKED
        assert result.message == "unliked post."
        api.unlike_post.assert_awaited_once_with(SESSION, 2, 10)

    @pytest.mark.asyncio
    async def test_unlike_fallback_failure_is_surfaced(self):
        api = _posts_api(
            like_post={"return_value": _already_liked()},
            unlike_post={"return_value": Result.failure("no post found.", ErrorKind.NOT_FOUND, status=404)},
        )
        result = await PostEngine(api).toggle_like(SESSION, 2, 10)

        assert result.outcome is LikeOutcome.FAILED
        assert result.message == "no post found."
        assert api.like_post.await_count == 1

    @pytest.mark.asyncio
    async def test_unlike_already_unliked_is_not_retried(self):
        api = _posts_api(
            like_post={"return_value": _already_liked()},
            unlike_post={"return_value": _already_unliked()},
        )
        result = await PostEngine(api).toggle_like(SESSION, 2, 10)

        assert result.outcome is LikeOutcome.FAILED
        assert api.like_post.await_count == 1
        assert api.unlike_post.await_count == 1

    @pytest.mark.asyncio
    async def test_forbidden_like_no_fallback(self):
        api = _posts_api(
            like_post={"return_value": Result.failure("can only like friends posts.", ErrorKind.PERMISSION, status=403)}
        )
        result = await PostEngine(api).toggle_like(SESSION, 2, 10)

        assert result.outcome is LikeOutcome.FAILED
        assert result.message == "can only like friends posts."
        api.unlike_post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_400_without_flag_no_fallback(self):
        api = _posts_api(
            like_post={"return_value": Result.failure("bad.", ErrorKind.INVALID, body=LikeConflict(), status=400)}
        )
        result = await PostEngine(api).toggle_like(SESSION, 2, 10)

        assert result.outcome is LikeOutcome.FAILED
        api.unlike_post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unreachable_is_not_treated_as_already_liked(self):
        api = _posts_api(like_post={"side_effect": UnreachableError("timeout")})
        with pytest.raises(UnreachableError):
            await PostEngine(api).toggle_like(SESSION, 2, 10)
        api.unlike_post.assert_not_awaited()


# ---------------------------------------------------------------------------
# Against a stateful fake server
# ---------------------------------------------------------------------------


class _LikeServer:
    """Tracks which users like post 10 on profile 2."""

    def __init__(self) -> None:
        self.likers: set[int] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/like"):
            viewer = 1
            if request.method == "POST":
                if viewer in self.likers:
                    return httpx.Response(400)
                self.likers.add(viewer)
                return httpx.Response(200)
            if viewer not in self.likers:
                return httpx.Response(400)
            self.likers.discard(viewer)
            return httpx.Response(200)
        return json_response(200, [post_json(10, author_id=2, likes=len(self.likers))])


class TestAgainstServer:
    @pytest.mark.asyncio
    async def test_double_toggle_restores_like_count(self, make_client):
        server = _LikeServer()
        async with make_client(server) as api:
            engine = PostEngine(api.posts)
            first, feed1 = await engine.toggle_like_and_reload(SESSION, 2, 10)
            second, feed2 = await engine.toggle_like_and_reload(SESSION, 2, 10)

        assert first.outcome is LikeOutcome.LIKED
        assert second.outcome is LikeOutcome.UNLIKED
        assert feed1.body[0].num_likes == 1
        assert feed2.body[0].num_likes == 0

    @pytest.mark.asyncio
    async def test_failed_toggle_skips_reload(self, make_client):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.method)
            return httpx.Response(403)

        async with make_client(handler) as api:
            toggled, feed = await PostEngine(api.posts).toggle_like_and_reload(SESSION, 2, 10)
        assert toggled.ok is False
        assert feed is None
        assert calls == ["POST"]


# ---------------------------------------------------------------------------
# Per-post serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    @pytest.mark.asyncio
    async def test_concurrent_toggles_on_same_post_do_not_overlap(self):
        liked = False
        inflight = 0
        max_inflight = 0

        async def like_post(session, profile_id, post_id):
            nonlocal liked, inflight, max_inflight
            inflight += 1
            max_inflight = max(max_inflight, inflight)
            await asyncio.sleep(0)
            inflight -= 1
            if liked:
                return _already_liked()
            liked = True
            return _like_ok()

        async def unlike_post(session, profile_id, post_id):
            nonlocal liked, inflight, max_inflight
            inflight += 1
            max_inflight = max(max_inflight, inflight)
            await asyncio.sleep(0)
            inflight -= 1
            liked = False
            return _unlike_ok()

        api = AsyncMock()
        api.like_post = like_post
        api.unlike_post = unlike_post
        engine = PostEngine(api)

        results = await asyncio.gather(
            engine.toggle_like(SESSION, 2, 10), engine.toggle_like(SESSION, 2, 10)
        )

        assert [r.outcome for r in results] == [LikeOutcome.LIKED, LikeOutcome.UNLIKED]
        assert liked is False
        assert max_inflight == 1

    @pytest.mark.asyncio
    async def test_lock_released_after_toggle(self):
        seen_while_running = []
        api = AsyncMock()
        engine = PostEngine(api)

        async def like_post(session, profile_id, post_id):
            seen_while_running.append(len(engine._locks))
            await asyncio.sleep(0)
            return _like_ok()

        api.like_post = like_post

        await asyncio.gather(*(engine.toggle_like(SESSION, 2, post_id) for post_id in range(50)))

        assert max(seen_while_running) >= 1
        assert len(engine._locks) == 0


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


class TestCrud:
    @pytest.mark.asyncio
    async def test_create_defaults_to_own_wall(self):
        api = _posts_api(create_post={"return_value": Result.success("created a post.", CreatedId(id=3))})
        result = await PostEngine(api).create_post(SESSION, "hi")
        assert result.body.id == 3
        api.create_post.assert_awaited_once_with(SESSION, 1, "hi")

    @pytest.mark.asyncio
    async def test_create_on_friend_wall(self):
        api = _posts_api(create_post={"return_value": Result.success("created a post.", CreatedId(id=3))})
        await PostEngine(api).create_post(SESSION, "hi", profile_id=2)
        api.create_post.assert_awaited_once_with(SESSION, 2, "hi")

    @pytest.mark.asyncio
    async def test_update_and_delete_pass_through(self):
        api = _posts_api(
            update_post={"return_value": Result.success("updated post.")},
            delete_post={"return_value": Result.success("deleted post.")},
        )
        engine = PostEngine(api)
        assert (await engine.update_post(SESSION, 1, 10, "new")).ok
        assert (await engine.delete_post(SESSION, 1, 10)).ok
        api.update_post.assert_awaited_once_with(SESSION, 1, 10, "new")

    @pytest.mark.asyncio
    async def test_directional_like_calls_pass_through(self):
        api = _posts_api(
            like_post={"return_value": _already_liked()},
            unlike_post={"return_value": _unlike_ok()},
        )
        engine = PostEngine(api)
        liked = await engine.like_post(SESSION, 2, 10)
        unliked = await engine.unlike_post(SESSION, 2, 10)
        assert liked.body == LikeConflict(is_already_liked=True)
        assert unliked.ok
        api.like_post.assert_awaited_once_with(SESSION, 2, 10)
