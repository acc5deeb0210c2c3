"""
Post interaction engine.

CRUD over posts plus like/unlike reconciliation. The backend has no "do I
like this post" query, only directional mutators, so a single user "like"
action is resolved as:

  like_post ──ok──────────────────────────────→ LIKED
      │
      └─ 400 + is_already_liked ─→ unlike_post ──ok──→ UNLIKED
      │                                 └─ failure ──→ FAILED (unlike's message)
      └─ any other failure ─────────────────────────→ FAILED (like's message)

Only a like failure carrying the flag triggers the fallback; an unlike
failure is never retried as a like, and a 400 without the flag is surfaced
as-is. ``UnreachableError`` propagates untouched.

Toggles on the same post are serialized with a per-post asyncio.Lock.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from spacebook.api.posts import PostsAPI
from spacebook.api.result import Result
from spacebook.content.models import CreatedId, LikeConflict, Post, Session

logger = logging.getLogger(__name__)


class LikeOutcome(str, Enum):
    LIKED = "liked"
    UNLIKED = "unliked"
    FAILED = "failed"


@dataclass(frozen=True)
class ToggleResult:
    outcome: LikeOutcome
    result: Result  # the last call made: like on LIKED, unlike on UNLIKED

    @property
    def ok(self) -> bool:
        return self.outcome is not LikeOutcome.FAILED

    @property
    def message(self) -> str:
        return self.result.message


class PostEngine:
    """All post reads and writes, foreground and background alike."""

    def __init__(self, posts: PostsAPI) -> None:
        self._posts = posts
        # Entries vanish once no toggle holds or awaits the lock
        self._locks: weakref.WeakValueDictionary[tuple[int, int], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def get_posts(self, session: Session, profile_id: int) -> Result[list[Post]]:
        return await self._posts.get_posts(session, profile_id)

    async def get_post(self, session: Session, profile_id: int, post_id: int) -> Result[Post]:
        return await self._posts.get_post(session, profile_id, post_id)

    async def create_post(
        self, session: Session, text: str, profile_id: Optional[int] = None
    ) -> Result[CreatedId]:
        """Create a post on ``profile_id`` (defaults to the signed-in user's wall)."""
        target = profile_id if profile_id is not None else session.user_id
        result = await self._posts.create_post(session, target, text)
        if result.ok:
            logger.info("Created post %s on profile %s", result.body.id, target)
        else:
            logger.info("Create post on profile %s failed: %s", target, result.message)
        return result

    async def update_post(
        self, session: Session, profile_id: int, post_id: int, text: str
    ) -> Result[None]:
        """Callers check ``post_permissions`` first; the server still has the final word."""
        return await self._posts.update_post(session, profile_id, post_id, text)

    async def delete_post(self, session: Session, profile_id: int, post_id: int) -> Result[None]:
        return await self._posts.delete_post(session, profile_id, post_id)

    # ------------------------------------------------------------------
    # Likes
    # ------------------------------------------------------------------

    async def like_post(self, session: Session, profile_id: int, post_id: int) -> Result[LikeConflict]:
        async with self._lock_for(profile_id, post_id):
            return await self._posts.like_post(session, profile_id, post_id)

    async def unlike_post(self, session: Session, profile_id: int, post_id: int) -> Result[LikeConflict]:
        async with self._lock_for(profile_id, post_id):
            return await self._posts.unlike_post(session, profile_id, post_id)

    async def toggle_like(self, session: Session, profile_id: int, post_id: int) -> ToggleResult:
        """Flip the caller's like on a post (see module docstring)."""
        async with self._lock_for(profile_id, post_id):
            liked = await self._posts.like_post(session, profile_id, post_id)
            if liked.ok:
                return ToggleResult(LikeOutcome.LIKED, liked)

            if not _is_already_liked(liked):
                return ToggleResult(LikeOutcome.FAILED, liked)

            logger.debug("Post %s already liked, unliking instead", post_id)
            unliked = await self._posts.unlike_post(session, profile_id, post_id)
            if unliked.ok:
                return ToggleResult(LikeOutcome.UNLIKED, unliked)
            return ToggleResult(LikeOutcome.FAILED, unliked)

    async def toggle_like_and_reload(
        self, session: Session, profile_id: int, post_id: int
    ) -> tuple[ToggleResult, Optional[Result[list[Post]]]]:
        """Toggle, then reload the feed so ``num_likes`` reflects the server."""
        toggled = await self.toggle_like(session, profile_id, post_id)
        if not toggled.ok:
            return toggled, None
        return toggled, await self.get_posts(session, profile_id)

    def _lock_for(self, profile_id: int, post_id: int) -> asyncio.Lock:
        key = (profile_id, post_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


def _is_already_liked(result: Result) -> bool:
    # A failure without the flag is never guessed to be "already liked"
    return isinstance(result.body, LikeConflict) and result.body.is_already_liked
