"""
Friendship gating and the friend-request inbox.

Gating: before a profile's posts are fetched, decide whether the viewer is
the owner, a friend, or a stranger. Strangers never trigger a posts request;
they get an "add friend" action instead.

Inbox: accepting or declining a request changes both the request list and
the friends list on the server, so both are re-fetched together after every
successful mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from spacebook.api.friends import FriendsAPI, SearchScope
from spacebook.api.result import ErrorKind, Result
from spacebook.content.models import FriendshipState, Post, Session, UserSummary
from spacebook.feed.engine import PostEngine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Profile gating
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProfileView:
    """What a profile screen may show after gating."""

    profile_id: int
    friendship: Optional[FriendshipState] = None
    posts: Optional[Result[list[Post]]] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        if self.friendship is None:
            return False
        return self.posts is None or self.posts.ok

    @property
    def can_view_posts(self) -> bool:
        return self.friendship is not None and self.friendship.can_view_posts

    @property
    def can_compose(self) -> bool:
        return self.can_view_posts

    @property
    def can_add_friend(self) -> bool:
        return self.friendship is not None and not self.friendship.can_view_posts


class FriendshipResolver:
    def __init__(self, friends: FriendsAPI, engine: PostEngine) -> None:
        self._friends = friends
        self._engine = engine

    async def resolve(self, session: Session, profile_id: int) -> Result[FriendshipState]:
        """Work out the viewer's relationship to ``profile_id``."""
        if profile_id == session.user_id:
            return Result.success(
                "viewing your own profile.", FriendshipState(is_self=True, is_friend=False)
            )

        friends = await self._friends.get_friends(session, session.user_id)
        if not friends.ok:
            return Result.failure(friends.message, friends.error or ErrorKind.UNKNOWN, status=friends.status)

        is_friend = any(f.user_id == profile_id for f in friends.body)
        return Result.success(
            "friends." if is_friend else "not friends.",
            FriendshipState(is_self=False, is_friend=is_friend),
        )

    async def load_profile(self, session: Session, profile_id: int) -> ProfileView:
        """Resolve friendship, then fetch posts only when allowed to see them."""
        state = await self.resolve(session, profile_id)
        if not state.ok:
            return ProfileView(profile_id=profile_id, message=state.message)

        if not state.body.can_view_posts:
            logger.debug("Profile %s is gated for viewer %s", profile_id, session.user_id)
            return ProfileView(
                profile_id=profile_id,
                friendship=state.body,
                message="add this user as a friend to see their posts.",
            )

        posts = await self._engine.get_posts(session, profile_id)
        return ProfileView(
            profile_id=profile_id,
            friendship=state.body,
            posts=posts,
            message=posts.message,
        )

    async def add_friend(self, session: Session, profile_id: int) -> Result[None]:
        result = await self._friends.add_friend(session, profile_id)
        if result.ok:
            logger.info("Sent friend request to %s", profile_id)
        return result

    async def search(
        self,
        session: Session,
        query: str,
        *,
        search_in: SearchScope = "all",
        limit: int = 20,
        offset: int = 0,
    ) -> Result[list[UserSummary]]:
        return await self._friends.search_users(
            session, query, search_in=search_in, limit=limit, offset=offset
        )


# ---------------------------------------------------------------------------
# Friend-request inbox
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FriendsSnapshot:
    requests: list[UserSummary] = field(default_factory=list)
    friends: list[UserSummary] = field(default_factory=list)


class FriendRequestsInbox:
    """
    Pending requests and friends, always refreshed as a pair.

    ``snapshot`` only ever changes to a state where both lists were fetched
    after the same mutation.
    """

    def __init__(self, friends: FriendsAPI) -> None:
        self._friends = friends
        self.snapshot = FriendsSnapshot()

    async def refresh(self, session: Session) -> Result[FriendsSnapshot]:
        requests = await self._friends.get_friend_requests(session)
        if not requests.ok:
            return _carry_failure(requests)
        friends = await self._friends.get_friends(session, session.user_id)
        if not friends.ok:
            return _carry_failure(friends)

        self.snapshot = FriendsSnapshot(requests=requests.body or [], friends=friends.body or [])
        return Result.success("refreshed friends.", self.snapshot)

    async def accept(self, session: Session, user_id: int) -> Result[FriendsSnapshot]:
        return await self._mutate_then_refresh(
            session, await self._friends.accept_friend_request(session, user_id)
        )

    async def decline(self, session: Session, user_id: int) -> Result[FriendsSnapshot]:
        return await self._mutate_then_refresh(
            session, await self._friends.decline_friend_request(session, user_id)
        )

    async def _mutate_then_refresh(
        self, session: Session, mutation: Result[None]
    ) -> Result[FriendsSnapshot]:
        if not mutation.ok:
            return _carry_failure(mutation)
        refreshed = await self.refresh(session)
        if not refreshed.ok:
            return refreshed
        return Result.success(mutation.message, refreshed.body, status=mutation.status)


def _carry_failure(result: Result) -> Result:
    return Result.failure(result.message, result.error or ErrorKind.UNKNOWN, status=result.status)
