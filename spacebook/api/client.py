"""
Bundle of the endpoint clients over one shared transport.

Usage::

    async with SpacebookClient() as api:
        result = await api.users.login(email, password)
        posts = await api.posts.get_posts(session, user_id)
"""

from __future__ import annotations

from typing import Optional

from spacebook.api.friends import FriendsAPI
from spacebook.api.posts import PostsAPI
from spacebook.api.transport import Transport
from spacebook.api.users import UsersAPI


class SpacebookClient:
    def __init__(self, transport: Optional[Transport] = None) -> None:
        self.transport = transport or Transport()
        self.users = UsersAPI(self.transport)
        self.posts = PostsAPI(self.transport)
        self.friends = FriendsAPI(self.transport)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "SpacebookClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()
