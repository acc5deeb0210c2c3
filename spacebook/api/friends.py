"""
Friendship endpoints.

  GET    /user/{id}/friends       → list[UserSummary]
  POST   /user/{id}/friends       (send a friend request to {id})
  GET    /friendrequests          → list[UserSummary]
  POST   /friendrequests/{id}     (accept)
  DELETE /friendrequests/{id}     (decline)
  GET    /search                  → list[UserSummary]
"""

from __future__ import annotations

from typing import Literal

from pydantic import TypeAdapter

from spacebook.api.result import NOT_AUTHORISED, SERVER_ERROR, Outcome, Result
from spacebook.api.transport import Transport
from spacebook.content.models import Session, UserSummary

_users_adapter = TypeAdapter(list[UserSummary])

SearchScope = Literal["all", "friends"]

GET_FRIENDS = {
    200: Outcome(True, "got friends.", parse=True),
    401: NOT_AUTHORISED,
    403: Outcome(False, "can only view friends of yourself or friends."),
    404: Outcome(False, "no user / friends found."),
    500: SERVER_ERROR,
}

ADD_FRIEND = {
    201: Outcome(True, "sent friend request."),
    401: NOT_AUTHORISED,
    403: Outcome(False, "user is already added as a friend."),
    404: Outcome(False, "no user found."),
    500: SERVER_ERROR,
}

GET_FRIEND_REQUESTS = {
    200: Outcome(True, "got friend requests.", parse=True),
    401: NOT_AUTHORISED,
    500: SERVER_ERROR,
}

ACCEPT_FRIEND_REQUEST = {
    200: Outcome(True, "accepted friend request."),
    401: NOT_AUTHORISED,
    404: Outcome(False, "user not found."),
    500: SERVER_ERROR,
}

DECLINE_FRIEND_REQUEST = {
    200: Outcome(True, "declined friend request."),
    401: NOT_AUTHORISED,
    404: Outcome(False, "user not found."),
    500: SERVER_ERROR,
}

SEARCH = {
    200: Outcome(True, "got results.", parse=True),
    400: Outcome(False, "invalid data to perform search."),
    401: NOT_AUTHORISED,
    500: SERVER_ERROR,
}


class FriendsAPI:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def get_friends(self, session: Session, user_id: int) -> Result[list[UserSummary]]:
        return await self._transport.request(
            "GET",
            f"user/{user_id}/friends",
            session=session,
            outcomes=GET_FRIENDS,
            parse=_users_adapter.validate_python,
        )

    async def add_friend(self, session: Session, user_id: int) -> Result[None]:
        return await self._transport.request(
            "POST", f"user/{user_id}/friends", session=session, outcomes=ADD_FRIEND
        )

    async def get_friend_requests(self, session: Session) -> Result[list[UserSummary]]:
        return await self._transport.request(
            "GET",
            "friendrequests",
            session=session,
            outcomes=GET_FRIEND_REQUESTS,
            parse=_users_adapter.validate_python,
        )

    async def accept_friend_request(self, session: Session, user_id: int) -> Result[None]:
        return await self._transport.request(
            "POST",
            f"friendrequests/{user_id}",
            session=session,
            outcomes=ACCEPT_FRIEND_REQUEST,
        )

    async def decline_friend_request(self, session: Session, user_id: int) -> Result[None]:
        return await self._transport.request(
            "DELETE",
            f"friendrequests/{user_id}",
            session=session,
            outcomes=DECLINE_FRIEND_REQUEST,
        )

    async def search_users(
        self,
        session: Session,
        query: str,
        *,
        search_in: SearchScope = "all",
        limit: int = 20,
        offset: int = 0,
    ) -> Result[list[UserSummary]]:
        return await self._transport.request(
            "GET",
            "search",
            session=session,
            params={"q": query, "search_in": search_in, "limit": limit, "offset": offset},
            outcomes=SEARCH,
            parse=_users_adapter.validate_python,
        )
