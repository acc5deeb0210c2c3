"""
Post endpoints.

  GET    /user/{id}/post                  → list[Post]
  POST   /user/{id}/post                  → CreatedId
  GET    /user/{id}/post/{post_id}        → Post
  PATCH  /user/{id}/post/{post_id}
  DELETE /user/{id}/post/{post_id}
  POST   /user/{id}/post/{post_id}/like
  DELETE /user/{id}/post/{post_id}/like

The like endpoints answer 400 when the caller's like state already matches
the request; that answer carries a ``LikeConflict`` body so the feed engine
can reconcile.
"""

from __future__ import annotations

from pydantic import TypeAdapter

from spacebook.api.result import NOT_AUTHORISED, SERVER_ERROR, Outcome, Result
from spacebook.api.transport import Transport
from spacebook.content.models import CreatedId, LikeConflict, Post, Session

_posts_adapter = TypeAdapter(list[Post])

GET_POSTS = {
    200: Outcome(True, "got posts.", parse=True),
    401: NOT_AUTHORISED,
    403: Outcome(False, "can only view the posts of yourself or your friends."),
    404: Outcome(False, "no posts found."),
    500: SERVER_ERROR,
}

CREATE_POST = {
    201: Outcome(True, "created a post.", parse=True),
    401: NOT_AUTHORISED,
    404: Outcome(False, "no user data found."),
    500: SERVER_ERROR,
}

GET_POST = {
    200: Outcome(True, "got post.", parse=True),
    401: NOT_AUTHORISED,
    403: Outcome(False, "can only view the posts of yourself or your friends."),
    404: Outcome(False, "no post found."),
    500: SERVER_ERROR,
}

UPDATE_POST = {
    200: Outcome(True, "updated post."),
    400: Outcome(False, "invalid data to update post."),
    401: NOT_AUTHORISED,
    403: Outcome(False, "you can only update your own posts."),
    404: Outcome(False, "no post found."),
    500: SERVER_ERROR,
}

DELETE_POST = {
    200: Outcome(True, "deleted post."),
    401: NOT_AUTHORISED,
    403: Outcome(False, "you can only delete your own posts."),
    404: Outcome(False, "no post found."),
    500: SERVER_ERROR,
}

LIKE_POST = {
    200: Outcome(True, "liked post."),
    400: Outcome(
        False,
        "this post has already been liked.",
        body=LikeConflict(is_already_liked=True),
    ),
    401: NOT_AUTHORISED,
    403: Outcome(False, "can only like friends posts."),
    404: Outcome(False, "no post found."),
    500: SERVER_ERROR,
}

UNLIKE_POST = {
    200: Outcome(True, "unliked post."),
    400: Outcome(
        False,
        "this post has already been unliked.",
        body=LikeConflict(is_already_unliked=True),
    ),
    401: NOT_AUTHORISED,
    403: Outcome(False, "can only like friends posts."),
    404: Outcome(False, "no post found."),
    500: SERVER_ERROR,
}


class PostsAPI:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def get_posts(self, session: Session, user_id: int) -> Result[list[Post]]:
        return await self._transport.request(
            "GET",
            f"user/{user_id}/post",
            session=session,
            outcomes=GET_POSTS,
            parse=_posts_adapter.validate_python,
        )

    async def create_post(self, session: Session, user_id: int, text: str) -> Result[CreatedId]:
        return await self._transport.request(
            "POST",
            f"user/{user_id}/post",
            session=session,
            json={"text": text},
            outcomes=CREATE_POST,
            parse=CreatedId.model_validate,
        )

    async def get_post(self, session: Session, user_id: int, post_id: int) -> Result[Post]:
        return await self._transport.request(
            "GET",
            f"user/{user_id}/post/{post_id}",
            session=session,
            outcomes=GET_POST,
            parse=Post.model_validate,
        )

    async def update_post(
        self, session: Session, user_id: int, post_id: int, text: str
    ) -> Result[None]:
        return await self._transport.request(
            "PATCH",
            f"user/{user_id}/post/{post_id}",
            session=session,
            json={"text": text},
            outcomes=UPDATE_POST,
        )

    async def delete_post(self, session: Session, user_id: int, post_id: int) -> Result[None]:
        return await self._transport.request(
            "DELETE",
            f"user/{user_id}/post/{post_id}",
            session=session,
            outcomes=DELETE_POST,
        )

    async def like_post(self, session: Session, user_id: int, post_id: int) -> Result[LikeConflict]:
        return await self._transport.request(
            "POST",
            f"user/{user_id}/post/{post_id}/like",
            session=session,
            outcomes=LIKE_POST,
        )

    async def unlike_post(self, session: Session, user_id: int, post_id: int) -> Result[LikeConflict]:
        return await self._transport.request(
            "DELETE",
            f"user/{user_id}/post/{post_id}/like",
            session=session,
            outcomes=UNLIKE_POST,
        )
