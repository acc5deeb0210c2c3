"""
Account and profile endpoints.

  POST  /login            → Credentials
  POST  /user             → CreatedId (signup)
  POST  /logout
  GET   /user/{id}        → User
  PATCH /user/{id}
  GET   /user/{id}/photo  → bytes
  POST  /user/{id}/photo
"""

from __future__ import annotations

import logging
from typing import Optional

from spacebook.api.result import NOT_AUTHORISED, SERVER_ERROR, Outcome, Result
from spacebook.api.transport import Transport
from spacebook.content.models import CreatedId, Credentials, Registration, Session, User

logger = logging.getLogger(__name__)

LOGIN = {
    200: Outcome(True, "successful login.", parse=True),
    400: Outcome(False, "invalid email or password."),
    500: SERVER_ERROR,
}

SIGNUP = {
    201: Outcome(True, "successful signup.", parse=True),
    400: Outcome(False, "invalid registration details."),
    500: SERVER_ERROR,
}

LOGOUT = {
    200: Outcome(True, "successful logout."),
    401: NOT_AUTHORISED,
    500: SERVER_ERROR,
}

GET_USER = {
    200: Outcome(True, "got user data.", parse=True),
    401: NOT_AUTHORISED,
    404: Outcome(False, "no user data found."),
    500: SERVER_ERROR,
}

UPDATE_USER = {
    200: Outcome(True, "updated user."),
    400: Outcome(False, "invalid data to update user."),
    401: NOT_AUTHORISED,
    403: Outcome(False, "only able to update your own profile."),
    404: Outcome(False, "no user data found."),
    500: SERVER_ERROR,
}

GET_PHOTO = {
    200: Outcome(True, "got user profile picture."),
    401: NOT_AUTHORISED,
    404: Outcome(False, "no user / profile picture found."),
    500: SERVER_ERROR,
}

UPLOAD_PHOTO = {
    200: Outcome(True, "uploaded profile picture."),
    400: Outcome(False, "invalid data to upload profile picture."),
    401: NOT_AUTHORISED,
    404: Outcome(False, "no user / profile picture found."),
    500: SERVER_ERROR,
}


class UsersAPI:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def login(self, email: str, password: str) -> Result[Credentials]:
        result = await self._transport.request(
            "POST",
            "login",
            json={"email": email, "password": password},
            outcomes=LOGIN,
            parse=Credentials.model_validate,
        )
        if result.ok:
            logger.info("Logged in as user %s", result.body.user_id)
        return result

    async def signup(self, registration: Registration) -> Result[CreatedId]:
        """Create an account from a completed signup wizard."""
        return await self._transport.request(
            "POST",
            "user",
            json=registration.to_payload(),
            outcomes=SIGNUP,
            parse=CreatedId.model_validate,
        )

    async def logout(self, session: Session) -> Result[None]:
        return await self._transport.request(
            "POST", "logout", session=session, outcomes=LOGOUT
        )

    async def get_user(self, session: Session, user_id: int) -> Result[User]:
        return await self._transport.request(
            "GET",
            f"user/{user_id}",
            session=session,
            outcomes=GET_USER,
            parse=User.model_validate,
        )

    async def update_user(
        self,
        session: Session,
        user_id: int,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Result[None]:
        """PATCH only the fields that were given."""
        payload = {
            key: value
            for key, value in (
                ("first_name", first_name),
                ("last_name", last_name),
                ("email", email),
                ("password", password),
            )
            if value is not None
        }
        return await self._transport.request(
            "PATCH",
            f"user/{user_id}",
            session=session,
            json=payload,
            outcomes=UPDATE_USER,
        )

    async def get_profile_photo(self, session: Session, user_id: int) -> Result[bytes]:
        return await self._transport.request(
            "GET",
            f"user/{user_id}/photo",
            session=session,
            outcomes=GET_PHOTO,
            raw=True,
        )

    async def upload_profile_photo(
        self,
        session: Session,
        user_id: int,
        photo: bytes,
        content_type: str = "image/png",
    ) -> Result[None]:
        return await self._transport.request(
            "POST",
            f"user/{user_id}/photo",
            session=session,
            content=photo,
            content_type=content_type,
            outcomes=UPLOAD_PHOTO,
        )
