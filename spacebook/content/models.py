"""
Client data models.

Wire payloads use snake_case (and, for some endpoints, the server's own
``user_givenname`` / ``numLikes`` naming). Each model declares the accepted
wire names as validation aliases so the transport can hand raw JSON straight
to ``model_validate``.

Local-only models (Draft, ScheduleEntry) are persisted as JSON lists in the
key/value store.
"""

from __future__ import annotations

import datetime as dt
import time
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def now_ms() -> int:
    """Current unix time in milliseconds."""
    return int(time.time() * 1000)


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class Session(_Model):
    """Signed-in user. Passed explicitly into every authenticated call."""

    user_id: int
    session_token: str = Field(repr=False)


class Credentials(_Model):
    """Body of a successful login."""

    user_id: int = Field(validation_alias=AliasChoices("id", "user_id"))
    token: str

    def to_session(self) -> Session:
        return Session(user_id=self.user_id, session_token=self.token)


class CreatedId(_Model):
    """Body of a 201 response that only echoes the new resource id."""

    id: int


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class Author(_Model):
    user_id: int = Field(validation_alias=AliasChoices("user_id", "userId"))
    first_name: str = Field(validation_alias=AliasChoices("first_name", "firstName"))
    last_name: str = Field(validation_alias=AliasChoices("last_name", "lastName"))
    email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class User(_Model):
    """Full profile as returned by ``GET /user/{id}``."""

    user_id: int = Field(validation_alias=AliasChoices("user_id", "id"))
    first_name: str
    last_name: str
    email: str = ""
    friend_count: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UserSummary(_Model):
    """One entry of the friends, friend-request or search result lists."""

    user_id: int
    first_name: str = Field(
        validation_alias=AliasChoices("first_name", "user_givenname")
    )
    last_name: str = Field(
        validation_alias=AliasChoices("last_name", "user_familyname")
    )
    email: str = Field(default="", validation_alias=AliasChoices("email", "user_email"))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class Post(_Model):
    post_id: int
    text: str
    timestamp: int  # unix ms
    author: Author
    num_likes: int = Field(
        default=0, validation_alias=AliasChoices("numLikes", "num_likes")
    )

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v: object) -> object:
        # The server sends an ISO 8601 string; tests and local data use ints.
        if isinstance(v, str) and not v.isdigit():
            parsed = dt.datetime.fromisoformat(v.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=dt.timezone.utc)
            return int(parsed.timestamp() * 1000)
        return v


class LikeConflict(_Model):
    """Disambiguation body carried by a 400 from the like endpoints."""

    is_already_liked: bool = False
    is_already_unliked: bool = False


# ---------------------------------------------------------------------------
# Derived state
# ---------------------------------------------------------------------------


class FriendshipState(_Model):
    is_self: bool
    is_friend: bool

    @property
    def can_view_posts(self) -> bool:
        return self.is_self or self.is_friend


class PostPermissions(_Model):
    can_like: bool
    can_edit: bool
    can_delete: bool


# ---------------------------------------------------------------------------
# Local drafts & schedule
# ---------------------------------------------------------------------------


class Draft(_Model):
    id: int  # creation time, unix ms
    text: str


class ScheduleEntry(_Model):
    draft: Draft
    timestamp: int  # target publish time, unix ms

    def is_due(self, now: Optional[int] = None) -> bool:
        """True once the target publish time has arrived."""
        return (now if now is not None else now_ms()) >= self.timestamp

    @property
    def publish_at(self) -> dt.datetime:
        return dt.datetime.fromtimestamp(self.timestamp / 1000, tz=dt.timezone.utc)


# ---------------------------------------------------------------------------
# Signup wizard
# ---------------------------------------------------------------------------


class IncompleteRegistrationError(ValueError):
    """Raised when an unfinished Registration is submitted."""


class Registration(_Model):
    """
    Signup details collected across the two wizard steps.

    Each step returns a new instance; nothing is mutated in place::

        reg = Registration().with_credentials("a@b.com", "hunter22")
        reg = reg.with_details("Ada", "Lovelace")
        await users.signup(reg)
    """

    email: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def with_credentials(self, email: str, password: str) -> "Registration":
        return self.model_copy(update={"email": email.strip(), "password": password})

    def with_details(self, first_name: str, last_name: str) -> "Registration":
        return self.model_copy(
            update={"first_name": first_name.strip(), "last_name": last_name.strip()}
        )

    @property
    def is_complete(self) -> bool:
        return all((self.email, self.password, self.first_name, self.last_name))

    def to_payload(self) -> dict:
        if not self.is_complete:
            missing = [
                name
                for name in ("email", "password", "first_name", "last_name")
                if not getattr(self, name)
            ]
            raise IncompleteRegistrationError(
                f"Registration is missing: {', '.join(missing)}"
            )
        return {
            "email": self.email,
            "password": self.password,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }
