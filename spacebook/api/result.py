"""
Uniform outcome of one API call.

Every endpoint returns exactly one ``Result``. Expected HTTP failures
(400/401/403/404/500) are values, not exceptions; only a transport failure
raises (see ``UnreachableError`` in ``spacebook.api.transport``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    AUTHORIZATION = "authorization"  # 401: missing or expired token
    PERMISSION = "permission"        # 403: disallowed by business rules
    NOT_FOUND = "not_found"          # 404
    CONFLICT = "conflict"            # 400 carrying a disambiguation flag
    INVALID = "invalid"              # 400 without a flag
    SERVER = "server"                # 500
    UNKNOWN = "unknown"              # anything not mapped for the endpoint

    @classmethod
    def from_status(cls, status: int, has_body: bool = False) -> "ErrorKind":
        if status == 400:
            return cls.CONFLICT if has_body else cls.INVALID
        return {
            401: cls.AUTHORIZATION,
            403: cls.PERMISSION,
            404: cls.NOT_FOUND,
            500: cls.SERVER,
        }.get(status, cls.UNKNOWN)


@dataclass(frozen=True)
class Result(Generic[T]):
    """``ok`` ⇒ ``body`` has the endpoint's documented shape."""

    ok: bool
    message: str
    body: Optional[T] = None
    status: Optional[int] = None
    error: Optional[ErrorKind] = None

    @property
    def needs_login(self) -> bool:
        return self.error is ErrorKind.AUTHORIZATION

    @classmethod
    def success(cls, message: str, body: Any = None, status: Optional[int] = None) -> "Result":
        return cls(ok=True, message=message, body=body, status=status)

    @classmethod
    def failure(
        cls,
        message: str,
        error: ErrorKind = ErrorKind.UNKNOWN,
        body: Any = None,
        status: Optional[int] = None,
    ) -> "Result":
        return cls(ok=False, message=message, body=body, status=status, error=error)


@dataclass(frozen=True)
class Outcome:
    """How one status code of one endpoint maps onto a Result."""

    ok: bool
    message: str
    body: Any = None      # fixed failure body, e.g. LikeConflict(...)
    parse: bool = False   # success body is decoded from the response


# Messages shared by most endpoint tables
NOT_AUTHORISED = Outcome(False, "not authorised to perform this action.")
SERVER_ERROR = Outcome(False, "server error, try again later.")
UNMAPPED_MESSAGE = "something went wrong."
