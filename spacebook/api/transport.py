"""
HTTP transport for the Spacebook REST API.

One request in, one ``Result`` out. Status codes are interpreted through a
per-endpoint ``outcomes`` table because the same code means different things
on different routes (403 on ``GET /user/{id}/post`` is "not a friend"; on
``POST …/like`` it is "cannot like this post").

Transport-level failures (DNS, refused connection, timeout) are raised as
``UnreachableError`` and never mapped onto a server answer. No retries happen
here; retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Optional

import httpx

from spacebook.api.result import UNMAPPED_MESSAGE, ErrorKind, Outcome, Result
from spacebook.content.models import Session

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Authorization"


class SpacebookError(Exception):
    """Base class for client errors that are not HTTP outcomes."""


class UnreachableError(SpacebookError):
    """The server could not be reached (DNS, connection refused, timeout)."""


class Transport:
    """
    Async HTTP transport wrapping ``httpx.AsyncClient``.

    Usage::

        async with Transport() as transport:
            result = await transport.request(
                "GET", f"user/{uid}/post", session=session,
                outcomes=GET_POSTS, parse=posts_adapter.validate_python,
            )
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        from config.settings import settings

        self.base_url = base_url or settings.api_base_url
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout if timeout is not None else settings.request_timeout,
        )

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        outcomes: Mapping[int, Outcome],
        session: Optional[Session] = None,
        json: Any = None,
        params: Optional[dict] = None,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None,
        parse: Optional[Callable[[Any], Any]] = None,
        raw: bool = False,
    ) -> Result:
        """
        Perform one request and normalize the response.

        Args:
            outcomes:     status code → Outcome for this endpoint.
            session:      adds the ``X-Authorization`` header when given.
            parse:        converts the decoded JSON success body into the
                          data model (e.g. ``Post.model_validate``).
            raw:          return the response bytes as the success body.

        Raises:
            UnreachableError: on any transport failure, timeouts included.
        """
        headers: dict[str, str] = {}
        if session is not None:
            headers[AUTH_HEADER] = session.session_token
        if content_type:
            headers["Content-Type"] = content_type

        started = time.monotonic()
        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                params=params,
                content=content,
                headers=headers,
            )
        except httpx.TransportError as exc:
            logger.warning("%s %s unreachable: %s", method, path, exc)
            raise UnreachableError(f"unable to reach server ({exc.__class__.__name__}).") from exc

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug("%s %s → %d (%.0f ms)", method, path, response.status_code, elapsed_ms)
        return self._normalize(response, outcomes, parse=parse, raw=raw)

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize(
        response: httpx.Response,
        outcomes: Mapping[int, Outcome],
        *,
        parse: Optional[Callable[[Any], Any]] = None,
        raw: bool = False,
    ) -> Result:
        status = response.status_code
        outcome = outcomes.get(status)

        if outcome is None:
            return Result.failure(UNMAPPED_MESSAGE, ErrorKind.UNKNOWN, status=status)

        if not outcome.ok:
            return Result.failure(
                outcome.message,
                ErrorKind.from_status(status, has_body=outcome.body is not None),
                body=outcome.body,
                status=status,
            )

        body: Any = None
        if raw:
            body = response.content
        elif outcome.parse:
            try:
                data = response.json()
                body = parse(data) if parse else data
            except ValueError as exc:
                # Covers JSON decode errors and pydantic ValidationError
                logger.warning("Malformed %d body from %s: %s", status, response.url, exc)
                return Result.failure(
                    "received an unexpected response from the server.",
                    ErrorKind.SERVER,
                    status=status,
                )
        return Result.success(outcome.message, body, status=status)

    # ------------------------------------------------------------------
    # Context manager / cleanup
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()
