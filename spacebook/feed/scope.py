"""
Lifetime guard for results destined for a view.

A screen opens a ``ViewScope`` while it is shown and closes it when the user
navigates away. Requests already in flight keep running (a half-finished like
toggle must still complete its fallback), but their results are dropped
instead of being applied to a view that no longer exists.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ViewScope:
    def __init__(self, name: str = "view") -> None:
        self.name = name
        self._mounted = True
        self.discarded = 0

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def run(
        self,
        awaitable: Awaitable[T],
        apply: Optional[Callable[[T], None]] = None,
    ) -> Optional[T]:
        """
        Await ``awaitable`` and hand its value to ``apply`` if still mounted.

        Returns the value, or None when the scope closed in the meantime.
        Errors raised after the scope closed are logged and dropped; while
        mounted they propagate.
        """
        try:
            value = await awaitable
        except Exception:
            if self._mounted:
                raise
            logger.debug("%s: dropped error from request finished after close", self.name, exc_info=True)
            self.discarded += 1
            return None

        if not self._mounted:
            logger.debug("%s: discarded result of request finished after close", self.name)
            self.discarded += 1
            return None
        if apply is not None:
            apply(value)
        return value

    def close(self) -> None:
        self._mounted = False

    def __enter__(self) -> "ViewScope":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
