"""
Background publisher for scheduled drafts.

Runs in its own process (``spacebook publish run-due`` from cron, or the
``publish worker`` loop) and shares nothing in memory with the foreground.
Everything it needs comes from the persistent store:

  user_id, session_token  → who to post as
  in_schedule             → what to post and when
  publishing              → entries a run is posting right now

Each invocation publishes every entry whose time has arrived, through the
same ``PostEngine.create_post`` the foreground uses. A published entry is
removed from the schedule; a failed one stays for the next run. Each entry is
claimed before posting, so overlapping runs (cron next to the worker) never
post it twice. One entry's failure never stops the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from spacebook.api.transport import UnreachableError
from spacebook.content.drafts import DraftStore
from spacebook.content.models import ScheduleEntry, now_ms
from spacebook.content.session import SessionStore
from spacebook.feed.engine import PostEngine

logger = logging.getLogger(__name__)


class FetchResult(str, Enum):
    """Reported to the host so it can adapt how often it invokes us."""

    NEW_DATA = "new_data"   # at least one post published
    NO_DATA = "no_data"     # nothing was due (or nobody is logged in)
    FAILED = "failed"       # entries were due but none could be published


@dataclass
class PublishReport:
    result: FetchResult
    published: list[ScheduleEntry] = field(default_factory=list)
    failed: list[tuple[ScheduleEntry, str]] = field(default_factory=list)


class BackgroundPublisher:
    def __init__(
        self,
        sessions: SessionStore,
        drafts: DraftStore,
        engine: PostEngine,
    ) -> None:
        self._sessions = sessions
        self._drafts = drafts
        self._engine = engine

    async def __call__(self) -> FetchResult:
        return (await self.run_once()).result

    async def run_once(self, now: Optional[int] = None) -> PublishReport:
        """Publish every due schedule entry once."""
        now = now if now is not None else now_ms()

        session = self._sessions.load()
        if session is None:
            logger.debug("No stored session, skipping scheduled publishing")
            return PublishReport(FetchResult.NO_DATA)

        due = self._drafts.list_due(now)
        if not due:
            return PublishReport(FetchResult.NO_DATA)

        report = PublishReport(FetchResult.NO_DATA)
        for entry in due:
            # Claiming also skips entries cancelled since list_due
            claimed = self._drafts.claim(entry.draft.id, now)
            if claimed is None:
                logger.info(
                    "Scheduled draft %s was cancelled or is being published by another run, skipping",
                    entry.draft.id,
                )
                continue
            try:
                result = await self._engine.create_post(session, claimed.draft.text)
            except UnreachableError as exc:
                self._drafts.release_claim(claimed.draft.id)
                logger.warning("Scheduled draft %s not published: %s", claimed.draft.id, exc)
                report.failed.append((claimed, str(exc)))
                continue

            if not result.ok:
                self._drafts.release_claim(claimed.draft.id)
                logger.warning(
                    "Scheduled draft %s not published: %s", claimed.draft.id, result.message
                )
                report.failed.append((claimed, result.message))
                continue

            # Remove by id: the foreground may have edited the list meanwhile
            self._drafts.complete_claim(claimed.draft.id)
            report.published.append(claimed)
            logger.info("Published scheduled draft %s", claimed.draft.id)

        if report.published:
            report.result = FetchResult.NEW_DATA
        elif report.failed:
            report.result = FetchResult.FAILED
        return report
