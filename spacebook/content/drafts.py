"""
Local drafts and publishing schedule.

Two JSON-encoded lists in the key/value store:

  drafts       [{"id": 1718000000000, "text": "..."}]
  in_schedule  [{"draft": {"id": ..., "text": "..."}, "timestamp": 1718000600000}]

Lifecycle:
  save_draft → drafts
  take_draft → removed from drafts, text handed to the composer
  schedule_draft → moved from drafts to in_schedule
  unschedule → removed from in_schedule (published or cancelled)

A third key, ``publishing`` ({draft_id: claimed_at_ms}), marks entries a
publisher run is posting right now so an overlapping run skips them.

Every mutation is a read-modify-write inside one store transaction, so the
background publisher and the foreground never overwrite each other's edits.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from spacebook.content.models import Draft, ScheduleEntry, now_ms
from spacebook.content.storage import KeyValueStore

logger = logging.getLogger(__name__)

DRAFTS_KEY = "drafts"
SCHEDULE_KEY = "in_schedule"
PUBLISHING_KEY = "publishing"

# A claim older than this belongs to a run that died mid-publish
CLAIM_LEASE_MS = 10 * 60 * 1000

_drafts_adapter = TypeAdapter(list[Draft])
_schedule_adapter = TypeAdapter(list[ScheduleEntry])
_claims_adapter = TypeAdapter(dict[int, int])


class DraftStore:
    """CRUD over unsent drafts and scheduled publications."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def list_drafts(self) -> list[Draft]:
        return self._read(DRAFTS_KEY, _drafts_adapter)

    def get_draft(self, draft_id: int) -> Optional[Draft]:
        return next((d for d in self.list_drafts() if d.id == draft_id), None)

    def save_draft(self, text: str) -> Draft:
        """Append a new draft with a fresh time-based id."""
        with self.store.transaction():
            drafts = self._read(DRAFTS_KEY, _drafts_adapter)
            schedule = self._read(SCHEDULE_KEY, _schedule_adapter)
            draft = Draft(id=self._next_id(drafts, schedule), text=text)
            drafts.append(draft)
            self._write(DRAFTS_KEY, _drafts_adapter, drafts)
        logger.info("Saved draft %s", draft.id)
        return draft

    def update_draft(self, draft_id: int, text: str) -> Optional[Draft]:
        """Replace a draft's text in place. Returns None if it no longer exists."""
        with self.store.transaction():
            drafts = self._read(DRAFTS_KEY, _drafts_adapter)
            for i, draft in enumerate(drafts):
                if draft.id == draft_id:
                    drafts[i] = Draft(id=draft_id, text=text)
                    self._write(DRAFTS_KEY, _drafts_adapter, drafts)
                    return drafts[i]
        return None

    def delete_draft(self, draft_id: int) -> bool:
        """Remove a draft. Returns True if it existed."""
        return self._pop_draft(draft_id) is not None

    def take_draft(self, draft_id: int) -> Optional[Draft]:
        """
        Remove a draft and return it, for loading back into the composer.

        The draft is consumed: after this call it exists only in the caller's
        hands, so it cannot come back after a restart.
        """
        draft = self._pop_draft(draft_id)
        if draft is not None:
            logger.info("Draft %s taken into composer", draft_id)
        return draft

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def list_schedule(self) -> list[ScheduleEntry]:
        return self._read(SCHEDULE_KEY, _schedule_adapter)

    def is_scheduled(self, draft_id: int) -> bool:
        return any(e.draft.id == draft_id for e in self.list_schedule())

    def list_due(self, now: Optional[int] = None) -> list[ScheduleEntry]:
        """Scheduled entries whose publish time has arrived, oldest first."""
        now = now if now is not None else now_ms()
        due = [e for e in self.list_schedule() if e.is_due(now)]
        return sorted(due, key=lambda e: e.timestamp)

    def schedule_draft(self, draft: Draft, timestamp: int) -> ScheduleEntry:
        """
        Schedule ``draft`` for publishing at ``timestamp`` (unix ms).

        The draft leaves the drafts list in the same transaction.
        """
        entry = ScheduleEntry(draft=draft, timestamp=timestamp)
        with self.store.transaction():
            drafts = self._read(DRAFTS_KEY, _drafts_adapter)
            remaining = [d for d in drafts if d.id != draft.id]
            if len(remaining) != len(drafts):
                self._write(DRAFTS_KEY, _drafts_adapter, remaining)

            schedule = self._read(SCHEDULE_KEY, _schedule_adapter)
            schedule = [e for e in schedule if e.draft.id != draft.id]
            schedule.append(entry)
            self._write(SCHEDULE_KEY, _schedule_adapter, schedule)
        logger.info("Scheduled draft %s for %s", draft.id, entry.publish_at.isoformat())
        return entry

    def unschedule(self, draft_id: int) -> bool:
        """Remove a schedule entry by its draft id. Returns True if it existed."""
        with self.store.transaction():
            schedule = self._read(SCHEDULE_KEY, _schedule_adapter)
            remaining = [e for e in schedule if e.draft.id != draft_id]
            if len(remaining) == len(schedule):
                return False
            self._write(SCHEDULE_KEY, _schedule_adapter, remaining)
        return True

    # ------------------------------------------------------------------
    # Publishing claims
    # ------------------------------------------------------------------

    def claim(self, draft_id: int, now: Optional[int] = None) -> Optional[ScheduleEntry]:
        """
        Reserve a scheduled entry for one publisher run.

        Returns the entry, or None if it is no longer scheduled or another run
        holds a claim younger than ``CLAIM_LEASE_MS``. The entry stays in
        ``in_schedule`` until ``complete_claim``.
        """
        now = now if now is not None else now_ms()
        with self.store.transaction():
            schedule = self._read(SCHEDULE_KEY, _schedule_adapter)
            entry = next((e for e in schedule if e.draft.id == draft_id), None)
            claims = self._read_claims()
            # Drop claims whose entry was published or cancelled
            claims = {k: v for k, v in claims.items() if any(e.draft.id == k for e in schedule)}

            held_since = claims.get(draft_id)
            if entry is None or (held_since is not None and now - held_since < CLAIM_LEASE_MS):
                self._write_claims(claims)
                return None

            claims[draft_id] = now
            self._write_claims(claims)
        return entry

    def complete_claim(self, draft_id: int) -> None:
        """The claimed entry was published: remove it and its claim together."""
        with self.store.transaction():
            self.unschedule(draft_id)
            self.release_claim(draft_id)

    def release_claim(self, draft_id: int) -> None:
        """Give a claimed entry back for the next run."""
        with self.store.transaction():
            claims = self._read_claims()
            if claims.pop(draft_id, None) is not None:
                self._write_claims(claims)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _pop_draft(self, draft_id: int) -> Optional[Draft]:
        with self.store.transaction():
            drafts = self._read(DRAFTS_KEY, _drafts_adapter)
            found = next((d for d in drafts if d.id == draft_id), None)
            if found is not None:
                self._write(
                    DRAFTS_KEY, _drafts_adapter, [d for d in drafts if d.id != draft_id]
                )
        return found

    @staticmethod
    def _next_id(drafts: list[Draft], schedule: list[ScheduleEntry]) -> int:
        # Never hand out an id still referenced by a draft or a schedule entry
        used = [d.id for d in drafts] + [e.draft.id for e in schedule]
        return max([now_ms(), *(i + 1 for i in used)])

    def _read(self, key: str, adapter: TypeAdapter) -> list:
        raw = self.store.get(key)
        if not raw:
            return []
        try:
            return adapter.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Stored %r is unreadable, treating it as empty: %s", key, exc)
            return []

    def _read_claims(self) -> dict[int, int]:
        raw = self.store.get(PUBLISHING_KEY)
        if not raw:
            return {}
        try:
            return _claims_adapter.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Stored %r is unreadable, treating it as empty: %s", PUBLISHING_KEY, exc)
            return {}

    def _write_claims(self, claims: dict[int, int]) -> None:
        if claims:
            self.store.set(PUBLISHING_KEY, _claims_adapter.dump_json(claims).decode())
        else:
            self.store.remove(PUBLISHING_KEY)

    def _write(self, key: str, adapter: TypeAdapter, items: list) -> None:
        self.store.set(key, adapter.dump_json(items).decode())
