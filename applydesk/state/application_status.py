"""One-way "apply" transition for tracked job links."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Set

from applydesk.errors import NotFoundError, ValidationError
from applydesk.models import APPLIED, TrackedRecord
from applydesk.state.synchronizer import ResourceSynchronizer
from applydesk.utils.clock import utc_now_iso

logger = logging.getLogger(__name__)


class ApplyState(str, Enum):
    UNAPPLIED = "unapplied"
    APPLYING = "applying"
    APPLIED = "applied"


def application_note(record: TrackedRecord) -> str:
    return f"Applied to {record.title} ({record.url}) using the saved profile."


class ApplicationStatusMachine:
    """unapplied -> applying -> applied, rolling back to unapplied on failure.

    The in-flight set is the per-record guard flag: at most one apply runs
    per record, and it is set before the first suspend point so a second
    trigger in the same tick is already refused.
    """

    def __init__(self, synchronizer: ResourceSynchronizer) -> None:
        self._sync = synchronizer
        self._in_flight: Set[str] = set()

    def state_of(self, record_id: str) -> ApplyState:
        if record_id in self._in_flight:
            return ApplyState.APPLYING
        record = self._sync.find_record(record_id)
        if record is not None and record.is_applied:
            return ApplyState.APPLIED
        return ApplyState.UNAPPLIED

    def is_applying(self, record_id: str) -> bool:
        return record_id in self._in_flight

    async def apply(self, record_id: str) -> TrackedRecord:
        record = self._sync.find_record(record_id)
        if record is None:
            raise NotFoundError("That link is not in your list.", reason="record_missing")
        if record.is_applied:
            raise ValidationError("You have already applied to this job.", reason="already_applied")
        if record_id in self._in_flight:
            raise ValidationError("An application for this job is already being submitted.", reason="apply_in_progress")

        profile = self._sync.profile
        if profile is None or not self._sync.profile_exists:
            # Judged from the cache alone; callers load the profile first.
            raise ValidationError(
                "Please complete and save your profile before applying.",
                reason="profile_missing",
            )

        self._in_flight.add(record_id)
        try:
            patch = {
                "application_status": APPLIED,
                "applied_at": utc_now_iso(),
                "profile_snapshot": profile.to_dict(),
                "notes": application_note(record),
            }
            updated = await self._sync.mark_applied(record, patch)
        finally:
            self._in_flight.discard(record_id)

        logger.info("Applied to record %s for %s", record_id, self._sync.identity.id)
        return updated
