"""CRUD facade over the remote store for one identity's profile and links.

Owns the profile working copy and the tracked-record cache. Every write is
followed by a full reload of what it touched; if that reload fails the
previous cache stays in place and the error propagates.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from applydesk.config import RESUME_BUCKET
from applydesk.database import LINKS, PROFILES
from applydesk.errors import NotFoundError, ValidationError
from applydesk.models import JOB_LINK_CATEGORY, JOB_LINK_TAGS, Identity, TrackedRecord
from applydesk.services.document_service import DocumentStore, Ordering
from applydesk.services.storage_service import BlobStore
from applydesk.state.profile_document import ProfileDocument, ProfilePath, SectionLike
from applydesk.state.profile_schema import Section
from applydesk.utils.clock import now_millis, utc_now_iso
from applydesk.utils.lifecycle import Mount

logger = logging.getLogger(__name__)

NEWEST_FIRST = Ordering("created_at", descending=True)


class ResourceSynchronizer:
    def __init__(
        self,
        documents: DocumentStore,
        blobs: BlobStore,
        identity: Identity,
        mount: Optional[Mount] = None,
    ) -> None:
        self.identity = identity
        self._documents = documents
        self._blobs = blobs
        self._mount = mount or Mount(f"workspace {identity.id}")
        self._profile: Optional[ProfileDocument] = None
        self._profile_exists = False
        self._records: Tuple[TrackedRecord, ...] = ()
        self._records_loaded = False

    # ------------------------------------------------------------------
    # Read-only views of the caches
    # ------------------------------------------------------------------

    @property
    def profile(self) -> Optional[ProfileDocument]:
        return self._profile

    @property
    def profile_loaded(self) -> bool:
        return self._profile is not None

    @property
    def profile_exists(self) -> bool:
        """True once a persisted profile row is known to exist."""
        return self._profile_exists

    @property
    def records(self) -> Tuple[TrackedRecord, ...]:
        return self._records

    @property
    def records_loaded(self) -> bool:
        return self._records_loaded

    def find_record(self, record_id: str) -> Optional[TrackedRecord]:
        return next((record for record in self._records if record.id == record_id), None)

    @property
    def _owner(self) -> Dict[str, str]:
        return {"user_id": self.identity.id}

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def load_profile(self) -> ProfileDocument:
        """Fetch the owner's profile; a missing row yields the canonical defaults."""
        try:
            document = await self._fetch_profile()
            exists = True
        except NotFoundError:
            logger.info("No stored profile for %s, using defaults", self.identity.id)
            document, exists = ProfileDocument.default(), False

        if self._mount.mounted:
            self._profile = document
            self._profile_exists = exists
        return document

    async def ensure_profile(self) -> ProfileDocument:
        """Load the profile on first access only."""
        if self._profile is None:
            return await self.load_profile()
        return self._profile

    async def save_profile(self, document: Optional[ProfileDocument] = None) -> ProfileDocument:
        """Persist ``document`` (default: the working copy), replacing any previous revision."""
        if document is None:
            document = self._profile
        if document is None:
            raise ValidationError("Load the profile before saving it.", reason="profile_not_loaded")

        row: Dict[str, Any] = {"user_id": self.identity.id, **document.to_dict(), "updated_at": utc_now_iso()}
        await self._documents.upsert(PROFILES, row, conflict_key="user_id")
        logger.info("Saved profile for %s", self.identity.id)
        return await self.load_profile()

    def update_profile_field(self, path: ProfilePath, value: Any) -> ProfileDocument:
        return self._edit(lambda document: document.set(path, value))

    def add_profile_item(
        self,
        section: SectionLike,
        field: str,
        item: Optional[Mapping[str, Any]] = None,
    ) -> ProfileDocument:
        return self._edit(lambda document: document.append_item(section, field, item))

    def remove_profile_item(self, section: SectionLike, field: str, index: int) -> ProfileDocument:
        return self._edit(lambda document: document.remove_item(section, field, index))

    async def upload_resume(
        self,
        filename: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> ProfileDocument:
        """Upload a resume file and point ``my_experience.resume`` at it.

        The profile itself is not saved; that still takes an explicit save.
        """
        if not filename or not data:
            raise ValidationError("Choose a resume file to upload.", reason="empty_file")
        await self.ensure_profile()

        extension = os.path.splitext(filename)[1].lstrip(".") or "bin"
        path = f"resumes/{self.identity.id}_resume_{now_millis()}.{extension}"
        await self._blobs.upload(RESUME_BUCKET, path, data, content_type)
        public_url = self._blobs.get_public_url(RESUME_BUCKET, path)

        if not self._mount.mounted:
            return self._profile
        resume = {"path": path, "filename": filename, "file_url": public_url}
        return self.update_profile_field(ProfilePath(Section.MY_EXPERIENCE, "resume"), resume)

    def _edit(self, change: Callable[[ProfileDocument], ProfileDocument]) -> ProfileDocument:
        if self._profile is None:
            raise ValidationError("Load the profile before editing it.", reason="profile_not_loaded")
        self._profile = change(self._profile)
        return self._profile

    async def _fetch_profile(self) -> ProfileDocument:
        rows = await self._documents.select(PROFILES, self._owner)
        if not rows:
            raise NotFoundError("No profile stored yet.", reason="profile_missing")
        return ProfileDocument.from_persisted(rows[0])

    # ------------------------------------------------------------------
    # Tracked records
    # ------------------------------------------------------------------

    async def load_records(self) -> Tuple[TrackedRecord, ...]:
        """Fetch the owner's records, newest first."""
        rows = await self._documents.select(LINKS, self._owner, ordering=NEWEST_FIRST)
        records = tuple(TrackedRecord.from_row(row) for row in rows)
        if self._mount.mounted:
            self._records = records
            self._records_loaded = True
        return records

    async def create_record(
        self,
        url: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> TrackedRecord:
        url = (url or "").strip()
        if not url:
            raise ValidationError("Please enter a URL.", reason="empty_url")

        row = {
            "id": str(uuid.uuid4()),
            "user_id": self.identity.id,
            "url": url,
            "title": (title or "").strip() or url,
            "description": (description or "").strip(),
            "category": JOB_LINK_CATEGORY,
            "tags": list(JOB_LINK_TAGS),
            "application_status": None,
            "applied_at": None,
            "created_at": utc_now_iso(),
        }
        stored = await self._documents.insert(LINKS, row)
        await self.load_records()
        return TrackedRecord.from_row(stored)

    async def delete_record(self, record_id: str) -> bool:
        """Delete one of the owner's records; returns whether a row was removed."""
        deleted = await self._documents.delete(LINKS, {"id": record_id, **self._owner})
        if not deleted:
            logger.info("No record %s owned by %s to delete", record_id, self.identity.id)
        await self.load_records()
        return deleted > 0

    async def mark_applied(self, record: TrackedRecord, patch: Dict[str, Any]) -> TrackedRecord:
        """Write the status patch for ``record`` and reload; used by the status machine."""
        if not patch.get("application_status"):
            raise ValueError("A status write must set a non-empty application_status")
        rows = await self._documents.update(LINKS, patch, {"id": record.id, **self._owner})
        if not rows:
            raise NotFoundError("That link no longer exists.", reason="record_missing")
        await self.load_records()
        return TrackedRecord.from_row(rows[0])
