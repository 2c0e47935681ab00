"""Value types passed between the backend services and the state layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

# Fixed classification for job-application links.
JOB_LINK_CATEGORY = "job_application"
JOB_LINK_TAGS: Tuple[str, ...] = ("job", "application")

APPLIED = "applied"


@dataclass(frozen=True)
class Identity:
    id: str
    email: str


@dataclass(frozen=True)
class Session:
    identity: Identity
    expires_at: int
    raw_credential: str

    def is_expired(self, now: int) -> bool:
        return self.expires_at <= now

    def to_public(self, include_token: bool = False) -> Dict[str, Any]:
        """Serialize for clients; the raw credential is only sent back on sign-in."""
        data: Dict[str, Any] = {
            "user": {"id": self.identity.id, "email": self.identity.email},
            "expiresAt": self.expires_at * 1000,
        }
        if include_token:
            data["token"] = self.raw_credential
        return data


@dataclass(frozen=True)
class TrackedRecord:
    id: str
    owner_id: str
    url: str
    title: str
    description: str = ""
    category: str = JOB_LINK_CATEGORY
    tags: Tuple[str, ...] = JOB_LINK_TAGS
    application_status: Optional[str] = None
    applied_at: Optional[str] = None
    created_at: Optional[str] = None
    notes: Optional[str] = None
    profile_snapshot: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TrackedRecord":
        return cls(
            id=row["id"],
            owner_id=row["user_id"],
            url=row["url"],
            title=row.get("title") or row["url"],
            description=row.get("description") or "",
            category=row.get("category") or JOB_LINK_CATEGORY,
            tags=tuple(row.get("tags") or ()),
            application_status=row.get("application_status"),
            applied_at=row.get("applied_at"),
            created_at=row.get("created_at"),
            notes=row.get("notes"),
            profile_snapshot=row.get("profile_snapshot"),
        )

    @property
    def is_applied(self) -> bool:
        return self.application_status is not None

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags),
            "applicationStatus": self.application_status,
            "appliedAt": self.applied_at,
            "createdAt": self.created_at,
            "notes": self.notes,
        }
