"""Backend collaborator: auth, document store and blob store over MongoDB."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pymongo.database import Database

from applydesk.config import Settings

from .auth_service import AuthService
from .document_service import DocumentStore, Ordering
from .storage_service import BlobStore


@dataclass
class Backend:
    """One backend client handle; constructed explicitly and passed around."""

    auth: AuthService
    documents: DocumentStore
    blobs: BlobStore

    @classmethod
    def from_database(
        cls,
        db: Database,
        settings: Settings,
        credential: Optional[str] = None,
    ) -> "Backend":
        return cls(
            auth=AuthService(db, settings.session_ttl_seconds, credential=credential),
            documents=DocumentStore(db),
            blobs=BlobStore(db, settings.public_storage_url),
        )


__all__ = [
    "AuthService",
    "Backend",
    "BlobStore",
    "DocumentStore",
    "Ordering",
]
