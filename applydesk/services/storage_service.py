"""Service for storing uploaded files (blobs) in MongoDB."""

from __future__ import annotations

import asyncio
import base64
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import quote

from pymongo.database import Database

from applydesk.database import STORAGE_OBJECTS, remote_errors
from applydesk.errors import RemoteError


class BlobStore:
    """Bucket/path keyed file storage with public URLs."""

    def __init__(self, db: Database, public_base_url: str) -> None:
        self._objects = db[STORAGE_OBJECTS]
        self._public_base_url = public_base_url.rstrip("/")

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> None:
        """
        Store ``data`` under ``bucket``/``path``.

        Args:
            bucket: Bucket name, e.g. ``user-files``
            path: Object path inside the bucket
            data: Raw file contents
            content_type: MIME type served back on download

        Raises:
            RemoteError: if an object already exists at that path
        """
        await asyncio.to_thread(self._upload, bucket, path, data, content_type)

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self._public_base_url}/{quote(bucket)}/{quote(path)}"

    async def download(self, bucket: str, path: str) -> Optional[Dict[str, Any]]:
        """Return ``{"data", "content_type", "filename"}`` or None when absent."""
        return await asyncio.to_thread(self._download, bucket, path)

    def _upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        with remote_errors("upload"):
            if self._objects.find_one({"bucket": bucket, "path": path}, {"_id": 1}) is not None:
                raise RemoteError("The resource already exists", reason="duplicate_object")
            self._objects.insert_one(
                {
                    "bucket": bucket,
                    "path": path,
                    "filename": path.rsplit("/", 1)[-1],
                    "size": len(data),
                    "content_type": content_type,
                    "contents": base64.b64encode(data).decode("ascii"),
                    "created_at": datetime.utcnow(),
                }
            )

    def _download(self, bucket: str, path: str) -> Optional[Dict[str, Any]]:
        with remote_errors("download"):
            document = self._objects.find_one({"bucket": bucket, "path": path})
        if document is None:
            return None
        return {
            "data": base64.b64decode(document["contents"]),
            "content_type": document.get("content_type") or "application/octet-stream",
            "filename": document.get("filename"),
        }
