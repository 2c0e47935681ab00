"""Tests for blob persistence in MongoDB."""

from __future__ import annotations

import pytest

from applydesk.errors import RemoteError


@pytest.mark.asyncio
async def test_upload_download_flow(backend):
    payload = b"Example resume content"

    await backend.blobs.upload("user-files", "resumes/u1_resume_1.pdf", payload, "application/pdf")

    blob = await backend.blobs.download("user-files", "resumes/u1_resume_1.pdf")
    assert blob["data"] == payload
    assert blob["content_type"] == "application/pdf"
    assert blob["filename"] == "u1_resume_1.pdf"
    assert await backend.blobs.download("user-files", "resumes/missing.pdf") is None


@pytest.mark.asyncio
async def test_duplicate_path_is_rejected(backend):
    await backend.blobs.upload("user-files", "resumes/a.pdf", b"one")

    with pytest.raises(RemoteError):
        await backend.blobs.upload("user-files", "resumes/a.pdf", b"two")


def test_public_url(backend):
    assert backend.blobs.get_public_url("user-files", "resumes/a b.pdf") == (
        "http://localhost/storage/user-files/resumes/a%20b.pdf"
    )
