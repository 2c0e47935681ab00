"""Tests for profile and link synchronization against the document store."""

from __future__ import annotations

import pytest

from applydesk.errors import RemoteError, ValidationError
from applydesk.models import Identity
from applydesk.state.profile_document import ProfilePath
from applydesk.state.profile_schema import CANONICAL_PROFILE, Section
from applydesk.state.synchronizer import ResourceSynchronizer
from applydesk.utils.lifecycle import Mount

pytestmark = pytest.mark.asyncio

U1 = Identity("user-1", "one@example.com")
U2 = Identity("user-2", "two@example.com")


def make_sync(backend, identity=U1, mount=None):
    return ResourceSynchronizer(backend.documents, backend.blobs, identity, mount)


async def test_missing_profile_loads_defaults(backend):
    sync = make_sync(backend)

    document = await sync.load_profile()

    assert document.to_dict() == CANONICAL_PROFILE
    assert sync.profile_exists is False
    assert sync.profile == document


async def test_partial_stored_profile_is_back_filled(backend, mongo_db):
    mongo_db.user_profiles.insert_one({"user_id": U1.id, "my_information": {"city": "Lisbon"}})
    sync = make_sync(backend)

    document = await sync.load_profile()

    assert sync.profile_exists is True
    assert document.get(ProfilePath(Section.MY_INFORMATION, "city")) == "Lisbon"
    assert document.section(Section.SELF_IDENTITY) == CANONICAL_PROFILE["self_identity"]


async def test_save_profile_upserts_one_row_per_identity(backend, mongo_db):
    sync = make_sync(backend)
    await sync.load_profile()

    sync.update_profile_field(ProfilePath(Section.MY_INFORMATION, "first_name"), "Ada")
    await sync.save_profile()
    sync.update_profile_field(ProfilePath(Section.MY_INFORMATION, "first_name"), "Grace")
    saved = await sync.save_profile()

    assert mongo_db.user_profiles.count_documents({"user_id": U1.id}) == 1
    assert saved.get(ProfilePath(Section.MY_INFORMATION, "first_name")) == "Grace"
    assert sync.profile_exists is True


async def test_edits_stay_local_until_saved(backend, mongo_db):
    sync = make_sync(backend)
    await sync.ensure_profile()

    sync.add_profile_item(Section.MY_EXPERIENCE, "skills", {"skill_name": "SQL"})
    sync.remove_profile_item(Section.MY_EXPERIENCE, "skills", 0)

    assert mongo_db.user_profiles.count_documents({}) == 0
    assert sync.profile.get(ProfilePath(Section.MY_EXPERIENCE, "skills")) == [
        {"skill_name": "Skill 2"},
        {"skill_name": "SQL"},
    ]


async def test_editing_before_load_is_rejected(backend):
    with pytest.raises(ValidationError):
        make_sync(backend).update_profile_field(ProfilePath(Section.SELF_IDENTITY, "name"), "Ada")


async def test_failed_save_keeps_working_copy(backend, monkeypatch):
    sync = make_sync(backend)
    await sync.load_profile()
    edited = sync.update_profile_field(ProfilePath(Section.SELF_IDENTITY, "name"), "Ada")

    async def failing_upsert(*args, **kwargs):
        raise RemoteError("connection reset")

    monkeypatch.setattr(backend.documents, "upsert", failing_upsert)

    with pytest.raises(RemoteError):
        await sync.save_profile()
    assert sync.profile == edited
    assert sync.profile_exists is False


async def test_create_record_defaults_title_to_url(backend, mongo_db):
    sync = make_sync(backend)

    record = await sync.create_record("  https://x.test/job  ", title="")

    assert record.url == "https://x.test/job"
    assert record.title == "https://x.test/job"
    assert record.application_status is None
    assert record.category == "job_application"
    assert record.tags == ("job", "application")
    stored = mongo_db.user_links.find_one({"id": record.id})
    assert stored["title"] == "https://x.test/job"
    assert stored["application_status"] is None
    assert sync.records == (record,)


async def test_blank_url_is_rejected_locally(backend, document_calls):
    sync = make_sync(backend)

    with pytest.raises(ValidationError) as excinfo:
        await sync.create_record("   ")

    assert excinfo.value.reason == "empty_url"
    assert document_calls == []


async def test_records_load_newest_first(backend):
    sync = make_sync(backend)
    first = await sync.create_record("https://x.test/1")
    second = await sync.create_record("https://x.test/2")
    await make_sync(backend, U2).create_record("https://x.test/other")

    records = await sync.load_records()

    assert [record.id for record in records] == [second.id, first.id]


async def test_delete_requires_ownership(backend, mongo_db):
    owner = make_sync(backend, U1)
    record = await owner.create_record("https://x.test/job")
    intruder = make_sync(backend, U2)

    assert await intruder.delete_record(record.id) is False
    assert mongo_db.user_links.count_documents({"id": record.id}) == 1

    assert await owner.delete_record(record.id) is True
    assert mongo_db.user_links.count_documents({"id": record.id}) == 0
    assert owner.records == ()


async def test_failed_reload_keeps_previous_cache(backend, monkeypatch):
    sync = make_sync(backend)
    await sync.create_record("https://x.test/1")
    cached = sync.records

    async def failing_select(*args, **kwargs):
        raise RemoteError("timed out")

    monkeypatch.setattr(backend.documents, "select", failing_select)

    with pytest.raises(RemoteError):
        await sync.create_record("https://x.test/2")
    assert sync.records == cached


async def test_unmounted_workspace_ignores_late_results(backend):
    mount = Mount()
    sync = make_sync(backend, mount=mount)
    await sync.create_record("https://x.test/1")
    cached = sync.records

    mount.unmount()
    await make_sync(backend).create_record("https://x.test/2")
    records = await sync.load_records()

    assert len(records) == 2
    assert sync.records == cached


async def test_upload_resume_updates_working_copy(backend, mongo_db):
    sync = make_sync(backend)

    document = await sync.upload_resume("cv.pdf", b"%PDF-1.4", "application/pdf")

    resume = document.get(ProfilePath(Section.MY_EXPERIENCE, "resume"))
    assert resume["filename"] == "cv.pdf"
    assert resume["path"].startswith(f"resumes/{U1.id}_resume_")
    assert resume["path"].endswith(".pdf")
    assert resume["file_url"] == backend.blobs.get_public_url("user-files", resume["path"])
    assert mongo_db.storage_objects.count_documents({"path": resume["path"]}) == 1
    assert mongo_db.user_profiles.count_documents({}) == 0


async def test_document_store_rejects_unsupported_filters(backend):
    with pytest.raises(RemoteError):
        await backend.documents.select("user_links", {"url": "https://x.test"})
    with pytest.raises(RemoteError):
        await backend.documents.delete("user_links", {})
