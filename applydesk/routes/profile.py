"""/api/profile routes for reading, editing and saving the profile document."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from applydesk.state.profile_document import ProfileDocument, ProfilePath
from applydesk.state.synchronizer import ResourceSynchronizer
from applydesk.utils.auth import require_session

bp = Blueprint("profile", __name__, url_prefix="/api/profile")


def _profile_response(sync: ResourceSynchronizer, document: ProfileDocument, status: int = 200, **extra: Any):
    return jsonify(profile=document.to_dict(), exists=sync.profile_exists, **extra), status


@bp.get("")
async def get_profile():
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    sync = workspace.synchronizer
    document = await sync.ensure_profile()
    return _profile_response(sync, document)


@bp.patch("/field")
async def update_field():
    """Edit one addressed value in the working copy; nothing is persisted."""
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if "value" not in payload:
        return jsonify(error="A value is required."), 400

    path = ProfilePath(
        payload.get("section", ""),
        payload.get("field", ""),
        payload.get("index"),
        payload.get("subfield"),
    )
    sync = workspace.synchronizer
    await sync.ensure_profile()
    document = sync.update_profile_field(path, payload["value"])
    return _profile_response(sync, document)


@bp.post("/items")
async def add_item():
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    sync = workspace.synchronizer
    await sync.ensure_profile()
    document = sync.add_profile_item(
        payload.get("section", ""),
        payload.get("field", ""),
        payload.get("item"),
    )
    return _profile_response(sync, document, 201)


@bp.delete("/items/<section>/<field>/<int:index>")
async def remove_item(section: str, field: str, index: int):
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    sync = workspace.synchronizer
    await sync.ensure_profile()
    document = sync.remove_profile_item(section, field, index)
    return _profile_response(sync, document)


@bp.post("/save")
async def save_profile():
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    sync = workspace.synchronizer
    await sync.ensure_profile()
    document = await sync.save_profile()
    return _profile_response(sync, document, message="Profile saved successfully!")


@bp.post("/resume")
async def upload_resume():
    """Store a resume file and reference it from the working copy."""
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    storage = request.files.get("resume")
    if storage is None or storage.filename == "":
        return jsonify(error="No file uploaded."), 400

    sync = workspace.synchronizer
    document = await sync.upload_resume(
        storage.filename,
        storage.read(),
        storage.mimetype or "application/octet-stream",
    )
    return _profile_response(sync, document, message="Resume uploaded successfully!")
