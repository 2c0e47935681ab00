"""/api/links routes for tracked job-application links."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from applydesk.models import TrackedRecord
from applydesk.state.context import Workspace
from applydesk.utils.auth import require_session

bp = Blueprint("links", __name__, url_prefix="/api/links")


def _serialize(workspace: Workspace, record: TrackedRecord) -> Dict[str, Any]:
    data = record.to_public()
    data["applyState"] = workspace.applications.state_of(record.id).value
    return data


@bp.get("")
async def list_links():
    """Return the signed-in user's links, newest first."""
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    records = await workspace.synchronizer.load_records()
    return jsonify(links=[_serialize(workspace, record) for record in records]), 200


@bp.post("")
async def create_link():
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    record = await workspace.synchronizer.create_record(
        str(payload.get("url", "")),
        payload.get("title"),
        payload.get("description"),
    )
    return jsonify(link=_serialize(workspace, record)), 201


@bp.delete("/<record_id>")
async def delete_link(record_id: str):
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    deleted = await workspace.synchronizer.delete_record(record_id)
    if not deleted:
        return jsonify(error="Link not found."), 404
    return jsonify(success=True), 200


@bp.post("/<record_id>/apply")
async def apply_to_link(record_id: str):
    """Mark a link as applied, attaching a snapshot of the saved profile."""
    workspace, error_response = await require_session()
    if error_response is not None:
        return error_response

    sync = workspace.synchronizer
    if not sync.records_loaded:
        await sync.load_records()
    await sync.ensure_profile()

    record = await workspace.applications.apply(record_id)
    current_app.logger.info(f"Applied to link {record_id}")
    return jsonify(link=_serialize(workspace, record), message="Application submitted!"), 200
