"""Public download route behind the blob store's public URLs."""

from __future__ import annotations

from io import BytesIO

from flask import Blueprint, jsonify, send_file

from applydesk.utils.auth import get_registry

bp = Blueprint("storage", __name__, url_prefix="/storage")


@bp.get("/<bucket>/<path:object_path>")
async def download_object(bucket: str, object_path: str):
    blob = await get_registry().backend.blobs.download(bucket, object_path)
    if blob is None:
        return jsonify(error="File not found."), 404

    buffer = BytesIO(blob["data"])
    buffer.seek(0)
    return send_file(
        buffer,
        mimetype=blob["content_type"],
        as_attachment=False,
        download_name=blob["filename"] or object_path.rsplit("/", 1)[-1],
    )
