"""/api/auth routes for sign-in, sign-up, sign-out and password management."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request

from applydesk.errors import ValidationError
from applydesk.utils.auth import (
    bearer_token,
    ensure_initialized,
    get_context,
    get_registry,
    require_session,
)

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _credentials(payload: Dict[str, Any]) -> Tuple[str, str]:
    email = str(payload.get("email", "")).strip()
    password = str(payload.get("password", ""))
    if not email or not password:
        raise ValidationError("Email and password are required.", reason="missing_credentials")
    return email, password


@bp.get("")
async def sign_in_view():
    """The sign-in view that protected routes redirect to."""
    context = await get_context()
    session = context.session_store.get_current_session()
    if session is None:
        get_registry().discard(bearer_token())
    return jsonify(view="sign-in", signedIn=session is not None), 200


@bp.post("/sign-in")
async def sign_in():
    """Open a session; the returned token goes in ``Authorization: Bearer``."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    email, password = _credentials(payload)

    registry = get_registry()
    context = registry.context_for(None)
    await ensure_initialized(context)
    session = await context.account.sign_in(email, password)
    registry.adopt(context)
    current_app.logger.info(f"User {session.identity.id} signed in")
    return jsonify(session.to_public(include_token=True)), 200


@bp.post("/sign-up")
async def sign_up():
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    email, password = _credentials(payload)

    confirmation = payload.get("confirmPassword")
    identity = await get_registry().context_for(None).account.sign_up(
        email, password, str(confirmation) if confirmation is not None else None
    )
    return (
        jsonify(
            user={"id": identity.id, "email": identity.email},
            message="Account created. You can sign in now.",
        ),
        201,
    )


@bp.post("/sign-out")
async def sign_out():
    token = bearer_token()
    context = await get_context()
    try:
        await context.account.sign_out()
    finally:
        get_registry().discard(token)
    return jsonify(success=True), 200


@bp.post("/password-reset")
async def request_password_reset():
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    await get_registry().context_for(None).account.request_password_reset(str(payload.get("email", "")))
    return jsonify(message="If that address has an account, a reset link is on its way."), 200


@bp.put("/password")
async def update_password():
    _, error_response = await require_session()
    if error_response is not None:
        return error_response

    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    confirmation = payload.get("confirmPassword")
    context = await get_context()
    await context.account.update_password(
        str(payload.get("password", "")),
        str(confirmation) if confirmation is not None else "",
    )
    return jsonify(message="Password updated successfully!"), 200


@bp.get("/session")
async def get_session_info():
    """Return information about the current session if it is valid."""
    _, error_response = await require_session()
    if error_response is not None:
        return error_response

    context = await get_context()
    return jsonify(context.session_store.get_current_session().to_public()), 200
