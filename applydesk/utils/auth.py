"""Request-side helpers binding Flask views to the per-client context."""

from __future__ import annotations

from typing import Any, Optional, Tuple

from flask import current_app, jsonify, redirect, request, url_for

from applydesk.errors import RemoteError
from applydesk.state.context import AppContext, ContextRegistry, Workspace
from applydesk.state.route_gate import GateState

EXTENSION_KEY = "applydesk"


def get_registry() -> ContextRegistry:
    """Return the context registry attached to the running Flask app."""
    return current_app.extensions[EXTENSION_KEY]


def bearer_token() -> Optional[str]:
    """Read the Bearer token from the request, if one was sent."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


async def ensure_initialized(context: AppContext) -> None:
    """Run the session lookup once; a failed lookup leaves the gate loading until the next request."""
    if context.initialized:
        return
    try:
        await context.initialize()
    except RemoteError as exc:
        current_app.logger.warning(f"Session lookup failed: {exc}")


async def get_context() -> AppContext:
    """Return the initialized context of the calling client."""
    context = get_registry().context_for(bearer_token())
    await ensure_initialized(context)
    return context


class RequestNavigator:
    """Route Gate capabilities expressed as Flask responses."""

    def render_protected(self) -> None:
        return None

    def render_placeholder(self) -> Any:
        return jsonify(status="loading", message="Checking your session..."), 202

    def redirect_to_sign_in(self, *, replace: bool = True) -> Any:
        # An HTTP redirect never leaves the protected URL in history, so it is always replace-style.
        return redirect(url_for("auth.sign_in_view"))


async def require_session() -> Tuple[Optional[Workspace], Optional[Any]]:
    """Gate the current request on its Bearer token and return the signed-in workspace."""
    token = bearer_token()
    context = await get_context()

    error_response = context.gate.resolve(RequestNavigator())
    if error_response is not None:
        if context.gate.state is GateState.UNAUTHENTICATED:
            get_registry().discard(token)
        return None, error_response
    return context.workspace(), None
