"""Blueprint registration helper."""

from __future__ import annotations

from flask import Flask, current_app, jsonify

from applydesk.errors import ApplyDeskError

from .auth import bp as auth_bp
from .links import bp as links_bp
from .profile import bp as profile_bp
from .storage import bp as storage_bp


def register_routes(app: Flask) -> None:
    """Register all application blueprints on the provided Flask app."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(links_bp)
    app.register_blueprint(storage_bp)

    @app.errorhandler(ApplyDeskError)
    def handle_apply_desk_error(exc: ApplyDeskError):
        # Page-level, transient message; the app stays usable.
        if exc.status_code >= 500:
            current_app.logger.warning(f"Backend failure ({exc.reason}): {exc.message}")
        return jsonify(error=exc.message, reason=exc.reason), exc.status_code

    @app.get("/")
    def index():
        return jsonify(message="Hello from ApplyDesk Flask API"), 200
