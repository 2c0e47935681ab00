"""Flask application setup and blueprint wiring."""

from __future__ import annotations

from typing import Optional

from flask import Flask
from flask_cors import CORS
from pymongo.database import Database

from applydesk.config import UPLOAD_LIMIT_BYTES, Settings, load_settings
from applydesk.database import create_indexes, get_database, get_mongo_client
from applydesk.routes import register_routes
from applydesk.state.context import ContextRegistry
from applydesk.utils.auth import EXTENSION_KEY


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> Flask:
    """Configure and return the Flask application instance."""
    settings = settings or load_settings()
    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": list(settings.cors_origins)}})

    app.config["MAX_CONTENT_LENGTH"] = UPLOAD_LIMIT_BYTES

    if database is None:
        database = get_database(get_mongo_client(settings), settings)
        try:
            create_indexes(database)
            app.logger.info("MongoDB indexes created successfully")
        except Exception as e:
            app.logger.warning(f"Failed to create MongoDB indexes: {e}")

    # One context per signed-in client, keyed by its Bearer token.
    app.extensions[EXTENSION_KEY] = ContextRegistry(database, settings)

    register_routes(app)
    return app
