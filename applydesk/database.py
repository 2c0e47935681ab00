"""MongoDB connection helpers and index bootstrap."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from applydesk.config import Settings
from applydesk.errors import RemoteError

logger = logging.getLogger(__name__)

PROFILES = "user_profiles"
LINKS = "user_links"
USERS = "users"
SESSIONS = "sessions"
PASSWORD_RESETS = "password_resets"
STORAGE_OBJECTS = "storage_objects"

ALL_COLLECTIONS = (PROFILES, LINKS, USERS, SESSIONS, PASSWORD_RESETS, STORAGE_OBJECTS)


def get_mongo_client(settings: Settings) -> MongoClient:
    """Create a MongoDB client for the configured URI."""
    return MongoClient(settings.mongodb_uri)


def get_database(client: MongoClient, settings: Settings) -> Database:
    """Return the configured database from an existing client."""
    return client[settings.mongodb_database]


def create_indexes(db: Database) -> None:
    """Create the indexes the services rely on for uniqueness and ordering."""
    db[PROFILES].create_index([("user_id", ASCENDING)], unique=True)
    db[LINKS].create_index([("id", ASCENDING)], unique=True)
    db[LINKS].create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[SESSIONS].create_index([("token", ASCENDING)], unique=True)
    db[SESSIONS].create_index([("expires_at", ASCENDING)])
    db[PASSWORD_RESETS].create_index([("token", ASCENDING)], unique=True)
    db[STORAGE_OBJECTS].create_index([("bucket", ASCENDING), ("path", ASCENDING)], unique=True)
    logger.info("MongoDB indexes ensured on %s", db.name)


@contextmanager
def remote_errors(action: str) -> Iterator[None]:
    """Translate driver failures into ``RemoteError`` carrying the driver message."""
    try:
        yield
    except PyMongoError as exc:
        logger.warning("%s failed: %s", action, exc)
        raise RemoteError(str(exc)) from exc
