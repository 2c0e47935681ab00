"""Environment-driven settings for the API and its MongoDB backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

# Session expiry window (seconds).
DEFAULT_SESSION_TTL_SECONDS = 24 * 60 * 60
RESET_TOKEN_TTL_SECONDS = 60 * 60

UPLOAD_LIMIT_BYTES = 5 * 1024 * 1024  # 5 MB per request
RESUME_BUCKET = "user-files"


@dataclass(frozen=True)
class Settings:
    mongodb_uri: str = "mongodb://localhost:27017/"
    mongodb_database: str = "applydesk"
    session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    public_storage_url: str = "http://localhost:5050/storage"
    password_reset_redirect: str = "http://localhost:5173/update-password"
    cors_origins: Tuple[str, ...] = ("*",)


def load_settings() -> Settings:
    """Read settings from the process environment, falling back to defaults."""
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        mongodb_uri=os.getenv("MONGODB_URI", Settings.mongodb_uri),
        mongodb_database=os.getenv("MONGODB_DATABASE", Settings.mongodb_database),
        session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", str(DEFAULT_SESSION_TTL_SECONDS))),
        public_storage_url=os.getenv("PUBLIC_STORAGE_URL", Settings.public_storage_url).rstrip("/"),
        password_reset_redirect=os.getenv("PASSWORD_RESET_REDIRECT", Settings.password_reset_redirect),
        cors_origins=tuple(origin.strip() for origin in origins.split(",") if origin.strip()),
    )
