"""Time and token helpers."""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone


def now_seconds() -> int:
    """Return the current UNIX timestamp in seconds."""
    return int(time.time())


def now_millis() -> int:
    """Return the current UNIX timestamp in milliseconds."""
    return int(time.time() * 1000)


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    # Fixed precision keeps lexical order equal to chronological order.
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def generate_token(prefix: str = "sess") -> str:
    """Return a random token with the given prefix."""
    return f"{prefix}_{secrets.token_urlsafe(24)}"
