"""Error taxonomy shared by the services, the state layer and the routes."""

from __future__ import annotations

from typing import Optional


class ApplyDeskError(Exception):
    """Base class for every failure surfaced to the user as a page-level message."""

    status_code = 500
    default_reason = "error"

    def __init__(self, message: str, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason or self.default_reason


class AuthError(ApplyDeskError):
    """Credential or session failure; the message is shown verbatim."""

    status_code = 401
    default_reason = "auth_failed"


class ValidationError(ApplyDeskError):
    """Local precondition failure. Never reaches the remote store."""

    status_code = 400
    default_reason = "invalid"


class NotFoundError(ApplyDeskError):
    status_code = 404
    default_reason = "not_found"


class RemoteError(ApplyDeskError):
    """Any other backend failure, carrying the backend's message."""

    status_code = 502
    default_reason = "remote_failure"


class PathError(ApplyDeskError, LookupError):
    """A profile path that is not part of the canonical schema."""

    status_code = 400
    default_reason = "invalid_path"


class ItemIndexError(PathError, IndexError):
    """Sequence index out of bounds."""

    default_reason = "index_out_of_range"


class SchemaError(ApplyDeskError, TypeError):
    """A value or operation that does not fit the field's kind."""

    status_code = 400
    default_reason = "schema_mismatch"
