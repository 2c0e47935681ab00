"""Service for managing users, sessions and password resets in MongoDB."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from pymongo.database import Database
from werkzeug.security import check_password_hash, generate_password_hash

from applydesk.config import DEFAULT_SESSION_TTL_SECONDS, RESET_TOKEN_TTL_SECONDS
from applydesk.database import PASSWORD_RESETS, SESSIONS, USERS, remote_errors
from applydesk.errors import AuthError
from applydesk.models import Identity, Session
from applydesk.utils.clock import generate_token, now_seconds
from applydesk.utils.lifecycle import Listeners, Subscription

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _check_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise AuthError(
            f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
            reason="weak_password",
        )


def _session_from_document(document: Dict[str, Any]) -> Session:
    return Session(
        identity=Identity(id=document["user_id"], email=document["email"]),
        expires_at=int(document["expires_at"]),
        raw_credential=document["token"],
    )


class AuthService:
    """Authentication half of the backend client.

    Like a browser SDK, one instance holds at most one current credential.
    Every change to it is announced on the session-change channel, from the
    caller's event loop and never from a worker thread.
    """

    def __init__(
        self,
        db: Database,
        session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        credential: Optional[str] = None,
    ) -> None:
        self._users = db[USERS]
        self._sessions = db[SESSIONS]
        self._resets = db[PASSWORD_RESETS]
        self._session_ttl_seconds = session_ttl_seconds
        self._current_token = credential
        self._listeners: Listeners[Optional[Session]] = Listeners()

    # ------------------------------------------------------------------
    # Session-change channel
    # ------------------------------------------------------------------

    def subscribe_to_session_changes(
        self, callback: Callable[[Optional[Session]], None]
    ) -> Subscription:
        """Register ``callback`` for session changes; returns a cancellable handle."""
        return self._listeners.subscribe(callback)

    def _publish(self, session: Optional[Session]) -> None:
        self._listeners.emit(session)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str) -> Identity:
        """
        Register a new user.

        Sign-up does not open a session; the user signs in afterwards.

        Args:
            email: Login email, case-insensitive
            password: Plain-text password, at least six characters

        Returns:
            The identity of the created user
        """
        return await asyncio.to_thread(self._sign_up, email, password)

    async def sign_in(self, email: str, password: str) -> Session:
        """
        Verify credentials and open a session.

        Returns:
            The new session, which is also published to subscribers
        """
        session = await asyncio.to_thread(self._sign_in, email, password)
        self._current_token = session.raw_credential
        self._publish(session)
        return session

    async def sign_out(self) -> None:
        """Revoke the current session; local state is cleared even if revocation fails."""
        token = self._current_token
        if token is None:
            return
        try:
            await asyncio.to_thread(self._delete_session, token)
        finally:
            self._current_token = None
            self._publish(None)

    async def request_password_reset(self, email: str, redirect_to: str) -> None:
        """
        Issue a password reset token for ``email``.

        The call succeeds whether or not the address is registered so that it
        cannot be used to probe for accounts.
        """
        await asyncio.to_thread(self._request_password_reset, email, redirect_to)

    async def update_password(self, new_password: str) -> None:
        """Change the password of the signed-in user."""
        session = await self.get_current_session()
        if session is None:
            raise AuthError("Auth session missing!", reason="no_session")
        _check_password(new_password)
        await asyncio.to_thread(self._update_password, session.identity.id, new_password)
        # Same payload as before; subscribers treat it as a no-op.
        self._publish(session)

    async def get_current_session(self) -> Optional[Session]:
        """Return the current session, dropping it if it has expired."""
        token = self._current_token
        if token is None:
            return None
        session = await asyncio.to_thread(self._lookup_session, token)
        if session is None and self._current_token == token:
            self._current_token = None
            self._publish(None)
        return session

    # ------------------------------------------------------------------
    # Blocking MongoDB calls, run in a worker thread
    # ------------------------------------------------------------------

    def _sign_up(self, email: str, password: str) -> Identity:
        email = _normalize_email(email)
        if not email:
            raise AuthError("Email is required.", reason="missing_email")
        _check_password(password)

        with remote_errors("sign_up"):
            if self._users.find_one({"email": email}) is not None:
                raise AuthError("User already registered", reason="user_exists")
            user_id = str(uuid.uuid4())
            self._users.insert_one(
                {
                    "user_id": user_id,
                    "email": email,
                    "password_hash": generate_password_hash(password),
                    "created_at": datetime.utcnow(),
                }
            )
        logger.info("Registered user %s", user_id)
        return Identity(id=user_id, email=email)

    def _sign_in(self, email: str, password: str) -> Session:
        email = _normalize_email(email)
        with remote_errors("sign_in"):
            user = self._users.find_one({"email": email})
        if not user or not check_password_hash(user["password_hash"], password or ""):
            raise AuthError("Invalid login credentials", reason="invalid_credentials")

        document = {
            "token": generate_token("sess"),
            "user_id": user["user_id"],
            "email": email,
            "expires_at": now_seconds() + self._session_ttl_seconds,
            "created_at": datetime.utcnow(),
        }
        with remote_errors("sign_in"):
            self._sessions.insert_one(dict(document))
        return _session_from_document(document)

    def _delete_session(self, token: str) -> bool:
        with remote_errors("sign_out"):
            result = self._sessions.delete_one({"token": token})
        return result.deleted_count > 0

    def _lookup_session(self, token: str) -> Optional[Session]:
        with remote_errors("get_session"):
            document = self._sessions.find_one({"token": token})
            if document is None:
                return None
            if int(document["expires_at"]) <= now_seconds():
                self._sessions.delete_one({"token": token})
                return None
        return _session_from_document(document)

    def _request_password_reset(self, email: str, redirect_to: str) -> None:
        email = _normalize_email(email)
        with remote_errors("request_password_reset"):
            user = self._users.find_one({"email": email})
            if user is None:
                logger.info("Password reset requested for unknown address")
                return
            self._resets.insert_one(
                {
                    "token": generate_token("reset"),
                    "user_id": user["user_id"],
                    "email": email,
                    "redirect_to": redirect_to,
                    "expires_at": now_seconds() + RESET_TOKEN_TTL_SECONDS,
                    "created_at": datetime.utcnow(),
                    "used": False,
                }
            )
        logger.info("Password reset issued for user %s", user["user_id"])

    def _update_password(self, user_id: str, new_password: str) -> None:
        with remote_errors("update_password"):
            self._users.update_one(
                {"user_id": user_id},
                {"$set": {"password_hash": generate_password_hash(new_password), "updated_at": datetime.utcnow()}},
            )

    def cleanup_expired_sessions(self) -> Dict[str, int]:
        """Remove expired sessions and reset tokens."""
        current = now_seconds()
        with remote_errors("cleanup_expired_sessions"):
            sessions_result = self._sessions.delete_many({"expires_at": {"$lte": current}})
            resets_result = self._resets.delete_many({"expires_at": {"$lte": current}})
        return {
            "sessions_deleted": sessions_result.deleted_count,
            "resets_deleted": resets_result.deleted_count,
        }
