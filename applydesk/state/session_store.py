"""Holds the current authentication session and tracks backend changes."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from applydesk.models import Identity, Session
from applydesk.services.auth_service import AuthService
from applydesk.utils.clock import now_seconds
from applydesk.utils.lifecycle import Listeners, Mount, Subscription

logger = logging.getLogger(__name__)

SessionListener = Callable[[Optional[Session]], None]


class SessionStore:
    """Single owner of the ``Session`` value.

    ``initialize()`` subscribes to the backend channel before looking up the
    current session. A notification that lands while the lookup is in
    flight is newer than the lookup result, so it wins.
    """

    def __init__(self, auth: AuthService) -> None:
        self._auth = auth
        self._session: Optional[Session] = None
        self._initialized = False
        self._changed_during_init = False
        self._subscription: Optional[Subscription] = None
        self._listeners: Listeners[Optional[Session]] = Listeners()
        self._mount = Mount("session store")

    @property
    def initialized(self) -> bool:
        return self._initialized

    def get_current_session(self) -> Optional[Session]:
        session = self._session
        if session is not None and session.is_expired(now_seconds()):
            logger.info("Session for %s expired", session.identity.id)
            self.on_change(None)
            return None
        return session

    def current_identity(self) -> Optional[Identity]:
        session = self.get_current_session()
        return session.identity if session else None

    async def initialize(self) -> None:
        if self._initialized or self._subscription is not None or not self._mount.mounted:
            return
        self._subscription = self._auth.subscribe_to_session_changes(self.on_change)
        try:
            session = await self._auth.get_current_session()
        except Exception:
            # Leave the store as if initialize() never ran so the next call retries.
            self._subscription.unsubscribe()
            self._subscription = None
            self._changed_during_init = False
            raise

        if not self._mount.mounted:
            return
        if not self._changed_during_init:
            self._session = session
        self._initialized = True
        logger.debug("Session store initialized (signed in: %s)", self._session is not None)
        self._listeners.emit(self._session)

    def on_change(self, session: Optional[Session]) -> None:
        if not self._mount.mounted:
            return
        if not self._initialized:
            self._changed_during_init = True
        if session == self._session:
            return
        self._session = session
        if self._initialized:
            self._listeners.emit(session)

    def add_listener(self, callback: SessionListener) -> Subscription:
        """Be told synchronously about every state change, in arrival order."""
        return self._listeners.subscribe(callback)

    def teardown(self) -> None:
        self._mount.unmount()
        if self._subscription is not None:
            self._subscription.unsubscribe()
