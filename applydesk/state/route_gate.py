"""Gate protected views on the Session Store's state."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional, Protocol

from applydesk.models import Session
from applydesk.state.session_store import SessionStore
from applydesk.utils.lifecycle import Listeners, Subscription

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Navigator(Protocol):
    """What a protected view can do: show itself, a placeholder, or leave."""

    def render_protected(self) -> Any: ...

    def render_placeholder(self) -> Any: ...

    def redirect_to_sign_in(self, *, replace: bool = True) -> Any: ...


class RouteGate:
    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._state = self._state_for(store.get_current_session()) if store.initialized else GateState.LOADING
        self._mounted: Listeners[None] = Listeners()
        self._subscription = store.add_listener(self._on_session)

    @property
    def state(self) -> GateState:
        if self._state is GateState.AUTHENTICATED:
            # Reading the store drops an expired credential, which notifies us.
            self._store.get_current_session()
        return self._state

    def resolve(self, navigator: Navigator) -> Any:
        state = self.state
        if state is GateState.LOADING:
            return navigator.render_placeholder()
        if state is GateState.UNAUTHENTICATED:
            return navigator.redirect_to_sign_in(replace=True)
        return navigator.render_protected()

    def mount(self, navigator: Navigator) -> Subscription:
        """Register a protected view that is currently on screen.

        If the session ends while it is mounted, the view is redirected
        synchronously from the session notification itself.
        """
        return self._mounted.subscribe(lambda _: navigator.redirect_to_sign_in(replace=True))

    def teardown(self) -> None:
        self._subscription.unsubscribe()

    def _on_session(self, session: Optional[Session]) -> None:
        previous = self._state
        self._state = self._state_for(session)
        if previous is not self._state:
            logger.debug("Route gate %s -> %s", previous.value, self._state.value)
        if previous is GateState.AUTHENTICATED and self._state is GateState.UNAUTHENTICATED:
            self._mounted.emit(None)

    @staticmethod
    def _state_for(session: Optional[Session]) -> GateState:
        return GateState.AUTHENTICATED if session is not None else GateState.UNAUTHENTICATED
