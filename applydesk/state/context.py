"""Explicitly constructed application context with an initialize/teardown lifecycle."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from pymongo.database import Database

from applydesk.config import Settings
from applydesk.errors import AuthError
from applydesk.models import Identity, Session
from applydesk.services import Backend
from applydesk.state.account import AccountActions
from applydesk.state.application_status import ApplicationStatusMachine
from applydesk.state.route_gate import RouteGate
from applydesk.state.session_store import SessionStore
from applydesk.state.synchronizer import ResourceSynchronizer
from applydesk.utils.lifecycle import Mount

logger = logging.getLogger(__name__)


class Workspace:
    """Everything scoped to one signed-in identity."""

    def __init__(self, backend: Backend, identity: Identity) -> None:
        self.identity = identity
        self.mount = Mount(f"workspace {identity.id}")
        self.synchronizer = ResourceSynchronizer(backend.documents, backend.blobs, identity, self.mount)
        self.applications = ApplicationStatusMachine(self.synchronizer)

    @property
    def closed(self) -> bool:
        return not self.mount.mounted

    def close(self) -> None:
        self.mount.unmount()


class AppContext:
    def __init__(self, backend: Backend, settings: Settings) -> None:
        self.backend = backend
        self.settings = settings
        self.session_store = SessionStore(backend.auth)
        self.gate = RouteGate(self.session_store)
        self.account = AccountActions(backend.auth, settings.password_reset_redirect)
        self._workspace: Optional[Workspace] = None
        self._listener = self.session_store.add_listener(self._on_session)

    @property
    def initialized(self) -> bool:
        return self.session_store.initialized

    async def initialize(self) -> None:
        await self.session_store.initialize()

    def workspace(self) -> Workspace:
        """Return the workspace of the signed-in identity, creating it on first use."""
        identity = self.session_store.current_identity()
        if identity is None:
            raise AuthError("You need to sign in first.", reason="no_session")
        if self._workspace is None or self._workspace.identity != identity:
            self._drop_workspace()
            self._workspace = Workspace(self.backend, identity)
            logger.debug("Opened workspace for %s", identity.id)
        return self._workspace

    def teardown(self) -> None:
        self._drop_workspace()
        self._listener.unsubscribe()
        self.gate.teardown()
        self.session_store.teardown()

    def _on_session(self, session: Optional[Session]) -> None:
        workspace = self._workspace
        if workspace is None:
            return
        if session is None or session.identity != workspace.identity:
            self._drop_workspace()

    def _drop_workspace(self) -> None:
        if self._workspace is not None:
            self._workspace.close()
            self._workspace = None


class ContextRegistry:
    """One ``AppContext`` per client credential.

    Every bearer token gets its own backend handle, Session Store, gate and
    workspace, so nothing is shared between clients. Requests without a
    token get a fresh anonymous context that is never cached.
    """

    def __init__(self, database: Database, settings: Settings) -> None:
        self._database = database
        self.settings = settings
        # Credential-free handle for public reads such as blob downloads.
        self.backend = Backend.from_database(database, settings)
        self._contexts: Dict[str, AppContext] = {}

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, token: object) -> bool:
        return token in self._contexts

    def context_for(self, token: Optional[str]) -> AppContext:
        if not token:
            return self._create(None)
        context = self._contexts.get(token)
        if context is None:
            context = self._contexts[token] = self._create(token)
        return context

    def adopt(self, context: AppContext) -> str:
        """Cache a context that just signed in, keyed by its new credential."""
        session = context.session_store.get_current_session()
        if session is None:
            raise AuthError("You need to sign in first.", reason="no_session")
        token = session.raw_credential
        previous = self._contexts.get(token)
        if previous is not None and previous is not context:
            previous.teardown()
        self._contexts[token] = context
        return token

    def discard(self, token: Optional[str]) -> None:
        context = self._contexts.pop(token, None) if token else None
        if context is not None:
            context.teardown()
            logger.debug("Released context for a signed-out client")

    def teardown(self) -> None:
        for token in list(self._contexts):
            self.discard(token)

    def _create(self, token: Optional[str]) -> AppContext:
        return AppContext(Backend.from_database(self._database, self.settings, credential=token), self.settings)
