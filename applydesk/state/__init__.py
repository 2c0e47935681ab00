"""Client-side state: session, route gate, profile document, sync and apply flow."""

from .application_status import ApplicationStatusMachine, ApplyState
from .context import AppContext, ContextRegistry, Workspace
from .profile_document import ProfileDocument, ProfilePath
from .profile_schema import Section
from .route_gate import GateState, RouteGate
from .session_store import SessionStore
from .synchronizer import ResourceSynchronizer

__all__ = [
    "AppContext",
    "ApplicationStatusMachine",
    "ApplyState",
    "ContextRegistry",
    "GateState",
    "ProfileDocument",
    "ProfilePath",
    "ResourceSynchronizer",
    "RouteGate",
    "Section",
    "SessionStore",
    "Workspace",
]
