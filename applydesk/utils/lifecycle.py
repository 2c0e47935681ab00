"""Cancellable subscriptions and mount guards."""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by every ``subscribe``; ``unsubscribe`` is idempotent."""

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._cancel()


class Listeners(Generic[T]):
    """Ordered callback list delivering each event in arrival order."""

    def __init__(self) -> None:
        self._callbacks: List[Callable[[T], None]] = []

    def __len__(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        self._callbacks.append(callback)

        def cancel() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return Subscription(cancel)

    def emit(self, event: T) -> None:
        # Snapshot so a callback may unsubscribe while being notified.
        for callback in list(self._callbacks):
            callback(event)


class Mount:
    """Mounted/unmounted flag checked after every suspend point.

    A scope (a workspace, the session store) unmounts when it is torn down;
    any coroutine resuming afterwards must not write its result back.
    """

    def __init__(self, name: str = "scope") -> None:
        self.name = name
        self._mounted = True

    @property
    def mounted(self) -> bool:
        return self._mounted

    def unmount(self) -> None:
        if self._mounted:
            logger.debug("Unmounted %s", self.name)
        self._mounted = False
