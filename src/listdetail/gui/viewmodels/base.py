"""BaseViewModel — pure Python, no Qt dependency.

A ViewModel registers everything it must release (EventBus subscriptions,
signal connections, executors) with the base class; ``dispose()`` releases
all of it exactly once.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Type

from listdetail.events.bus import EventBus, Subscription

_logger = logging.getLogger(__name__)


class BaseViewModel:
    """Lifecycle owner for one screen's ViewModel."""

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._cleanups: List[Callable[[], None]] = []
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def subscribe_event(
        self,
        event_bus: EventBus,
        event_type: Type,
        handler: Callable,
    ) -> Subscription:
        """Subscribe *handler* to *event_type* until the ViewModel is disposed."""
        sub = event_bus.subscribe(event_type, handler)
        self._subscriptions.append(sub)
        return sub

    def on_dispose(self, cleanup: Callable[[], None]) -> None:
        """Run *cleanup* during ``dispose()``, after the event subscriptions are cancelled.

        Cleanups run in reverse registration order.
        """
        self._cleanups.append(cleanup)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions.clear()
        while self._cleanups:
            cleanup = self._cleanups.pop()
            try:
                cleanup()
            except Exception as exc:
                _logger.error("Dispose step %r of %s failed: %s", cleanup, type(self).__name__, exc)
