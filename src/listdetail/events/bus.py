import logging
import threading
import uuid
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Type


@dataclass(eq=False)
class Subscription:
    """Handle returned by subscribe(); can be used to unsubscribe."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = object
    handler: Callable = field(default=lambda e: None)
    active: bool = True
    bus: Optional["EventBus"] = field(default=None, repr=False)

    def cancel(self):
        if not self.active:
            return
        self.active = False
        if self.bus is not None:
            self.bus.unsubscribe(self)


class EventBus:
    """Typed publish/subscribe channel shared by the screens of one app.

    Handlers are keyed by the exact event class. Failing handlers are logged
    and never prevent delivery to the remaining subscribers.
    """

    def __init__(self, logger: logging.Logger = None, max_workers: int = 4):
        self._logger = logger or logging.getLogger(__name__)
        self._sync_handlers: Dict[Type, List[Subscription]] = defaultdict(list)
        self._async_handlers: Dict[Type, List[Subscription]] = defaultdict(list)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="listdetail-bus")
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type, handler: Callable, async_: bool = False) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler, bus=self)
        with self._lock:
            if async_:
                self._async_handlers[event_type].append(sub)
            else:
                self._sync_handlers[event_type].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription):
        subscription.active = False
        with self._lock:
            for store in (self._sync_handlers, self._async_handlers):
                subs = store.get(subscription.event_type)
                if subs and subscription in subs:
                    subs.remove(subscription)

    def subscriber_count(self, event_type: Type) -> int:
        with self._lock:
            return len(self._sync_handlers.get(event_type, ())) + len(
                self._async_handlers.get(event_type, ())
            )

    def publish(self, event):
        event_type = type(event)

        with self._lock:
            sync_subs = list(self._sync_handlers.get(event_type, ()))
            async_subs = list(self._async_handlers.get(event_type, ()))

        for sub in sync_subs:
            if not sub.active:
                continue
            try:
                sub.handler(event)
            except Exception as e:
                self._logger.error("Sync handler failed for %s: %s", event_type.__name__, e)

        for sub in async_subs:
            if not sub.active:
                continue
            self._executor.submit(self._safe_async_call, sub.handler, event)

    def publish_async(self, event) -> List[Future]:
        """Submit all handlers (sync and async) to the thread pool, return futures."""
        event_type = type(event)
        futures: List[Future] = []

        with self._lock:
            sync_subs = list(self._sync_handlers.get(event_type, ()))
            async_subs = list(self._async_handlers.get(event_type, ()))

        for sub in sync_subs + async_subs:
            if not sub.active:
                continue
            futures.append(self._executor.submit(self._safe_async_call, sub.handler, event))

        return futures

    def _safe_async_call(self, handler, event):
        try:
            handler(event)
        except Exception as e:
            self._logger.error("Async handler failed: %s", e)

    def shutdown(self):
        self._executor.shutdown(wait=True)
