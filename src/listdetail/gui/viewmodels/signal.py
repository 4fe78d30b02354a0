"""Pure Python signal system — no Qt dependency.

``Signal`` is the observer primitive every stream in the package is built
on: store changes, setup changes, navigation and view-state output.
``ObservableProperty`` pairs a value with a ``changed(new, old)`` signal.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Optional

_logger = logging.getLogger(__name__)


class Connection:
    """Handle returned by :meth:`Signal.connect`.

    ``disconnect`` may be called any number of times.
    """

    def __init__(self, signal: Signal, handler: Callable) -> None:
        self._signal = signal
        self._handler = handler

    @property
    def handler(self) -> Callable:
        return self._handler

    @property
    def connected(self) -> bool:
        return self._signal.is_connected(self._handler)

    def disconnect(self) -> None:
        self._signal.discard(self._handler)


class Signal:
    """Thread-safe list of handlers called in connection order.

    Handlers run on the emitting thread, outside the internal lock, so a
    handler may connect or disconnect while being called. A handler that
    raises is logged and skipped; the rest still run.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self._name = name
        self._handlers: List[Callable] = []
        self._lock = threading.Lock()

    def connect(self, handler: Callable) -> Connection:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)
        return Connection(self, handler)

    def disconnect(self, handler: Callable) -> None:
        """Remove *handler*; raises ``ValueError`` if it is not connected."""
        with self._lock:
            self._handlers.remove(handler)

    def discard(self, handler: Callable) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def disconnect_all(self) -> None:
        with self._lock:
            self._handlers.clear()

    def is_connected(self, handler: Callable) -> bool:
        with self._lock:
            return handler in self._handlers

    def emit(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            handlers = tuple(self._handlers)
        for handler in handlers:
            try:
                handler(*args, **kwargs)
            except Exception as exc:
                _logger.error(
                    "Handler %r of signal %s failed: %s", handler, self._name or "<anonymous>", exc
                )

    @property
    def handler_count(self) -> int:
        with self._lock:
            return len(self._handlers)


class ObservableProperty:
    """A value that announces replacements.

    ``changed(new, old)`` fires only when the new value compares unequal to
    the old one. The swap is atomic; the notification happens after it.
    """

    def __init__(self, initial_value: Any = None, name: Optional[str] = None) -> None:
        self._value = initial_value
        self._lock = threading.Lock()
        self.changed = Signal(name)

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        self.set(new_value)

    def set(self, new_value: Any) -> bool:
        """Replace the value; returns ``False`` when it was equal."""
        with self._lock:
            if self._value == new_value:
                return False
            old_value, self._value = self._value, new_value
        self.changed.emit(new_value, old_value)
        return True
