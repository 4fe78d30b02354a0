"""Delivery of callables onto the output (UI) context."""

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Deque, Protocol

_logger = logging.getLogger(__name__)


class Dispatcher(Protocol):
    """Runs posted callables one at a time, in posting order."""

    def post(self, fn: Callable[[], None]) -> None: ...


class ImmediateDispatcher:
    """Runs posted callables on the posting thread, serialised and in order.

    Meant for single-threaded wiring (synchronous executors, tests); with
    real worker threads use :class:`SerialDispatcher` or the Qt dispatcher.

    The first thread to post drains the queue; callables posted meanwhile by
    other threads (or re-entrantly) are appended and run by that drainer, so
    ``post`` never blocks waiting for another thread.
    """

    def __init__(self) -> None:
        self._queue: Deque[Callable[[], None]] = deque()
        self._lock = threading.Lock()
        self._draining = False

    def post(self, fn: Callable[[], None]) -> None:
        with self._lock:
            self._queue.append(fn)
            if self._draining:
                return
            self._draining = True
        self._drain()

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._queue:
                    self._draining = False
                    return
                fn = self._queue.popleft()
            try:
                fn()
            except Exception as exc:
                _logger.error("Dispatched callable %r failed: %s", fn, exc)


class SerialDispatcher:
    """Runs posted callables on one dedicated thread, standing in for a UI loop."""

    def __init__(self, thread_name: str = "listdetail-ui") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=thread_name)

    def post(self, fn: Callable[[], None]) -> None:
        try:
            self._executor.submit(self._run, fn)
        except RuntimeError:
            _logger.debug("Dispatcher shut down; dropping %r", fn)

    @staticmethod
    def _run(fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception as exc:
            _logger.error("Dispatched callable %r failed: %s", fn, exc)

    def flush(self, timeout: float | None = None) -> None:
        """Block until every callable posted so far has run."""
        self._executor.submit(lambda: None).result(timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
