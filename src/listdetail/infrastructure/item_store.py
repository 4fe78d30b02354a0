"""In-memory item cache keyed by (list id, view mode)."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Dict, List, Tuple

from listdetail.domain.models import Item, ViewMode
from listdetail.domain.repositories import IItemStore, StoreSubscription
from listdetail.gui.viewmodels.signal import Signal

LOGGER = logging.getLogger(__name__)

_Key = Tuple[str, ViewMode]


class _KeyedSubscription(StoreSubscription):
    """Forwards one key's changes to a handler, dropping out-of-order versions."""

    def __init__(self, signal: Signal, key: _Key, handler: Callable) -> None:
        self._key = key
        self._handler = handler
        self._last_version = -1
        self._lock = threading.RLock()
        self._active = True
        self._connection = signal.connect(self._on_changed)

    def deliver(self, version: int, value) -> None:
        with self._lock:
            if not self._active or version <= self._last_version:
                return
            self._last_version = version
            self._handler(value)

    def _on_changed(self, key: _Key, version: int, value) -> None:
        if key == self._key:
            self.deliver(version, value)

    def cancel(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._connection.disconnect()


class InMemoryItemStore(IItemStore):
    """Thread-safe item store.

    Every write is atomic with respect to other writes. Change notifications
    are emitted outside the lock and tagged with a monotonically increasing
    version so observers never regress to an older state.
    """

    def __init__(self) -> None:
        self._items: Dict[_Key, List[Item]] = {}
        self._completed: Dict[_Key, bool] = {}
        self._lock = threading.RLock()
        self._versions = itertools.count()
        self.items_changed = Signal("items_changed")  # emits (key, version, items)
        self.completed_changed = Signal("completed_changed")  # emits (key, version, completed)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def observe_items(
        self, list_id: str, mode: ViewMode, handler: Callable[[List[Item]], None]
    ) -> StoreSubscription:
        key = (list_id, mode)
        subscription = _KeyedSubscription(self.items_changed, key, handler)
        with self._lock:
            version = next(self._versions)
            items = list(self._items.get(key, ()))
        subscription.deliver(version, items)
        return subscription

    def observe_is_completed(
        self, list_id: str, mode: ViewMode, handler: Callable[[bool], None]
    ) -> StoreSubscription:
        key = (list_id, mode)
        subscription = _KeyedSubscription(self.completed_changed, key, handler)
        with self._lock:
            version = next(self._versions)
            completed = self._completed.get(key, False)
        subscription.deliver(version, completed)
        return subscription

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_items(self, list_id: str, mode: ViewMode) -> List[Item]:
        with self._lock:
            return list(self._items.get((list_id, mode), ()))

    def is_completed(self, list_id: str, mode: ViewMode) -> bool:
        with self._lock:
            return self._completed.get((list_id, mode), False)

    def current_count(self, list_id: str, mode: ViewMode) -> int:
        with self._lock:
            return len(self._items.get((list_id, mode), ()))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def replace_all(self, list_id: str, mode: ViewMode, items: List[Item]) -> None:
        key = (list_id, mode)
        with self._lock:
            self._items[key] = list(items)
            version = next(self._versions)
            snapshot = list(self._items[key])
        self.items_changed.emit(key, version, snapshot)

    def append(self, list_id: str, mode: ViewMode, items: List[Item]) -> None:
        key = (list_id, mode)
        with self._lock:
            self._items.setdefault(key, []).extend(items)
            version = next(self._versions)
            snapshot = list(self._items[key])
        self.items_changed.emit(key, version, snapshot)

    def replace_item(self, list_id: str, mode: ViewMode, item: Item) -> bool:
        key = (list_id, mode)
        with self._lock:
            items = self._items.get(key)
            if not items:
                return False
            for index, cached in enumerate(items):
                if cached.id == item.id:
                    items[index] = item
                    break
            else:
                return False
            version = next(self._versions)
            snapshot = list(items)
        self.items_changed.emit(key, version, snapshot)
        return True

    def set_completed(self, list_id: str, mode: ViewMode, completed: bool) -> None:
        key = (list_id, mode)
        with self._lock:
            self._completed[key] = bool(completed)
            version = next(self._versions)
        self.completed_changed.emit(key, version, bool(completed))

    def clear_all(self) -> None:
        with self._lock:
            cleared = [(key, next(self._versions)) for key in self._items]
            flags = [(key, next(self._versions)) for key in self._completed]
            self._items.clear()
            self._completed.clear()
        for key, version in cleared:
            self.items_changed.emit(key, version, [])
        for key, version in flags:
            self.completed_changed.emit(key, version, False)
        LOGGER.debug("Cleared %d cached item collections", len(cleared))
