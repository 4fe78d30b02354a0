"""Optimistic reaction toggling with per-(item, alias) deduplication."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, FrozenSet, Optional, Set, Tuple

from listdetail.config import REACTION_WORKERS, UPVOTE_ALIAS
from listdetail.domain.models import Item
from listdetail.domain.repositories import IItemStore, IRemoteSource
from listdetail.errors import MutationError

LOGGER = logging.getLogger(__name__)

PendingKey = Tuple[str, str]


class PendingReactions:
    """Set of (item id, alias) pairs whose toggle is still in flight."""

    def __init__(self) -> None:
        self._pending: Set[PendingKey] = set()
        self._lock = threading.Lock()

    def add(self, item_id: str, alias: str) -> bool:
        """Mark the pair pending; ``False`` if it already was."""
        key = (item_id, alias)
        with self._lock:
            if key in self._pending:
                return False
            self._pending.add(key)
            return True

    def remove(self, item_id: str, alias: str) -> None:
        with self._lock:
            self._pending.discard((item_id, alias))

    def contains(self, item_id: str, alias: str) -> bool:
        with self._lock:
            return (item_id, alias) in self._pending

    def aliases_for(self, item_id: str) -> FrozenSet[str]:
        with self._lock:
            return frozenset(alias for pending_id, alias in self._pending if pending_id == item_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


class ReactionToggleTracker:
    """Dispatch reaction toggles and commit the confirmed items to the store.

    A toggle for a pair that is already pending is coalesced into the
    running call. The pending marker is cleared whether the call succeeds
    or fails, so the user can always try again.
    """

    def __init__(
        self,
        list_id: str,
        remote: IRemoteSource,
        store: IItemStore,
        *,
        on_error: Callable[[MutationError], None],
        executor: Optional[Executor] = None,
    ) -> None:
        self._list_id = list_id
        self._remote = remote
        self._store = store
        self._on_error = on_error
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=REACTION_WORKERS, thread_name_prefix="listdetail-reactions"
        )
        self.pending = PendingReactions()
        self._closed = False

    def toggle_reaction(self, item: Item, alias: str) -> Optional[Future]:
        return self._submit(
            item,
            alias,
            lambda: self._remote.toggle_reaction(item.id, alias, item.mode),
        )

    def toggle_upvote(self, item: Item) -> Optional[Future]:
        return self._submit(
            item,
            UPVOTE_ALIAS,
            lambda: self._remote.toggle_upvote(item.id, item.mode),
        )

    def is_pending(self, item: Item, alias: str) -> bool:
        return self.pending.contains(item.id, alias)

    def _submit(self, item: Item, alias: str, call: Callable[[], Item]) -> Optional[Future]:
        if self._closed:
            return None
        if not self.pending.add(item.id, alias):
            LOGGER.debug("Toggle %s on item %s already pending", alias, item.id)
            return None
        try:
            return self._executor.submit(self._run, item, alias, call)
        except RuntimeError:
            # Executor already shut down.
            self.pending.remove(item.id, alias)
            return None

    def _run(self, item: Item, alias: str, call: Callable[[], Item]) -> Optional[Item]:
        try:
            updated = call()
            if self._closed:
                LOGGER.debug("Discarding toggle result for item %s after close", item.id)
                return None
            if not self._store.replace_item(self._list_id, updated.mode, updated):
                LOGGER.debug("Item %s no longer cached; toggle result not stored", updated.id)
            return updated
        except Exception as exc:
            self.pending.remove(item.id, alias)
            error = MutationError(
                f"Toggling {alias} on item {item.id} failed: {exc}",
                item_id=item.id,
                alias=alias,
            )
            error.__cause__ = exc
            if not self._closed:
                self._on_error(error)
            return None
        finally:
            self.pending.remove(item.id, alias)

    def close(self) -> None:
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
