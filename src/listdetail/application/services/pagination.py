"""Refresh / load-more driver backed by the remote source and the item store.

The first page is fetched by :meth:`PaginationDriver.refresh`, which replaces
the cached items; subsequent pages are appended by
:meth:`PaginationDriver.load_more`. A page shorter than the page size marks
the collection completed.
"""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Dict, Optional

from listdetail.config import DEFAULT_PAGE_SIZE, PAGINATION_WORKERS
from listdetail.domain.models import Page, Setup, ViewMode
from listdetail.domain.repositories import IItemStore, IRemoteSource
from listdetail.errors import ConfigurationError, TransientFetchError

from .retry import CancellationToken, CancelledError, RetryPolicy

LOGGER = logging.getLogger(__name__)

PageFetcher = Callable[..., Page]


def next_page_number(current_count: int, page_size: int) -> int:
    """Return the 1-based page that follows *current_count* cached items.

    Derived from the local cache size, so it assumes every earlier page was
    full and nothing was removed from the cache in between.
    """
    return int(math.ceil(current_count / page_size)) + 1


def is_last_page(page: Page, page_size: int) -> bool:
    return len(page.items) < page_size


class PaginationDriver:
    """Fetch pages for one screen and commit them to the item store.

    Work submitted through :meth:`submit_refresh` / :meth:`submit_load_more`
    runs on a single-worker executor, so a refresh always finishes (or is
    cancelled) before a load-more queued after it starts.
    """

    def __init__(
        self,
        remote: IRemoteSource,
        store: IItemStore,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        retry_policy: Optional[RetryPolicy] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._remote = remote
        self._store = store
        self._page_size = page_size
        self._retry_policy = retry_policy or RetryPolicy()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=PAGINATION_WORKERS, thread_name_prefix="listdetail-pagination"
        )
        # Held for the duration of each store commit so a cancelled pipeline
        # cannot slip a write in after its token was cancelled.
        self._commit_lock = threading.RLock()
        self._load_more_lock = threading.Lock()
        self._load_more_busy = False

    @property
    def page_size(self) -> int:
        return self._page_size

    def page_fetcher(self, mode: ViewMode) -> PageFetcher:
        fetchers: Dict[ViewMode, PageFetcher] = {
            ViewMode.LIST: self._remote.fetch_list_page,
            ViewMode.QUEUE: self._remote.fetch_queue_page,
        }
        try:
            return fetchers[mode]
        except (KeyError, TypeError):
            raise ConfigurationError(f"No remote handler for view mode {mode!r}") from None

    def cancel_pipeline(self, token: CancellationToken) -> None:
        """Cancel *token* so none of its pending writes reach the store."""
        with self._commit_lock:
            token.cancel()

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    def refresh(self, list_id: str, setup: Setup, token: CancellationToken) -> Optional[Page]:
        """Fetch page 1, retrying until it succeeds, then replace the cache.

        Returns ``None`` if *token* was cancelled first.
        """
        fetcher = self.page_fetcher(setup.mode)
        LOGGER.info("Refreshing items for list %s (%s)", list_id, setup.mode.value)

        def _on_failure(attempt: int, exc: Exception) -> None:
            LOGGER.warning(
                "Refresh attempt %d for list %s failed: %s", attempt, list_id, exc
            )

        try:
            page = self._retry_policy.run(
                lambda: self._fetch(fetcher, list_id, setup, 1),
                token,
                on_failure=_on_failure,
            )
        except CancelledError:
            LOGGER.debug("Refresh for list %s cancelled", list_id)
            return None

        mode = setup.mode
        with self._commit_lock:
            if token.cancelled:
                LOGGER.debug("Dropping stale first page for list %s", list_id)
                return None
            self._store.clear_all()
            self._store.replace_all(list_id, mode, list(page.items))
            self._store.set_completed(list_id, mode, is_last_page(page, self._page_size))
        LOGGER.info("Refreshed list %s with %d items", list_id, len(page.items))
        return page

    def submit_refresh(
        self,
        list_id: str,
        setup: Setup,
        token: CancellationToken,
        *,
        on_started: Optional[Callable[[], None]] = None,
    ) -> Future:
        def _job() -> Optional[Page]:
            if token.cancelled:
                return None
            if on_started is not None:
                on_started()
            return self.refresh(list_id, setup, token)

        return self._executor.submit(_job)

    # ------------------------------------------------------------------
    # Load more
    # ------------------------------------------------------------------
    def load_more(
        self, list_id: str, mode: ViewMode, setup: Setup, token: CancellationToken
    ) -> Optional[Page]:
        """Fetch the page after the cached items and append it.

        Failures are raised as :class:`TransientFetchError` and not retried.
        """
        fetcher = self.page_fetcher(mode)
        page_number = next_page_number(self._store.current_count(list_id, mode), self._page_size)
        LOGGER.info("Loading page %d for list %s", page_number, list_id)
        page = self._fetch(fetcher, list_id, setup, page_number)

        with self._commit_lock:
            if token.cancelled:
                LOGGER.debug("Dropping stale page %d for list %s", page_number, list_id)
                return None
            self._store.append(list_id, mode, list(page.items))
            self._store.set_completed(list_id, mode, is_last_page(page, self._page_size))
        return page

    def submit_load_more(
        self,
        list_id: str,
        mode: ViewMode,
        setup: Setup,
        token: CancellationToken,
    ) -> Optional[Future]:
        """Queue a load-more unless one is already running.

        Returns ``None`` when the request was coalesced into the running one.
        """
        with self._load_more_lock:
            if self._load_more_busy:
                LOGGER.debug("Load-more for list %s already in flight", list_id)
                return None
            self._load_more_busy = True
        try:
            return self._executor.submit(self._run_load_more, list_id, mode, setup, token)
        except BaseException:
            self._release_load_more()
            raise

    def _run_load_more(
        self, list_id: str, mode: ViewMode, setup: Setup, token: CancellationToken
    ) -> Optional[Page]:
        try:
            return self.load_more(list_id, mode, setup, token)
        finally:
            self._release_load_more()

    def _release_load_more(self) -> None:
        with self._load_more_lock:
            self._load_more_busy = False

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _fetch(self, fetcher: PageFetcher, list_id: str, setup: Setup, page_number: int) -> Page:
        try:
            return fetcher(
                list_id,
                setup.search_query,
                setup.sort_option,
                setup.filters,
                page_number,
                self._page_size,
            )
        except Exception as exc:
            raise TransientFetchError(
                f"Fetching page {page_number} of list {list_id} failed: {exc}",
                page=page_number,
            ) from exc

    def shutdown(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
