"""ListDetailsViewModel — pure Python, no Qt dependency.

Drives the list details screen: it merges setup changes, pagination,
reaction toggles, item actions and cross-screen events into one ordered
stream of :mod:`view_state` snapshots, delivered through a dispatcher on the
output (UI) context.

The merged pipeline lives in a :class:`_PipelineSession`. Any error surfaced
to the screen emits an ``ErrorState`` and replaces the session with a fresh
one, so a single failure never stops the screen from reacting. ``InfoState``
snapshots and list-entity ``DefaultState`` updates bypass the session and
survive restarts.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from listdetail.application.services.pagination import PaginationDriver
from listdetail.application.services.reaction_tracker import ReactionToggleTracker
from listdetail.application.services.retry import (
    CancellationToken,
    CancelledError,
    RetryPolicy,
)
from listdetail.config import (
    ACTION_WORKERS,
    DEFAULT_PAGE_SIZE,
    EDIT_ITEM_IMAGE_CACHE_NAME,
    INFO_REPORTED,
    LIST_FETCH_RETRY_INTERVAL_SEC,
)
from listdetail.domain.models import Item, ListEntity, Setup, ViewMode
from listdetail.domain.repositories import (
    IDetailsNavigator,
    IItemActions,
    IItemStore,
    IListProvider,
    IMediaCache,
    IRemoteSource,
    StoreSubscription,
)
from listdetail.errors import (
    ConfigurationError,
    ListUnavailableError,
    MutationError,
)
from listdetail.errors.handler import ErrorHandler, ErrorSeverity
from listdetail.events.bus import EventBus
from listdetail.events.screen_events import (
    DisableFilterButtonEvent,
    FilterResultAppliedEvent,
    RefreshRequestedEvent,
    ShareRequestedEvent,
)
from listdetail.gui.dispatch import Dispatcher, SerialDispatcher
from listdetail.gui.services.sharing import item_to_content, list_to_content
from listdetail.gui.viewmodels.base import BaseViewModel
from listdetail.gui.viewmodels.setup_state import SetupObserver, SetupState
from listdetail.gui.viewmodels.signal import Connection, ObservableProperty, Signal
from listdetail.gui.viewmodels.view_state import (
    DefaultState,
    DetailedState,
    ErrorState,
    InfoState,
    LoadingDialogState,
    LoadingState,
    ViewState,
    renumber,
)


class _Projection:
    """Combines the store's item and completion streams into ``DetailedState``.

    Nothing is emitted until both streams have produced a value, and an empty,
    not-yet-completed collection is suppressed.
    """

    def __init__(
        self,
        store: IItemStore,
        list_id: str,
        setup: Setup,
        list_entity: Callable[[], Optional[ListEntity]],
        emit: Callable[[ViewState], None],
    ) -> None:
        self._setup = setup
        self._list_entity = list_entity
        self._emit = emit
        self._items: Optional[List[Item]] = None
        self._completed: Optional[bool] = None
        self._lock = threading.RLock()
        self._subscriptions: List[StoreSubscription] = []
        self._subscriptions.append(store.observe_items(list_id, setup.mode, self._on_items))
        self._subscriptions.append(
            store.observe_is_completed(list_id, setup.mode, self._on_completed)
        )

    def _on_items(self, items: List[Item]) -> None:
        with self._lock:
            self._items = items
            self._project()

    def _on_completed(self, completed: bool) -> None:
        with self._lock:
            self._completed = completed
            self._project()

    def _project(self) -> None:
        if self._items is None or self._completed is None:
            return
        if not self._items and not self._completed:
            return
        self._emit(
            DetailedState(
                list_entity=self._list_entity(),
                setup=self._setup,
                items=renumber(self._items),
                is_completed=self._completed,
            )
        )

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()


class _PipelineSession:
    """One run of the merged setup → refresh → projection pipeline."""

    def __init__(self, owner: ListDetailsViewModel) -> None:
        self._owner = owner
        self._lock = threading.RLock()
        self._closed = False
        self._setup: Optional[Setup] = None
        self._token: Optional[CancellationToken] = None
        self._projection: Optional[_Projection] = None
        self._setup_observer: Optional[SetupObserver] = None
        self._replacing: Optional[Connection] = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pipeline_token(self) -> Optional[CancellationToken]:
        return self._token

    def start(self, seen: Optional[Setup] = None) -> None:
        self._replacing = self._owner._setup_state.about_to_change.connect(
            self._on_setup_replacing
        )
        self._setup_observer = self._owner._setup_state.observe_changes(
            self._on_setup_changed, seen=seen
        )

    def reload(self) -> None:
        """Re-run refresh and projection for the current setup."""
        with self._lock:
            setup = self._setup
        if setup is not None:
            self._run_pipeline(setup)

    def _on_setup_replacing(self, old: Setup, new: Setup) -> None:
        # Nothing of the old setup may commit once the new one is current.
        with self._lock:
            if self._token is not None:
                self._owner._driver.cancel_pipeline(self._token)

    def _on_setup_changed(self, setup: Setup) -> None:
        with self._lock:
            self._setup = setup
        self._run_pipeline(setup)

    def _run_pipeline(self, setup: Setup) -> None:
        owner = self._owner
        with self._lock:
            if self._closed:
                return
            self._cancel_current()
            token = CancellationToken()
            self._token = token

        def _still_current() -> bool:
            return not self._closed and not token.cancelled

        try:
            future = owner._driver.submit_refresh(
                owner._list_id,
                setup,
                token,
                on_started=lambda: owner._post_state(LoadingState(setup), guard=_still_current),
            )
        except RuntimeError:
            # Pagination executor already shut down by dispose().
            owner._logger.debug("Refresh for list %s not scheduled", owner._list_id)
            return
        future.add_done_callback(lambda f: self._on_refreshed(f, setup, token))

    def _on_refreshed(self, future: Future, setup: Setup, token: CancellationToken) -> None:
        if future.cancelled() or token.cancelled or self._closed:
            return
        error = future.exception()
        if error is not None:
            if not isinstance(error, CancelledError):
                self._owner._handle_error(error, session=self)
            return
        if future.result() is None:
            return

        def _still_current() -> bool:
            return not self._closed and not token.cancelled

        with self._lock:
            if not _still_current():
                return
            self._projection = _Projection(
                self._owner._store,
                self._owner._list_id,
                setup,
                lambda: self._owner.list_entity,
                lambda state: self._owner._post_state(state, guard=_still_current),
            )

    def _cancel_current(self) -> None:
        if self._token is not None:
            self._owner._driver.cancel_pipeline(self._token)
            self._token = None
        if self._projection is not None:
            self._projection.close()
            self._projection = None

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._replacing is not None:
                self._replacing.disconnect()
                self._replacing = None
            if self._setup_observer is not None:
                self._setup_observer.cancel()
                self._setup_observer = None
            self._cancel_current()


class ListDetailsViewModel(BaseViewModel):
    """Details screen ViewModel for one list.

    Snapshots are published through ``state_changed``; the latest one is
    also available as ``state.value``.
    """

    def __init__(
        self,
        list_id: str,
        remote: IRemoteSource,
        store: IItemStore,
        list_provider: IListProvider,
        event_bus: EventBus,
        *,
        mode: ViewMode = ViewMode.LIST,
        list_entity: Optional[ListEntity] = None,
        item_actions: Optional[IItemActions] = None,
        navigator: Optional[IDetailsNavigator] = None,
        media_cache: Optional[IMediaCache] = None,
        dispatcher: Optional[Dispatcher] = None,
        error_handler: Optional[ErrorHandler] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        retry_policy: Optional[RetryPolicy] = None,
        list_retry_policy: Optional[RetryPolicy] = None,
        pagination_executor: Optional[Executor] = None,
        reaction_executor: Optional[Executor] = None,
        action_executor: Optional[Executor] = None,
    ) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        self._list_id = list_id
        self._mode = mode
        self._selected_mode = mode
        self._store = store
        self._list_provider = list_provider
        self._item_actions = item_actions
        self._navigator = navigator
        self._media_cache = media_cache
        self._owned_dispatcher: Optional[SerialDispatcher] = None
        if dispatcher is None:
            dispatcher = self._owned_dispatcher = SerialDispatcher()
        self._dispatcher = dispatcher
        self._error_handler = error_handler or ErrorHandler(self._logger, event_bus)
        self._list_retry_policy = list_retry_policy or RetryPolicy(
            interval=LIST_FETCH_RETRY_INTERVAL_SEC
        )

        self._driver = PaginationDriver(
            remote,
            store,
            page_size=page_size,
            retry_policy=retry_policy,
            executor=pagination_executor,
        )
        self._tracker = ReactionToggleTracker(
            list_id,
            remote,
            store,
            on_error=self._handle_error,
            executor=reaction_executor,
        )
        self._owns_action_executor = action_executor is None
        self._action_executor = action_executor or ThreadPoolExecutor(
            max_workers=ACTION_WORKERS, thread_name_prefix="listdetail-actions"
        )

        self._setup_state = SetupState(Setup(mode=mode))
        self._list_entity = ObservableProperty(list_entity, name="list_entity")
        entity_connection = self._list_entity.changed.connect(self._on_list_entity_changed)
        self._list_token: Optional[CancellationToken] = None

        self._lock = threading.RLock()
        self._session: Optional[_PipelineSession] = None
        self._initialized = False
        self._filter_dialog_open = False

        # Observable state
        self.state = ObservableProperty(None, name="state")

        # Signals
        self.state_changed = Signal("state_changed")  # emits every ViewState snapshot

        # Released by dispose() in reverse order.
        if self._owned_dispatcher is not None:
            self.on_dispose(self._owned_dispatcher.shutdown)
        if self._owns_action_executor:
            self.on_dispose(
                lambda: self._action_executor.shutdown(wait=False, cancel_futures=True)
            )
        self.on_dispose(self._driver.shutdown)
        self.on_dispose(self._tracker.close)
        self.on_dispose(entity_connection.disconnect)

        self.subscribe_event(event_bus, FilterResultAppliedEvent, self._on_filter_result)
        self.subscribe_event(event_bus, DisableFilterButtonEvent, self._on_disable_filter_button)
        self.subscribe_event(event_bus, RefreshRequestedEvent, self._on_refresh_requested)
        self.subscribe_event(event_bus, ShareRequestedEvent, self._on_share_requested)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def list_id(self) -> str:
        return self._list_id

    @property
    def list_entity(self) -> Optional[ListEntity]:
        return self._list_entity.value

    @property
    def current_setup(self) -> Setup:
        return self._setup_state.current()

    @property
    def setup_state(self) -> SetupState:
        return self._setup_state

    def is_reaction_pending(self, item: Item, alias: str) -> bool:
        return self._tracker.is_pending(item, alias)

    # ------------------------------------------------------------------
    # Lifecycle intents
    # ------------------------------------------------------------------
    def init(self) -> None:
        """Screen-init intent: publish the list header and start the pipeline."""
        with self._lock:
            if self._initialized or self._disposed:
                return
            self._initialized = True
            entity = self._list_entity.value
            if entity is not None:
                self._post_state(DefaultState(entity, self._setup_state.current()))
            else:
                self._fetch_list_entity()
            self._session = _PipelineSession(self)
            self._session.start()
        self._logger.info("List details screen %s initialised", self._list_id)

    def dispose(self) -> None:
        """Tear down every subscription and background pipeline of the screen."""
        with self._lock:
            if self._disposed:
                return
            super().dispose()
            if self._session is not None:
                self._session.close()
                self._session = None
            if self._list_token is not None:
                self._list_token.cancel()
                self._list_token = None
        self._logger.info("List details screen %s disposed", self._list_id)

    # ------------------------------------------------------------------
    # Pipeline intents
    # ------------------------------------------------------------------
    def change_mode(self, mode: ViewMode) -> None:
        with self._lock:
            if self._disposed:
                return
            self._selected_mode = mode
            self._setup_state.replace_mode(mode)

    def apply_setup(self, setup: Setup) -> None:
        """Adopt a full replacement setup, keeping the locally selected mode."""
        with self._lock:
            if self._disposed:
                return
            self._setup_state.replace(setup.with_mode(self._selected_mode))

    def load_more(self) -> Optional[Future]:
        """Fetch the next page; ignored while a previous load-more is running."""
        with self._lock:
            if self._disposed or self._session is None:
                return None
            token = self._session.pipeline_token
            if token is None:
                return None
            setup = self._setup_state.current()
            future = self._driver.submit_load_more(self._list_id, setup.mode, setup, token)
        if future is not None:
            future.add_done_callback(lambda f: self._on_background_done(f, token))
        return future

    def reload(self) -> None:
        with self._lock:
            if self._session is not None:
                self._session.reload()

    def force_refresh(self) -> None:
        """Re-fetch the list entity; the screen header follows via ``DefaultState``."""
        with self._lock:
            if self._disposed:
                return
            self._fetch_list_entity()

    # ------------------------------------------------------------------
    # Item intents
    # ------------------------------------------------------------------
    def toggle_upvote(self, item: Item) -> Optional[Future]:
        if self._disposed:
            return None
        return self._tracker.toggle_upvote(item)

    def toggle_reaction(self, item: Item, alias: str) -> Optional[Future]:
        if self._disposed:
            return None
        return self._tracker.toggle_reaction(item, alias)

    def change_item_type(self, item: Item) -> Optional[Future]:
        if self._item_actions is None:
            self._logger.warning("No item actions configured; cannot change item %s", item.id)
            return None
        return self._run_item_action(item, self._item_actions.change_item_type, "change type of")

    def delete_item(self, item: Item) -> Optional[Future]:
        if self._item_actions is None:
            self._logger.warning("No item actions configured; cannot delete item %s", item.id)
            return None
        return self._run_item_action(item, self._item_actions.delete_item, "delete")

    def _run_item_action(
        self, item: Item, action: Callable[[Item], None], verb: str
    ) -> Optional[Future]:
        with self._lock:
            if self._disposed:
                return None
            session = self._session
        self._post_state(LoadingDialogState())

        def _job() -> None:
            try:
                action(item)
            except Exception as exc:
                raise MutationError(f"Failed to {verb} item {item.id}: {exc}", item_id=item.id) from exc

        future = self._action_executor.submit(_job)
        future.add_done_callback(lambda f: self._on_background_done(f, session=session))
        return future

    # ------------------------------------------------------------------
    # Side-effect intents
    # ------------------------------------------------------------------
    def report_list(self, complaint: str) -> Optional[Future]:
        entity = self._list_entity.value
        if entity is None or self._disposed:
            return None

        def _job() -> None:
            self._list_provider.report_list(entity, complaint)

        def _done(future: Future) -> None:
            if future.cancelled():
                return
            error = future.exception()
            if error is not None:
                self._handle_error(error)
                return
            self._post_state(InfoState(INFO_REPORTED))

        future = self._action_executor.submit(_job)
        future.add_done_callback(_done)
        return future

    def open_filter(self) -> None:
        entity = self._list_entity.value
        if entity is None or self._navigator is None:
            return
        with self._lock:
            if self._filter_dialog_open:
                return
            self._filter_dialog_open = True
        self._navigator.go_to_item_filter(
            entity.id, entity.item_tags_by_alpha, self._setup_state.current()
        )

    def edit_list(self) -> None:
        entity = self._list_entity.value
        if entity is None or self._navigator is None:
            return
        self._navigator.go_to_edit_list(entity.id, entity.list_type)

    def share_list(self) -> None:
        entity = self._list_entity.value
        if entity is None or self._navigator is None:
            return
        self._navigator.share(list_to_content(entity))

    def start_comment(self, item: Item) -> None:
        if self._navigator is not None:
            self._navigator.go_to_item_comments(item)

    def close(self) -> None:
        if self._navigator is not None:
            self._navigator.go_back()

    def edit_item(self, item: Item) -> Optional[Future]:
        """Cache the item's large image, then open the item editor."""
        if self._disposed:
            return None

        def _job() -> None:
            large = item.images.large if item.images is not None else None
            if large and self._media_cache is not None:
                try:
                    self._media_cache.save(large, EDIT_ITEM_IMAGE_CACHE_NAME)
                except Exception as exc:
                    self._logger.warning("Caching image of item %s failed: %s", item.id, exc)

        def _done(future: Future) -> None:
            if future.cancelled() or self._navigator is None:
                return
            self._dispatcher.post(lambda: self._navigator.go_to_edit_item(item))

        future = self._action_executor.submit(_job)
        future.add_done_callback(_done)
        return future

    # ------------------------------------------------------------------
    # EventBus handlers
    # ------------------------------------------------------------------
    def _on_filter_result(self, event: FilterResultAppliedEvent) -> None:
        if event.setup is not None:
            self.apply_setup(event.setup)

    def _on_disable_filter_button(self, event: DisableFilterButtonEvent) -> None:
        with self._lock:
            self._filter_dialog_open = False

    def _on_refresh_requested(self, event: RefreshRequestedEvent) -> None:
        self.reload()

    def _on_share_requested(self, event: ShareRequestedEvent) -> None:
        if event.item is not None and self._navigator is not None:
            self._navigator.share(item_to_content(event.item))

    # ------------------------------------------------------------------
    # List entity
    # ------------------------------------------------------------------
    def _fetch_list_entity(self) -> None:
        if self._list_token is not None:
            self._list_token.cancel()
        token = CancellationToken()
        self._list_token = token

        def _on_failure(attempt: int, exc: Exception) -> None:
            self._logger.warning("Fetching list %s failed (attempt %d): %s", self._list_id, attempt, exc)

        def _job() -> Optional[ListEntity]:
            try:
                return self._list_retry_policy.run(
                    lambda: self._list_provider.get_list_by_id(self._list_id, self._mode),
                    token,
                    on_failure=_on_failure,
                )
            except CancelledError:
                return None
            except Exception as exc:
                raise ListUnavailableError(f"List {self._list_id} is unavailable: {exc}") from exc

        def _done(future: Future) -> None:
            if future.cancelled() or token.cancelled:
                return
            error = future.exception()
            if error is not None:
                self._handle_error(error)
                return
            entity = future.result()
            if entity is not None:
                self._list_entity.value = entity

        future = self._action_executor.submit(_job)
        future.add_done_callback(_done)

    def _on_list_entity_changed(self, entity: Optional[ListEntity], old) -> None:
        if entity is None or not self._initialized:
            return
        self._post_state(DefaultState(entity, self._setup_state.current()))

    # ------------------------------------------------------------------
    # Output and error channel
    # ------------------------------------------------------------------
    def _post_state(self, state: ViewState, guard: Optional[Callable[[], bool]] = None) -> None:
        def _deliver() -> None:
            if self._disposed:
                return
            if guard is not None and not guard():
                return
            self._publish(state)

        self._dispatcher.post(_deliver)

    def _publish(self, state: ViewState) -> None:
        self.state.value = state
        self.state_changed.emit(state)

    def _on_background_done(
        self,
        future: Future,
        token: Optional[CancellationToken] = None,
        session: Optional[_PipelineSession] = None,
    ) -> None:
        if future.cancelled() or (token is not None and token.cancelled):
            return
        error = future.exception()
        if error is not None and not isinstance(error, CancelledError):
            self._handle_error(error, session=session)

    def _handle_error(self, error: BaseException, session: Optional[_PipelineSession] = None) -> None:
        """Publish ``ErrorState`` for *error* and restart the merged pipeline.

        Errors raised by a session that has already been replaced are dropped.
        """

        def _deliver() -> None:
            with self._lock:
                if self._disposed:
                    return
                if session is not None and session is not self._session:
                    self._logger.debug("Ignoring error from a replaced pipeline: %s", error)
                    return
                severity = (
                    ErrorSeverity.CRITICAL
                    if isinstance(error, ConfigurationError)
                    else ErrorSeverity.ERROR
                )
                self._error_handler.handle(error, severity, context={"list_id": self._list_id})
                self._publish(ErrorState(error))
                self._restart(error)

        self._dispatcher.post(_deliver)

    def _restart(self, cause: BaseException) -> None:
        if self._session is None:
            return
        self._session.close()
        # A setup with no remote handler would fail again immediately; wait
        # for a different one instead of replaying it.
        seen = self._setup_state.current() if isinstance(cause, ConfigurationError) else None
        self._session = _PipelineSession(self)
        self._session.start(seen)
        self._logger.info("Restarted pipeline for list %s after %s", self._list_id, type(cause).__name__)
