"""ViewModelFactory — centralised creation of list details ViewModels.

Holds the collaborators shared by every details screen of the app so that
each screen only needs to name its list.
"""

from __future__ import annotations

from typing import Optional

from listdetail.domain.models import ListEntity, ViewMode
from listdetail.domain.repositories import (
    IDetailsNavigator,
    IItemActions,
    IItemStore,
    IListProvider,
    IMediaCache,
    IRemoteSource,
)
from listdetail.events.bus import EventBus
from listdetail.gui.dispatch import Dispatcher
from listdetail.gui.viewmodels.list_details_viewmodel import ListDetailsViewModel
from listdetail.settings import ScreenSettings, default_settings


class ViewModelFactory:
    """Centrally creates ViewModels for list details screens."""

    def __init__(
        self,
        remote: IRemoteSource,
        store: IItemStore,
        list_provider: IListProvider,
        event_bus: EventBus,
        *,
        settings: Optional[ScreenSettings] = None,
        item_actions: Optional[IItemActions] = None,
        navigator: Optional[IDetailsNavigator] = None,
        media_cache: Optional[IMediaCache] = None,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        self._remote = remote
        self._store = store
        self._list_provider = list_provider
        self._event_bus = event_bus
        self._settings = settings or default_settings()
        self._item_actions = item_actions
        self._navigator = navigator
        self._media_cache = media_cache
        self._dispatcher = dispatcher

    def create_list_details_vm(
        self,
        list_id: str,
        *,
        mode: ViewMode = ViewMode.LIST,
        list_entity: Optional[ListEntity] = None,
    ) -> ListDetailsViewModel:
        return ListDetailsViewModel(
            list_id,
            self._remote,
            self._store,
            self._list_provider,
            self._event_bus,
            mode=mode,
            list_entity=list_entity,
            item_actions=self._item_actions,
            navigator=self._navigator,
            media_cache=self._media_cache,
            dispatcher=self._dispatcher,
            page_size=self._settings.page_size,
            retry_policy=self._settings.refresh_retry_policy(),
            list_retry_policy=self._settings.list_retry_policy(),
        )
