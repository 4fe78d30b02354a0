from abc import ABC, abstractmethod
from typing import Callable, FrozenSet, List, Tuple

from .models import Item, ListEntity, Page, Setup, ViewMode


class IRemoteSource(ABC):
    """Paged remote API for list items. Every call may raise on network errors."""

    @abstractmethod
    def fetch_list_page(
        self,
        list_id: str,
        query: str,
        sort: str,
        filters: FrozenSet[str],
        page: int,
        page_size: int,
    ) -> Page:
        """Fetch one page of the list's published items (1-based *page*)."""
        pass

    @abstractmethod
    def fetch_queue_page(
        self,
        list_id: str,
        query: str,
        sort: str,
        filters: FrozenSet[str],
        page: int,
        page_size: int,
    ) -> Page:
        """Fetch one page of the list's queued items (1-based *page*)."""
        pass

    @abstractmethod
    def toggle_upvote(self, item_id: str, mode: ViewMode) -> Item:
        """Toggle the current user's upvote and return the updated item."""
        pass

    @abstractmethod
    def toggle_reaction(self, item_id: str, alias: str, mode: ViewMode) -> Item:
        """Toggle the reaction *alias* and return the updated item."""
        pass


class StoreSubscription(ABC):
    @abstractmethod
    def cancel(self) -> None:
        pass


class IItemStore(ABC):
    """Local cache of items keyed by (list id, view mode)."""

    @abstractmethod
    def observe_items(
        self, list_id: str, mode: ViewMode, handler: Callable[[List[Item]], None]
    ) -> StoreSubscription:
        """Call *handler* with the current items now and after every change."""
        pass

    @abstractmethod
    def observe_is_completed(
        self, list_id: str, mode: ViewMode, handler: Callable[[bool], None]
    ) -> StoreSubscription:
        """Call *handler* with the completion flag now and after every change."""
        pass

    @abstractmethod
    def get_items(self, list_id: str, mode: ViewMode) -> List[Item]:
        pass

    @abstractmethod
    def is_completed(self, list_id: str, mode: ViewMode) -> bool:
        pass

    @abstractmethod
    def current_count(self, list_id: str, mode: ViewMode) -> int:
        pass

    @abstractmethod
    def replace_all(self, list_id: str, mode: ViewMode, items: List[Item]) -> None:
        pass

    @abstractmethod
    def append(self, list_id: str, mode: ViewMode, items: List[Item]) -> None:
        pass

    @abstractmethod
    def replace_item(self, list_id: str, mode: ViewMode, item: Item) -> bool:
        """Swap the cached item with the same id for *item*.

        Returns ``False`` when no such item is cached.
        """
        pass

    @abstractmethod
    def set_completed(self, list_id: str, mode: ViewMode, completed: bool) -> None:
        pass

    @abstractmethod
    def clear_all(self) -> None:
        pass


class IListProvider(ABC):
    @abstractmethod
    def get_list_by_id(self, list_id: str, mode: ViewMode) -> ListEntity:
        pass

    @abstractmethod
    def report_list(self, list_entity: ListEntity, complaint: str) -> None:
        pass


class IItemActions(ABC):
    """Item mutations whose results reach the screen through the item store."""

    @abstractmethod
    def change_item_type(self, item: Item) -> None:
        pass

    @abstractmethod
    def delete_item(self, item: Item) -> None:
        pass


class IMediaCache(ABC):
    @abstractmethod
    def save(self, url: str, name: str) -> None:
        """Download *url* into the local cache under *name*."""
        pass


class IDetailsNavigator(ABC):
    """Screen transitions and system share requested by a details screen."""

    @abstractmethod
    def go_to_item_filter(self, list_id: str, tags: Tuple[str, ...], setup: Setup) -> None:
        """Open the filter dialog for the list's *tags*, preset with *setup*."""
        pass

    @abstractmethod
    def go_to_edit_list(self, list_id: str, list_type: ViewMode) -> None:
        pass

    @abstractmethod
    def go_to_item_comments(self, item: Item) -> None:
        pass

    @abstractmethod
    def go_to_edit_item(self, item: Item) -> None:
        pass

    @abstractmethod
    def share(self, text: str) -> None:
        pass

    @abstractmethod
    def go_back(self) -> None:
        """Leave the details screen."""
        pass
