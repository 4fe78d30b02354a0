"""In-process collaborators shared by the list details tests."""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

from listdetail.config import UPVOTE_ALIAS
from listdetail.domain.models import Item, ListEntity, Page, ViewMode
from listdetail.domain.repositories import IItemActions, IListProvider, IRemoteSource


class InlineExecutor(Executor):
    """Runs submitted work synchronously on the calling thread."""

    def __init__(self) -> None:
        self.shut_down = False

    def submit(self, fn, /, *args, **kwargs) -> Future:
        if self.shut_down:
            raise RuntimeError("cannot schedule new futures after shutdown")
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        self.shut_down = True


class RecordingWaiter:
    """Retry waiter that records delays instead of sleeping."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, token, seconds: float) -> bool:
        self.delays.append(seconds)
        return token.cancelled


def make_item(item_id: str, mode: ViewMode = ViewMode.LIST, **kwargs) -> Item:
    kwargs.setdefault("title", f"Item {item_id}")
    return Item(id=item_id, mode=mode, **kwargs)


def make_items(prefix: str, count: int, mode: ViewMode = ViewMode.LIST) -> List[Item]:
    return [make_item(f"{prefix}{index}", mode) for index in range(1, count + 1)]


FetchCall = Tuple[str, str, str, str, frozenset, int, int]


class FakeRemoteSource(IRemoteSource):
    """Remote source serving scripted pages.

    ``pages[(mode, page)]`` holds the page returned for that request; missing
    pages are empty. ``fail_next`` makes the next N fetches raise.
    """

    def __init__(self, pages: Optional[Dict[Tuple[ViewMode, int], Page]] = None) -> None:
        self.pages: Dict[Tuple[ViewMode, int], Page] = dict(pages or {})
        self.fetch_calls: List[FetchCall] = []
        self.toggle_calls: List[Tuple[str, str, ViewMode]] = []
        self.fail_next = 0
        self.toggle_error: Optional[Exception] = None
        self.before_fetch: Optional[Callable[[FetchCall], None]] = None
        self.before_toggle: Optional[Callable[[str, str], None]] = None
        self._lock = threading.Lock()

    def set_pages(self, mode: ViewMode, *sizes: int, prefix: str = "i") -> None:
        counter = 0
        for number, size in enumerate(sizes, start=1):
            items = []
            for _ in range(size):
                counter += 1
                items.append(make_item(f"{prefix}{counter}", mode))
            self.pages[(mode, number)] = Page(items=items)

    def _fetch(self, kind: str, mode: ViewMode, list_id, query, sort, filters, page, page_size) -> Page:
        call = (kind, list_id, query, sort, frozenset(filters), page, page_size)
        with self._lock:
            self.fetch_calls.append(call)
        if self.before_fetch is not None:
            self.before_fetch(call)
        with self._lock:
            if self.fail_next > 0:
                self.fail_next -= 1
                raise ConnectionError("server unavailable")
        return self.pages.get((mode, page), Page())

    def fetch_list_page(self, list_id, query, sort, filters, page, page_size) -> Page:
        return self._fetch("list", ViewMode.LIST, list_id, query, sort, filters, page, page_size)

    def fetch_queue_page(self, list_id, query, sort, filters, page, page_size) -> Page:
        return self._fetch("queue", ViewMode.QUEUE, list_id, query, sort, filters, page, page_size)

    def _toggle(self, item_id: str, alias: str, mode: ViewMode) -> Item:
        with self._lock:
            self.toggle_calls.append((item_id, alias, mode))
        if self.before_toggle is not None:
            self.before_toggle(item_id, alias)
        if self.toggle_error is not None:
            raise self.toggle_error
        current = None
        for page in self.pages.values():
            for item in page.items:
                if item.id == item_id:
                    current = item
        if current is None:
            current = Item(id=item_id, mode=mode)
        reactions = dict(current.reactions)
        reactions[alias] = reactions.get(alias, 0) + 1
        return replace(current, reactions=reactions)

    def toggle_upvote(self, item_id: str, mode: ViewMode) -> Item:
        return self._toggle(item_id, UPVOTE_ALIAS, mode)

    def toggle_reaction(self, item_id: str, alias: str, mode: ViewMode) -> Item:
        return self._toggle(item_id, alias, mode)


class FakeListProvider(IListProvider):
    def __init__(self, entity: Optional[ListEntity] = None, fail_next: int = 0) -> None:
        self.entity = entity
        self.fail_next = fail_next
        self.get_calls: List[Tuple[str, ViewMode]] = []
        self.reports: List[Tuple[ListEntity, str]] = []
        self.report_error: Optional[Exception] = None

    def get_list_by_id(self, list_id: str, mode: ViewMode) -> ListEntity:
        self.get_calls.append((list_id, mode))
        if self.fail_next > 0:
            self.fail_next -= 1
            raise ConnectionError("list endpoint unavailable")
        return self.entity or ListEntity(id=list_id, title=f"List {list_id}")

    def report_list(self, list_entity: ListEntity, complaint: str) -> None:
        if self.report_error is not None:
            raise self.report_error
        self.reports.append((list_entity, complaint))


class FakeItemActions(IItemActions):
    def __init__(self) -> None:
        self.changed: List[Item] = []
        self.deleted: List[Item] = []
        self.error: Optional[Exception] = None

    def change_item_type(self, item: Item) -> None:
        if self.error is not None:
            raise self.error
        self.changed.append(item)

    def delete_item(self, item: Item) -> None:
        if self.error is not None:
            raise self.error
        self.deleted.append(item)
