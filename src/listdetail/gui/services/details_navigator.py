"""Signal-backed navigator for the list details screen.

The host application connects the signals to its real router and share
sheet. Pure Python, no Qt dependency.
"""

from __future__ import annotations

from typing import Tuple

from listdetail.domain.models import Item, Setup, ViewMode
from listdetail.domain.repositories import IDetailsNavigator
from listdetail.gui.viewmodels.signal import Signal

ITEM_FILTER = "item_filter"
EDIT_LIST = "edit_list"
ITEM_COMMENTS = "item_comments"
EDIT_ITEM = "edit_item"


class SignalDetailsNavigator(IDetailsNavigator):
    def __init__(self) -> None:
        self.destination_requested = Signal("destination_requested")  # emits (destination, params)
        self.share_requested = Signal("share_requested")  # emits (text,)
        self.back_requested = Signal("back_requested")

    def go_to_item_filter(self, list_id: str, tags: Tuple[str, ...], setup: Setup) -> None:
        self.destination_requested.emit(
            ITEM_FILTER, {"list_id": list_id, "tags": tuple(tags), "setup": setup}
        )

    def go_to_edit_list(self, list_id: str, list_type: ViewMode) -> None:
        self.destination_requested.emit(EDIT_LIST, {"list_id": list_id, "list_type": list_type})

    def go_to_item_comments(self, item: Item) -> None:
        self.destination_requested.emit(ITEM_COMMENTS, {"item": item})

    def go_to_edit_item(self, item: Item) -> None:
        # The editor opens in edit mode on the image cached just before.
        self.destination_requested.emit(EDIT_ITEM, {"item": item, "mode": "edit"})

    def share(self, text: str) -> None:
        self.share_requested.emit(text)

    def go_back(self) -> None:
        self.back_requested.emit()
