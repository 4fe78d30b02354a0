"""Tests for SignalDetailsNavigator — pure Python, no Qt dependency."""

from fakes import make_item
from listdetail.domain.models import Setup, ViewMode
from listdetail.domain.repositories import IDetailsNavigator
from listdetail.gui.services.details_navigator import (
    EDIT_ITEM,
    EDIT_LIST,
    ITEM_COMMENTS,
    ITEM_FILTER,
    SignalDetailsNavigator,
)


def _record(nav):
    requested = []
    nav.destination_requested.connect(lambda dest, params: requested.append((dest, params)))
    return requested


class TestSignalDetailsNavigator:
    def test_is_a_details_navigator(self):
        assert isinstance(SignalDetailsNavigator(), IDetailsNavigator)

    def test_item_filter_carries_tags_and_setup(self):
        nav = SignalDetailsNavigator()
        requested = _record(nav)
        setup = Setup(mode=ViewMode.QUEUE)

        nav.go_to_item_filter("l1", ["Action", "drama"], setup)

        assert requested == [
            (ITEM_FILTER, {"list_id": "l1", "tags": ("Action", "drama"), "setup": setup})
        ]

    def test_edit_list(self):
        nav = SignalDetailsNavigator()
        requested = _record(nav)

        nav.go_to_edit_list("l1", ViewMode.LIST)

        assert requested == [(EDIT_LIST, {"list_id": "l1", "list_type": ViewMode.LIST})]

    def test_item_comments_and_edit_item(self):
        nav = SignalDetailsNavigator()
        requested = _record(nav)
        item = make_item("i1")

        nav.go_to_item_comments(item)
        nav.go_to_edit_item(item)

        assert requested == [
            (ITEM_COMMENTS, {"item": item}),
            (EDIT_ITEM, {"item": item, "mode": "edit"}),
        ]

    def test_share(self):
        nav = SignalDetailsNavigator()
        shared = []
        nav.share_requested.connect(shared.append)

        nav.share("hello")

        assert shared == ["hello"]

    def test_go_back(self):
        nav = SignalDetailsNavigator()
        backs = []
        nav.back_requested.connect(lambda: backs.append(True))

        nav.go_back()
        nav.go_back()

        assert backs == [True, True]

    def test_no_listeners_is_silent(self):
        nav = SignalDetailsNavigator()
        nav.go_to_edit_list("l1", ViewMode.QUEUE)
        nav.share("x")
        nav.go_back()
