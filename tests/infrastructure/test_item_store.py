"""Tests for InMemoryItemStore."""

from dataclasses import replace

from fakes import make_item, make_items
from listdetail.domain.models import ViewMode
from listdetail.infrastructure.item_store import InMemoryItemStore


LIST = ViewMode.LIST
QUEUE = ViewMode.QUEUE


class TestWrites:
    def test_replace_all_and_append(self):
        store = InMemoryItemStore()
        store.replace_all("l1", LIST, make_items("a", 3))
        store.append("l1", LIST, make_items("b", 2))

        assert [item.id for item in store.get_items("l1", LIST)] == ["a1", "a2", "a3", "b1", "b2"]
        assert store.current_count("l1", LIST) == 5

    def test_keys_are_independent(self):
        store = InMemoryItemStore()
        store.replace_all("l1", LIST, make_items("a", 2))
        store.replace_all("l1", QUEUE, make_items("q", 1, QUEUE))
        store.set_completed("l1", QUEUE, True)

        assert store.current_count("l1", LIST) == 2
        assert store.current_count("l1", QUEUE) == 1
        assert store.is_completed("l1", LIST) is False
        assert store.is_completed("l1", QUEUE) is True

    def test_get_items_returns_copy(self):
        store = InMemoryItemStore()
        store.replace_all("l1", LIST, make_items("a", 1))

        snapshot = store.get_items("l1", LIST)
        snapshot.clear()

        assert store.current_count("l1", LIST) == 1

    def test_replace_item_keeps_position_in_collection(self):
        store = InMemoryItemStore()
        store.replace_all("l1", LIST, make_items("a", 3))

        updated = replace(make_item("a2"), reactions={"heart": 1})
        assert store.replace_item("l1", LIST, updated) is True

        items = store.get_items("l1", LIST)
        assert [item.id for item in items] == ["a1", "a2", "a3"]
        assert items[1].reactions == {"heart": 1}

    def test_replace_item_unknown_id(self):
        store = InMemoryItemStore()
        store.replace_all("l1", LIST, make_items("a", 1))

        assert store.replace_item("l1", LIST, make_item("zz")) is False
        assert store.replace_item("other", LIST, make_item("a1")) is False

    def test_clear_all_resets_every_key(self):
        store = InMemoryItemStore()
        store.replace_all("l1", LIST, make_items("a", 2))
        store.replace_all("l2", QUEUE, make_items("q", 2, QUEUE))
        store.set_completed("l2", QUEUE, True)

        store.clear_all()

        assert store.get_items("l1", LIST) == []
        assert store.get_items("l2", QUEUE) == []
        assert store.is_completed("l2", QUEUE) is False


class TestObservation:
    def test_observe_delivers_current_value_first(self):
        store = InMemoryItemStore()
        store.replace_all("l1", LIST, make_items("a", 2))
        seen = []

        store.observe_items("l1", LIST, lambda items: seen.append([i.id for i in items]))

        assert seen == [["a1", "a2"]]

    def test_observe_completed_defaults_to_false(self):
        store = InMemoryItemStore()
        seen = []

        store.observe_is_completed("l1", LIST, seen.append)
        store.set_completed("l1", LIST, True)

        assert seen == [False, True]

    def test_changes_for_other_keys_are_filtered(self):
        store = InMemoryItemStore()
        seen = []
        store.observe_items("l1", LIST, lambda items: seen.append(len(items)))

        store.replace_all("l1", QUEUE, make_items("q", 4, QUEUE))
        store.replace_all("l2", LIST, make_items("x", 4))
        store.append("l1", LIST, make_items("a", 1))

        assert seen == [0, 1]

    def test_clear_all_notifies_observers(self):
        store = InMemoryItemStore()
        store.replace_all("l1", LIST, make_items("a", 2))
        store.set_completed("l1", LIST, True)
        items_seen, flags_seen = [], []
        store.observe_items("l1", LIST, lambda items: items_seen.append(len(items)))
        store.observe_is_completed("l1", LIST, flags_seen.append)

        store.clear_all()

        assert items_seen == [2, 0]
        assert flags_seen == [True, False]

    def test_cancel_stops_delivery(self):
        store = InMemoryItemStore()
        seen = []
        sub = store.observe_items("l1", LIST, lambda items: seen.append(len(items)))

        sub.cancel()
        sub.cancel()
        store.append("l1", LIST, make_items("a", 1))

        assert seen == [0]
        assert store.items_changed.handler_count == 0

    def test_out_of_order_versions_are_dropped(self):
        store = InMemoryItemStore()
        seen = []
        sub = store.observe_items("l1", LIST, lambda items: seen.append(len(items)))

        key = ("l1", LIST)
        store.items_changed.emit(key, 100, make_items("a", 3))
        store.items_changed.emit(key, 99, make_items("a", 1))

        assert seen == [0, 3]
        sub.cancel()
