"""Tests for the view-state snapshots and renumbering."""

import dataclasses

import pytest

from fakes import make_item, make_items
from listdetail.domain.models import Setup
from listdetail.gui.viewmodels.view_state import (
    VIEW_STATE_TYPES,
    DetailedState,
    ErrorState,
    InfoState,
    LoadingState,
    ViewStateKind,
    renumber,
)


def test_renumber_assigns_dense_positions_in_order():
    items = make_items("i", 3)

    numbered = renumber(items)

    assert [item.position for item in numbered] == [1, 2, 3]
    assert [item.id for item in numbered] == ["i1", "i2", "i3"]


def test_renumber_does_not_touch_inputs():
    items = [make_item("a", position=7), make_item("b", position=7)]

    renumber(items)

    assert [item.position for item in items] == [7, 7]


def test_renumber_empty():
    assert renumber([]) == ()


def test_snapshots_are_immutable():
    state = DetailedState(list_entity=None, setup=Setup(), items=(), is_completed=True)
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.is_completed = False


def test_every_state_has_a_distinct_kind():
    kinds = {state_type.kind for state_type in VIEW_STATE_TYPES}
    assert kinds == set(ViewStateKind)


def test_state_equality():
    assert LoadingState(Setup()) == LoadingState(Setup())
    assert InfoState("reported").kind is ViewStateKind.INFO
    error = RuntimeError("x")
    assert ErrorState(error).cause is error


def test_detailed_state_with_reacted_items_is_hashable():
    items = renumber([make_item("a", reactions={"heart": 2}), make_item("b")])
    state = DetailedState(list_entity=None, setup=Setup(), items=items, is_completed=False)
    same = DetailedState(
        list_entity=None,
        setup=Setup(),
        items=renumber([make_item("a", reactions={"heart": 2}), make_item("b")]),
        is_completed=False,
    )

    assert hash(state) == hash(same)
    assert len({state, same}) == 1
