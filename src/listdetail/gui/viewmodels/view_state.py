"""Snapshots emitted by the list details screen.

``ViewState`` is a closed union: a renderer handles each of the six cases
and nothing else. Every snapshot is immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from listdetail.domain.models import Item, ListEntity, Setup


class ViewStateKind(Enum):
    DEFAULT = "default"
    LOADING = "loading"
    LOADING_DIALOG = "loading_dialog"
    DETAILED = "detailed"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class DefaultState:
    list_entity: ListEntity
    setup: Setup
    kind = ViewStateKind.DEFAULT


@dataclass(frozen=True)
class LoadingState:
    setup: Optional[Setup] = None
    kind = ViewStateKind.LOADING


@dataclass(frozen=True)
class LoadingDialogState:
    kind = ViewStateKind.LOADING_DIALOG


@dataclass(frozen=True)
class DetailedState:
    list_entity: Optional[ListEntity]
    setup: Setup
    items: Tuple[Item, ...]
    is_completed: bool
    kind = ViewStateKind.DETAILED


@dataclass(frozen=True)
class ErrorState:
    cause: BaseException
    kind = ViewStateKind.ERROR


@dataclass(frozen=True)
class InfoState:
    code: str
    kind = ViewStateKind.INFO


ViewState = Union[
    DefaultState,
    LoadingState,
    LoadingDialogState,
    DetailedState,
    ErrorState,
    InfoState,
]

VIEW_STATE_TYPES = (
    DefaultState,
    LoadingState,
    LoadingDialogState,
    DetailedState,
    ErrorState,
    InfoState,
)


def renumber(items) -> Tuple[Item, ...]:
    """Return copies of *items* with dense 1-based positions in their current order."""
    return tuple(item.with_position(index) for index, item in enumerate(items, start=1))
