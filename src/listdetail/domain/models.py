from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

from listdetail.config import DEFAULT_SORT_OPTION, UPVOTE_ALIAS


class ViewMode(str, Enum):
    """Which collection of a list the details screen is showing."""

    LIST = "list"
    QUEUE = "queue"


@dataclass(frozen=True)
class ItemImages:
    thumbnail: Optional[str] = None
    large: Optional[str] = None


@dataclass(frozen=True)
class Item:
    id: str
    mode: ViewMode
    title: str = ""
    description: str = ""
    # Dense 1-based display position, assigned when a snapshot is projected.
    position: int = 0
    # Reaction alias to count. Stored read-only and left out of the hash.
    reactions: Mapping[str, int] = field(default_factory=dict, hash=False)
    images: Optional[ItemImages] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "reactions", MappingProxyType(dict(self.reactions)))

    def with_position(self, position: int) -> Item:
        return replace(self, position=position)

    @property
    def upvotes(self) -> int:
        return self.reactions.get(UPVOTE_ALIAS, 0)


@dataclass(frozen=True)
class ListEntity:
    """The list a details screen is opened for."""

    id: str
    title: str = ""
    description: str = ""
    list_type: ViewMode = ViewMode.LIST
    item_tags: Tuple[str, ...] = ()
    share_url: str = ""

    @property
    def item_tags_by_alpha(self) -> Tuple[str, ...]:
        return tuple(sorted(self.item_tags, key=str.casefold))


@dataclass(frozen=True)
class Page:
    """One fetched slice of items."""

    items: Tuple[Item, ...] = ()
    is_completed: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Setup:
    """View configuration of a details screen.

    Instances are never edited in place; use :meth:`with_mode` or
    :func:`dataclasses.replace` to derive a new one.
    """

    mode: ViewMode = ViewMode.LIST
    search_query: str = ""
    sort_option: str = DEFAULT_SORT_OPTION
    filters: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", frozenset(self.filters))

    def with_mode(self, mode: ViewMode) -> Setup:
        return replace(self, mode=mode)
