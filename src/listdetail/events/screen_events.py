"""Cross-screen channels consumed by the list details screen."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from listdetail.domain.models import Item, Setup

from .domain_events import DomainEvent


@dataclass(frozen=True)
class FilterResultAppliedEvent(DomainEvent):
    """The filter dialog produced a replacement setup."""

    setup: Optional[Setup] = None


@dataclass(frozen=True)
class DisableFilterButtonEvent(DomainEvent):
    """The filter dialog closed; the filter button may open it again."""


@dataclass(frozen=True)
class RefreshRequestedEvent(DomainEvent):
    """Another screen changed the list items; reload the first page."""


@dataclass(frozen=True)
class ShareRequestedEvent(DomainEvent):
    item: Optional[Item] = None
