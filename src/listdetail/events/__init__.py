from .bus import EventBus, Subscription
from .domain_events import DomainEvent, ErrorOccurredEvent
from .screen_events import (
    DisableFilterButtonEvent,
    FilterResultAppliedEvent,
    RefreshRequestedEvent,
    ShareRequestedEvent,
)

__all__ = [
    "DisableFilterButtonEvent",
    "DomainEvent",
    "ErrorOccurredEvent",
    "EventBus",
    "FilterResultAppliedEvent",
    "RefreshRequestedEvent",
    "ShareRequestedEvent",
    "Subscription",
]
