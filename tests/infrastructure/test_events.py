import threading
from dataclasses import dataclass

from listdetail.events import (
    DomainEvent,
    FilterResultAppliedEvent,
    RefreshRequestedEvent,
)
from listdetail.events.bus import EventBus
from listdetail.domain.models import Setup


@dataclass(frozen=True)
class SimpleEvent(DomainEvent):
    payload: str = ""


def test_sync_subscribe_publish():
    bus = EventBus()
    received = []

    bus.subscribe(SimpleEvent, lambda event: received.append(event.payload))
    bus.publish(SimpleEvent(payload="hello"))

    assert received == ["hello"]


def test_async_subscribe_publish():
    bus = EventBus()
    received = []
    done = threading.Event()

    def handler(event):
        received.append(event.payload)
        done.set()

    bus.subscribe(SimpleEvent, handler, async_=True)
    bus.publish(SimpleEvent(payload="world"))

    assert done.wait(2.0)
    assert received == ["world"]
    bus.shutdown()


def test_handlers_keyed_by_exact_type():
    bus = EventBus()
    refreshes, filters = [], []
    bus.subscribe(RefreshRequestedEvent, refreshes.append)
    bus.subscribe(FilterResultAppliedEvent, filters.append)

    setup = Setup(search_query="cats")
    bus.publish(FilterResultAppliedEvent(setup=setup))

    assert refreshes == []
    assert [event.setup for event in filters] == [setup]


def test_subscription_cancel_unsubscribes():
    bus = EventBus()
    received = []
    sub = bus.subscribe(SimpleEvent, received.append)
    assert bus.subscriber_count(SimpleEvent) == 1

    sub.cancel()
    bus.publish(SimpleEvent(payload="late"))

    assert received == []
    assert bus.subscriber_count(SimpleEvent) == 0
    assert sub.active is False


def test_cancel_twice_is_harmless():
    bus = EventBus()
    sub = bus.subscribe(SimpleEvent, lambda e: None)
    sub.cancel()
    sub.cancel()
    assert bus.subscriber_count(SimpleEvent) == 0


def test_failing_handler_does_not_block_others():
    bus = EventBus()
    received = []

    def bad(event):
        raise RuntimeError("boom")

    bus.subscribe(SimpleEvent, bad)
    bus.subscribe(SimpleEvent, lambda event: received.append(event.payload))

    bus.publish(SimpleEvent(payload="x"))

    assert received == ["x"]


def test_publish_async_returns_futures():
    bus = EventBus()
    received = []
    bus.subscribe(SimpleEvent, lambda event: received.append(event.payload))

    futures = bus.publish_async(SimpleEvent(payload="p"))
    for future in futures:
        future.result(timeout=2.0)

    assert received == ["p"]
    bus.shutdown()
