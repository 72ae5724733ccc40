"""Tests for drill.events.event_bus — display fan-out bus."""

import asyncio
import logging

from drill.events.event_bus import EventBus
from drill.events.types import DisplayEvent, DisplayEventType


def _make_event(event_type: DisplayEventType = DisplayEventType.STATUS) -> DisplayEvent:
    return DisplayEvent(type=event_type, text="hello")


class TestSubscribe:

    async def test_subscribe_creates_a_new_queue(self, display_bus: EventBus):
        queue = await display_bus.subscribe()
        assert isinstance(queue, asyncio.Queue)

    async def test_subscribe_increments_subscriber_count(self, display_bus: EventBus):
        assert display_bus.subscriber_count == 0
        await display_bus.subscribe()
        await display_bus.subscribe()
        assert display_bus.subscriber_count == 2

    async def test_unsubscribe(self, display_bus: EventBus):
        queue = await display_bus.subscribe()
        await display_bus.unsubscribe(queue)
        assert display_bus.subscriber_count == 0

    async def test_unsubscribe_unknown_queue_is_noop(self, display_bus: EventBus):
        await display_bus.unsubscribe(asyncio.Queue())
        assert display_bus.subscriber_count == 0


class TestPublish:

    async def test_publish_fans_out(self, display_bus: EventBus):
        q1 = await display_bus.subscribe()
        q2 = await display_bus.subscribe()
        event = _make_event()
        display_bus.publish(event)
        assert q1.get_nowait() is event
        assert q2.get_nowait() is event

    async def test_publish_without_subscribers(self, display_bus: EventBus):
        display_bus.publish(_make_event())

    async def test_order_preserved(self, display_bus: EventBus):
        queue = await display_bus.subscribe()
        events = [_make_event(t) for t in DisplayEventType]
        for event in events:
            display_bus.publish(event)
        assert [queue.get_nowait() for _ in events] == events

    async def test_full_queue_drops_for_that_subscriber_only(self, caplog):
        bus = EventBus(maxsize=1)
        slow = await bus.subscribe()
        fast = await bus.subscribe()

        first, second = _make_event(), _make_event(DisplayEventType.ERROR)
        bus.publish(first)
        fast.get_nowait()

        with caplog.at_level(logging.WARNING, logger="drill.events.event_bus"):
            bus.publish(second)

        assert slow.qsize() == 1
        assert slow.get_nowait() is first
        assert fast.get_nowait() is second
        assert "dropping" in caplog.text
