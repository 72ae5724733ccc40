"""Display events and the bus that carries them."""

from drill.events.event_bus import EventBus
from drill.events.types import DisplayEvent, DisplayEventType, FeedbackColor

__all__ = [
    "DisplayEvent",
    "DisplayEventType",
    "EventBus",
    "FeedbackColor",
]
