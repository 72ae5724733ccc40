"""Display surface adapter: remembers what is on screen and publishes it.

The browser renders DisplayEvents streamed from the bus; the feed also
keeps the latest prompt, feedback and transcript so a viewer that
connects mid-session can draw the page from a snapshot.
"""

import logging

from drill.events.event_bus import EventBus
from drill.events.types import DisplayEvent, DisplayEventType, FeedbackColor
from drill.session.types import MatchVerdict
from drill.targets.types import DrillItem

logger = logging.getLogger(__name__)

READY_HINT = 'Click "Start Recognition" when ready.'
RECOGNITION_COMPLETE = "Recognition Complete."


class DisplayFeed:
    """Publishes display updates on an EventBus[DisplayEvent]."""

    def __init__(self, bus: EventBus[DisplayEvent]) -> None:
        self._bus = bus
        self.prompt: str = ""
        self.feedback: str = ""
        self.feedback_color: FeedbackColor | None = None
        self.transcript: str = ""
        self.error: str | None = None

    def show_target(self, item: DrillItem, index: int, total: int) -> None:
        """Show a new prompt and clear any previous verdict or transcript."""
        self.prompt = item.display
        self.error = None
        self._bus.publish(
            DisplayEvent(
                type=DisplayEventType.TARGET,
                text=item.display,
                image_path=item.image_path,
                category=item.category,
                index=index,
                total=total,
            )
        )
        self.show_status("")
        self.show_transcript(READY_HINT)

    def show_status(
        self, text: str, color: FeedbackColor | None = None
    ) -> None:
        self.feedback = text
        self.feedback_color = color
        self._bus.publish(
            DisplayEvent(type=DisplayEventType.STATUS, text=text, color=color)
        )

    def show_transcript(self, text: str) -> None:
        self.transcript = text
        self._bus.publish(DisplayEvent(type=DisplayEventType.TRANSCRIPT, text=text))

    def clear_error(self) -> None:
        """Forget a recoverable error once a new attempt gets going."""
        self.error = None

    def show_verdict(self, verdict: MatchVerdict) -> None:
        self.error = None
        self.feedback = verdict.feedback
        self.feedback_color = verdict.color
        self._bus.publish(
            DisplayEvent(
                type=DisplayEventType.VERDICT,
                text=verdict.feedback,
                color=verdict.color,
                verdict=verdict.verdict.value,
                confidence=verdict.confidence,
            )
        )
        self.show_transcript(RECOGNITION_COMPLETE)

    def show_error(self, text: str) -> None:
        self.error = text
        self.feedback = text
        self.feedback_color = FeedbackColor.RED
        self._bus.publish(
            DisplayEvent(
                type=DisplayEventType.ERROR, text=text, color=FeedbackColor.RED
            )
        )
