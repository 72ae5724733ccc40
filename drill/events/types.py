"""Pydantic models for updates pushed to the display surface."""

import time
from enum import Enum

from pydantic import BaseModel, Field


class DisplayEventType(str, Enum):
    """Which region of the drill page an update targets."""

    TARGET = "target"
    STATUS = "status"
    TRANSCRIPT = "transcript"
    VERDICT = "verdict"
    ERROR = "error"


class FeedbackColor(str, Enum):
    GREEN = "green"
    RED = "red"
    BLUE = "blue"


class DisplayEvent(BaseModel):
    """A single update for the browser.

    Fields are populated depending on the type:
      - target: text (prompt), image_path, category, index, total
      - status / error: text, color
      - transcript: text (partial transcript or status line)
      - verdict: text (feedback), color, verdict, confidence
    """

    type: DisplayEventType
    text: str = ""
    color: FeedbackColor | None = None
    timestamp: float = Field(default_factory=time.time)

    # target
    image_path: str | None = None
    category: str | None = None
    index: int | None = None
    total: int | None = None

    # verdict
    verdict: str | None = None
    confidence: float | None = None
