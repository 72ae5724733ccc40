"""Pydantic models and enums for the drill session."""

import math
from enum import Enum

from pydantic import BaseModel

from drill.events.types import FeedbackColor
from drill.targets.types import DrillItem


class SessionState(str, Enum):
    """States of the capture-and-recognize cycle."""

    IDLE = "idle"
    AWAITING_MIC = "awaiting_mic"
    CAPTURING = "capturing"
    EVALUATING = "evaluating"


class StartDecision(str, Enum):
    """What the engine must do after a start request."""

    CAPTURE = "capture"
    INITIALIZE = "initialize"
    IGNORED = "ignored"


class Verdict(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    NO_SPEECH = "no_speech"


def confidence_percent(confidence: float) -> int:
    """Round half up, so 0.125 shows as 13%."""
    return math.floor(confidence * 100 + 0.5)


class MatchVerdict(BaseModel):
    """Result of judging one utterance against the current target."""

    verdict: Verdict
    expected: str
    recognized_text: str = ""
    confidence: float = 0.0

    @property
    def is_correct(self) -> bool:
        return self.verdict == Verdict.CORRECT

    @property
    def feedback(self) -> str:
        pct = confidence_percent(self.confidence)
        if self.verdict == Verdict.CORRECT:
            return f"✅ CORRECT! (Confidence: {pct}%)"
        if self.verdict == Verdict.INCORRECT:
            return (
                f'❌ TRY AGAIN. (Heard: "{self.recognized_text}", '
                f"Confidence: {pct}%)"
            )
        return "❌ Failed to recognize speech."

    @property
    def color(self) -> FeedbackColor:
        return FeedbackColor.GREEN if self.is_correct else FeedbackColor.RED


# ---------------------------------------------------------------------------
# Events delivered into SessionController.handle()
# ---------------------------------------------------------------------------


class MicrophoneGranted(BaseModel):
    pass


class MicrophoneDenied(BaseModel):
    reason: str


class CaptureFailed(BaseModel):
    reason: str


class RecognizerReady(BaseModel):
    pass


class RecognizerFailed(BaseModel):
    reason: str


class SessionSnapshot(BaseModel):
    """Everything a freshly connected viewer needs to draw the page."""

    state: SessionState
    index: int
    total: int
    target: DrillItem | None = None
    feedback: str = ""
    feedback_color: FeedbackColor | None = None
    transcript: str = ""
    error: str | None = None
