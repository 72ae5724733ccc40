"""Drill session state machine.

Holds the target sequence and the current position, and drives one
capture-and-recognize cycle at a time::

    IDLE --start--> AWAITING_MIC --granted--> CAPTURING --final--> EVALUATING --> IDLE
                         |                        |
                      denied                 stop / failure
                         v                        v
                       IDLE                     IDLE

The controller is synchronous and never touches hardware directly except
to release the microphone.  Everything asynchronous (permission, model
loading, recognizer callbacks) arrives as an event through ``handle()``,
which keeps the machine testable without audio devices.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from pydantic import BaseModel

from drill.events.types import FeedbackColor
from drill.recognizer.types import FinalResult, PartialResult, RecognitionOutcome
from drill.session.display import DisplayFeed
from drill.session.match_evaluator import MatchEvaluator
from drill.session.types import (
    CaptureFailed,
    MatchVerdict,
    MicrophoneDenied,
    MicrophoneGranted,
    RecognizerFailed,
    RecognizerReady,
    SessionSnapshot,
    SessionState,
    StartDecision,
)
from drill.targets.types import DrillItem

logger = logging.getLogger(__name__)

LISTENING = "... LISTENING ..."
INITIALIZING = "Initializing recognizer... Please wait."
RECOGNIZER_READY = "Recognizer ready. Click Start."


class SessionController:
    """Owns session state; the only place state transitions happen.

    Collaborators:
      * ``recognizer`` exposes ``is_ready``
      * ``microphone`` exposes ``release()``
      * ``display`` is a DisplayFeed
    """

    def __init__(
        self,
        recognizer: Any,
        microphone: Any,
        display: DisplayFeed,
        evaluator: MatchEvaluator | None = None,
    ) -> None:
        self._recognizer = recognizer
        self._microphone = microphone
        self._display = display
        self._evaluator = evaluator or MatchEvaluator()

        self._targets: tuple[DrillItem, ...] = ()
        self._index: int = 0
        self._state: SessionState = SessionState.IDLE
        self._device_held: bool = False
        self._recognizer_error: str | None = None
        self._last_verdict: MatchVerdict | None = None

        self._handlers: dict[type, Callable[[Any], None]] = {
            MicrophoneGranted: self._on_mic_granted,
            MicrophoneDenied: self._on_mic_denied,
            PartialResult: self._on_partial,
            FinalResult: self._on_final,
            CaptureFailed: self._on_capture_failed,
            RecognizerReady: self._on_recognizer_ready,
            RecognizerFailed: self._on_recognizer_failed,
        }

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_capturing(self) -> bool:
        return self._state == SessionState.CAPTURING

    @property
    def targets(self) -> tuple[DrillItem, ...]:
        return self._targets

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_target(self) -> DrillItem | None:
        if not self._targets:
            return None
        return self._targets[self._index]

    @property
    def last_verdict(self) -> MatchVerdict | None:
        return self._last_verdict

    @property
    def recognizer_error(self) -> str | None:
        return self._recognizer_error

    # ------------------------------------------------------------------
    # Target list
    # ------------------------------------------------------------------

    def load(self, targets: Sequence[DrillItem]) -> None:
        """Replace the target sequence wholesale and show the first item."""
        self.stop()
        self._targets = tuple(targets)
        self._index = 0
        self._recognizer_error = None
        self._last_verdict = None
        logger.info("Session loaded with %d targets", len(self._targets))
        if self._targets:
            self._show_current()

    def clear_targets(self, message: str) -> None:
        """Drop all targets after a failed load and show *message*."""
        self.stop()
        self._targets = ()
        self._index = 0
        self._last_verdict = None
        self._display.show_error(message)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> StartDecision:
        """Request a new capture.  Re-entrant starts are ignored."""
        if self._state != SessionState.IDLE:
            logger.debug("Start ignored in state %s", self._state.value)
            return StartDecision.IGNORED

        if not self._targets:
            logger.info("Start ignored: no targets loaded")
            return StartDecision.IGNORED

        if self._recognizer_error is not None:
            self._display.show_error(self._recognizer_error)
            return StartDecision.IGNORED

        if not self._recognizer.is_ready:
            self._display.show_status(INITIALIZING, FeedbackColor.BLUE)
            return StartDecision.INITIALIZE

        self._state = SessionState.AWAITING_MIC
        self._last_verdict = None
        self._display.clear_error()
        self._display.show_status(LISTENING, FeedbackColor.BLUE)
        return StartDecision.CAPTURE

    def stop(self) -> None:
        """Abort the current attempt, releasing the microphone if held."""
        if self._state in (SessionState.AWAITING_MIC, SessionState.CAPTURING):
            logger.info("Capture stopped from state %s", self._state.value)
            self._release_device()
            self._state = SessionState.IDLE

    def advance(self) -> bool:
        """Move to the next target, wrapping past the last one.

        Only allowed while idle.  Returns True if the index changed.
        """
        if self._state != SessionState.IDLE or not self._targets:
            return False
        self._index = (self._index + 1) % len(self._targets)
        self._last_verdict = None
        self._show_current()
        return True

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def handle(self, event: BaseModel) -> None:
        """Deliver an event into the state machine."""
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unknown session event: {type(event).__name__}")
        handler(event)

    def _on_mic_granted(self, event: MicrophoneGranted) -> None:
        if self._state != SessionState.AWAITING_MIC:
            # Stop raced the permission grant: give the device straight back.
            logger.debug("Microphone granted after stop, releasing")
            self._device_held = True
            self._release_device()
            return
        self._device_held = True
        self._state = SessionState.CAPTURING

    def _on_mic_denied(self, event: MicrophoneDenied) -> None:
        if self._state != SessionState.AWAITING_MIC:
            return
        self._state = SessionState.IDLE
        self._display.show_error(
            f"Mic Error: {event.reason}. "
            "Ensure mic is connected and permissions are granted."
        )

    def _on_partial(self, event: PartialResult) -> None:
        if self._state != SessionState.CAPTURING:
            return
        self._display.show_transcript(event.text)

    def _on_final(self, event: FinalResult) -> None:
        if self._state != SessionState.CAPTURING:
            logger.debug("Final result ignored in state %s", self._state.value)
            return

        self._state = SessionState.EVALUATING
        try:
            target = self._targets[self._index]
            outcome = RecognitionOutcome.from_final(event)
            verdict = self._evaluator.evaluate(target.key, outcome)
            self._last_verdict = verdict
            self._display.show_verdict(verdict)
        finally:
            self._release_device()
            self._state = SessionState.IDLE

    def _on_capture_failed(self, event: CaptureFailed) -> None:
        if self._state not in (SessionState.AWAITING_MIC, SessionState.CAPTURING):
            return
        self._release_device()
        self._state = SessionState.IDLE
        self._display.show_error(f"Capture Error: {event.reason}")

    def _on_recognizer_ready(self, event: RecognizerReady) -> None:
        self._recognizer_error = None
        if self._state == SessionState.IDLE:
            self._display.show_status(RECOGNIZER_READY, FeedbackColor.BLUE)

    def _on_recognizer_failed(self, event: RecognizerFailed) -> None:
        self._recognizer_error = f"Recognizer Error: {event.reason}"
        self._display.show_error(self._recognizer_error)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _release_device(self) -> None:
        if not self._device_held:
            return
        self._device_held = False
        try:
            self._microphone.release()
        except Exception:
            logger.warning("Microphone release failed", exc_info=True)

    def _show_current(self) -> None:
        self._display.show_target(
            self._targets[self._index], self._index, len(self._targets)
        )

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state,
            index=self._index,
            total=len(self._targets),
            target=self.current_target,
            feedback=self._display.feedback,
            feedback_color=self._display.feedback_color,
            transcript=self._display.transcript,
            error=self._display.error,
        )
