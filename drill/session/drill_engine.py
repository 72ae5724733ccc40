"""Async orchestrator: owns the session controller and its collaborators.

The DrillEngine loads the target file, keeps the recognizer's grammar in
step with it, and runs each capture as an asyncio task.  Blocking work
(model loading, opening the microphone, reading and decoding audio)
runs in worker threads; every result comes back to the event loop and is
delivered to the SessionController as an event.
"""

import asyncio
import logging
from pathlib import Path

from drill.audio.microphone import MicrophoneCapture
from drill.config import TARGET_FILE
from drill.errors import (
    ConfigFormatError,
    ConfigLoadError,
    MicrophoneAccessError,
    RecognizerInitError,
)
from drill.events.event_bus import EventBus
from drill.events.types import DisplayEvent
from drill.recognizer.types import FinalResult, PartialResult
from drill.recognizer.vosk_recognizer import VoskRecognizer
from drill.session.controller import SessionController
from drill.session.display import DisplayFeed
from drill.session.match_evaluator import MatchEvaluator
from drill.session.types import (
    CaptureFailed,
    MicrophoneDenied,
    MicrophoneGranted,
    RecognizerFailed,
    RecognizerReady,
    SessionSnapshot,
    SessionState,
    StartDecision,
)
from drill.targets.grammar import build_grammar
from drill.targets.parser import load_targets

logger = logging.getLogger(__name__)


class DrillEngine:
    """Drives drill sessions end to end."""

    def __init__(
        self,
        display_bus: EventBus[DisplayEvent],
        *,
        target_file: Path | None = None,
        model_path: str | None = None,
        threshold: float | None = None,
    ) -> None:
        self._target_file = Path(target_file or TARGET_FILE)
        self._display = DisplayFeed(display_bus)
        self._microphone = MicrophoneCapture()
        self._recognizer = VoskRecognizer(model_path=model_path)
        self._controller = SessionController(
            recognizer=self._recognizer,
            microphone=self._microphone,
            display=self._display,
            evaluator=MatchEvaluator(threshold),
        )

        self._capture_task: asyncio.Task | None = None
        self._init_task: asyncio.Task | None = None
        self._load_error: str | None = None

    async def start(self) -> None:
        """Probe the microphone and load the target list."""
        await self._microphone.start()
        await self.reload()
        logger.info(
            "Drill engine started (targets=%d, mic=%s)",
            len(self._controller.targets),
            self._microphone.is_available,
        )

    async def stop(self) -> None:
        """Cancel any capture in progress and release the device."""
        self._controller.stop()
        await self._cancel_task(self._capture_task)
        self._capture_task = None
        await self._cancel_task(self._init_task)
        self._init_task = None
        await self._microphone.stop()
        self._recognizer.close()
        logger.info("Drill engine stopped")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def controller(self) -> SessionController:
        return self._controller

    @property
    def display(self) -> DisplayFeed:
        return self._display

    @property
    def state(self) -> SessionState:
        return self._controller.state

    @property
    def target_file(self) -> Path:
        return self._target_file

    @property
    def target_count(self) -> int:
        return len(self._controller.targets)

    @property
    def load_error(self) -> str | None:
        return self._load_error

    @property
    def mic_available(self) -> bool:
        return self._microphone.is_available

    @property
    def model_available(self) -> bool:
        return self._recognizer.model_available

    @property
    def recognizer_ready(self) -> bool:
        return self._recognizer.is_ready

    def snapshot(self) -> SessionSnapshot:
        return self._controller.snapshot()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def reload(self) -> bool:
        """Re-read the target file and rebuild the grammar wholesale.

        Load failures are shown on the display and logged; they never
        raise.  Returns True if targets were loaded.
        """
        self._controller.stop()
        await self._drain_capture()
        await self._cancel_task(self._init_task)
        self._init_task = None

        try:
            targets = await asyncio.to_thread(load_targets, self._target_file)
        except ConfigFormatError as exc:
            self._load_error = f"Error: {exc}"
            logger.warning("Target file %s unusable: %s", self._target_file, exc)
            self._controller.clear_targets(self._load_error)
            return False
        except ConfigLoadError as exc:
            self._load_error = f"Target Error: {exc}"
            logger.error("Target loading error: %s", exc)
            self._controller.clear_targets(self._load_error)
            return False

        self._load_error = None
        self._recognizer.configure(build_grammar(targets))
        self._controller.load(targets)
        return True

    async def request_start(self) -> StartDecision:
        await self._drain_capture()
        decision = self._controller.start()
        if decision == StartDecision.INITIALIZE:
            if self._init_task is None or self._init_task.done():
                self._init_task = asyncio.create_task(self._initialize_recognizer())
        elif decision == StartDecision.CAPTURE:
            self._capture_task = asyncio.create_task(self._capture())
        return decision

    async def request_stop(self) -> None:
        """Stop the attempt.  The capture task winds down on its own.

        The task is not cancelled: if it is still opening the microphone
        it must see the grant arrive after the stop so the device is
        handed straight back.
        """
        self._controller.stop()

    async def request_advance(self) -> bool:
        return self._controller.advance()

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    async def _initialize_recognizer(self) -> None:
        try:
            built = await asyncio.to_thread(self._recognizer.initialize)
        except RecognizerInitError as exc:
            logger.error("Recognizer initialization failed: %s", exc)
            self._controller.handle(RecognizerFailed(reason=str(exc)))
            return
        if not built:
            logger.info("Recognizer build superseded by a reload")
            return
        self._controller.handle(RecognizerReady())

    async def _capture(self) -> None:
        """One attempt: acquire the mic, stream to the recognizer, stop on final."""
        try:
            await asyncio.to_thread(self._microphone.acquire)
        except MicrophoneAccessError as exc:
            logger.warning("Microphone access failed: %s", exc)
            self._controller.handle(MicrophoneDenied(reason=str(exc)))
            return

        self._controller.handle(MicrophoneGranted())
        self._recognizer.reset()

        try:
            while self._controller.is_capturing:
                ended, result = await asyncio.to_thread(self._listen_once)
                if ended or not self._controller.is_capturing:
                    break
                if result is None:
                    continue
                self._controller.handle(result)
                if isinstance(result, FinalResult):
                    break
        except asyncio.CancelledError:
            logger.debug("Capture task cancelled")
            raise
        except Exception as exc:
            logger.warning("Capture failed", exc_info=True)
            self._controller.handle(CaptureFailed(reason=str(exc) or type(exc).__name__))
        finally:
            # Covers cancellation mid-stream; no-op if already released.
            self._controller.stop()

    def _listen_once(self) -> tuple[bool, PartialResult | FinalResult | None]:
        """Read one chunk and feed it to the recognizer.  Blocking.

        Returns ``(ended, result)``; ``ended`` is True once the device
        has been released.
        """
        chunk = self._microphone.read_chunk()
        if chunk is None:
            return True, None
        return False, self._recognizer.accept(chunk)

    async def _drain_capture(self) -> None:
        """Wait for a stopped capture task to finish winding down.

        Only waits while the controller is idle; a live capture is left
        alone.
        """
        task = self._capture_task
        if task is None:
            return
        if not task.done():
            if self._controller.state != SessionState.IDLE:
                return
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._capture_task = None

    @staticmethod
    async def _cancel_task(task: asyncio.Task | None) -> None:
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
