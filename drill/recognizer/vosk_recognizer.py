"""Offline speech recognizer backed by Vosk, restricted to a grammar.

The model is loaded lazily by ``initialize()`` (slow, run it in a worker
thread) and cached; the KaldiRecognizer is rebuilt wholesale whenever
the grammar changes.  Partial grammar updates are not supported.
"""

import json
import logging
from pathlib import Path

import vosk

from drill.config import MODEL_PATH, SAMPLE_RATE
from drill.errors import RecognizerInitError
from drill.recognizer.types import Alternative, FinalResult, PartialResult
from drill.targets.grammar import Grammar

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def parse_final_payload(payload: dict) -> FinalResult:
    """Convert a Vosk final-result dict into a FinalResult.

    Explicit ``alternatives`` (present when max alternatives is set) are
    used as-is with their ``conf``/``confidence`` clamped to [0, 1].
    Otherwise a single alternative is derived from ``text`` with the mean
    per-word ``conf`` as its confidence.  Empty text yields no
    alternatives.
    """
    text = (payload.get("text") or "").strip()

    raw_alternatives = payload.get("alternatives")
    if raw_alternatives:
        alternatives = []
        for alt in raw_alternatives:
            alt_text = (alt.get("text") or "").strip()
            if not alt_text:
                continue
            conf = alt.get("conf", alt.get("confidence", 0.0))
            alternatives.append(Alternative(text=alt_text, confidence=_clamp(conf)))
        if not text and alternatives:
            text = alternatives[0].text
        return FinalResult(text=text, alternatives=alternatives)

    if not text:
        return FinalResult(text="")

    words = payload.get("result") or []
    confs = [w["conf"] for w in words if "conf" in w]
    confidence = _clamp(sum(confs) / len(confs)) if confs else 0.0
    return FinalResult(
        text=text, alternatives=[Alternative(text=text, confidence=confidence)]
    )


class VoskRecognizer:
    """Grammar-restricted Vosk recognizer with lazy initialization."""

    def __init__(
        self, model_path: str | None = None, sample_rate: int | None = None
    ) -> None:
        self._model_path = model_path or MODEL_PATH
        self._sample_rate = sample_rate or SAMPLE_RATE
        self._model = None
        self._recognizer = None
        self._grammar: Grammar | None = None

    @property
    def is_ready(self) -> bool:
        """Whether a recognizer for the current grammar exists."""
        return self._recognizer is not None

    @property
    def model_available(self) -> bool:
        """Whether the model directory exists on disk (cheap check)."""
        return Path(self._model_path).is_dir()

    @property
    def grammar(self) -> Grammar | None:
        return self._grammar

    def configure(self, grammar: Grammar) -> None:
        """Set a new vocabulary.  The recognizer must be initialized again."""
        self._grammar = grammar
        self._recognizer = None
        logger.info("Recognizer grammar set (%d phrases)", len(grammar.phrases))

    def initialize(self) -> bool:
        """Load the model (once) and build a recognizer for the grammar.

        Blocking.  Raises RecognizerInitError on any failure.  Returns
        False if ``configure()`` replaced the grammar during the build;
        the stale recognizer is discarded and the caller must initialize
        again.
        """
        grammar = self._grammar
        if grammar is None:
            raise RecognizerInitError("No target vocabulary loaded")

        try:
            if self._model is None:
                vosk.SetLogLevel(-1)
                self._model = vosk.Model(self._model_path)
                logger.info("Vosk model loaded from %s", self._model_path)
            recognizer = vosk.KaldiRecognizer(
                self._model, self._sample_rate, grammar.to_json()
            )
            recognizer.SetWords(True)
        except Exception as exc:
            self._recognizer = None
            raise RecognizerInitError(
                f"Could not load speech model from {self._model_path}: {exc}"
            ) from exc

        if self._grammar is not grammar:
            logger.info("Grammar changed while building recognizer, discarding it")
            return False

        self._recognizer = recognizer
        logger.info(
            "Recognizer ready (rate=%d, phrases=%d)",
            self._sample_rate,
            len(grammar.phrases),
        )
        return True

    def reset(self) -> None:
        """Clear any buffered speech from a previous attempt."""
        if self._recognizer is not None:
            self._recognizer.Reset()

    def accept(self, pcm: bytes) -> PartialResult | FinalResult | None:
        """Feed int16 PCM; return a final result, a partial, or None."""
        recognizer = self._recognizer
        if recognizer is None:
            return None

        if recognizer.AcceptWaveform(pcm):
            payload = json.loads(recognizer.Result())
            result = parse_final_payload(payload)
            logger.debug("Final result: %s", payload)
            return result

        partial = json.loads(recognizer.PartialResult()).get("partial", "")
        if partial:
            return PartialResult(text=partial)
        return None

    def close(self) -> None:
        """Drop the recognizer and model."""
        self._recognizer = None
        self._model = None
