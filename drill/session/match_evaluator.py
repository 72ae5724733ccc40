"""Judges a recognized utterance against the expected target key.

The whole algorithm is exact string equality after canonicalization,
gated by a confidence floor.  There is no partial credit and no edit
distance: a phonetically close answer only passes because the grammar
makes the recognizer return the target phrase itself.
"""

from __future__ import annotations

import logging

from drill.config import CONFIDENCE_THRESHOLD
from drill.recognizer.types import RecognitionOutcome
from drill.session.types import MatchVerdict, Verdict
from drill.targets.grammar import phrase_for_key

logger = logging.getLogger(__name__)


def normalize_transcript(text: str) -> str:
    """Lower-case and trim recognized text.  Idempotent."""
    return text.lower().strip()


class MatchEvaluator:
    """Compassionate matcher: exact phrase, low confidence floor."""

    def __init__(self, threshold: float | None = None) -> None:
        self._threshold = CONFIDENCE_THRESHOLD if threshold is None else threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    def evaluate(self, key: str, outcome: RecognitionOutcome) -> MatchVerdict:
        expected = phrase_for_key(key)
        recognized = normalize_transcript(outcome.recognized_text)
        confidence = outcome.confidence

        if not recognized:
            logger.info("Target: %s, no speech recognized", expected)
            return MatchVerdict(verdict=Verdict.NO_SPEECH, expected=expected)

        logger.info(
            "Target: %s, Recognized: %s, Confidence: %.2f",
            expected,
            recognized,
            confidence,
        )

        if recognized == expected and confidence >= self._threshold:
            verdict = Verdict.CORRECT
        else:
            verdict = Verdict.INCORRECT

        return MatchVerdict(
            verdict=verdict,
            expected=expected,
            recognized_text=recognized,
            confidence=confidence,
        )
