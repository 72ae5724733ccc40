"""Speech recognizer wrapper and result models."""

from drill.recognizer.types import (
    Alternative,
    FinalResult,
    PartialResult,
    RecognitionOutcome,
)
from drill.recognizer.vosk_recognizer import VoskRecognizer, parse_final_payload

__all__ = [
    "Alternative",
    "FinalResult",
    "PartialResult",
    "RecognitionOutcome",
    "VoskRecognizer",
    "parse_final_payload",
]
