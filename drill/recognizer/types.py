"""Pydantic models for recognizer output."""

from pydantic import BaseModel, Field


class Alternative(BaseModel):
    """One ranked hypothesis from a final result."""

    text: str
    confidence: float = Field(ge=0.0, le=1.0)


class PartialResult(BaseModel):
    """Interim transcript while the speaker is still talking."""

    text: str


class FinalResult(BaseModel):
    """The recognizer's terminal transcription for one utterance."""

    text: str = ""
    alternatives: list[Alternative] = Field(default_factory=list)


class RecognitionOutcome(BaseModel):
    """Text and confidence judged by the MatchEvaluator.  Never retained."""

    recognized_text: str
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @classmethod
    def from_final(cls, result: FinalResult) -> "RecognitionOutcome":
        """Take the best alternative; no alternatives means no speech."""
        if not result.alternatives:
            return cls(recognized_text="", confidence=0.0)
        best = result.alternatives[0]
        return cls(recognized_text=best.text, confidence=best.confidence)
