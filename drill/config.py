"""Configuration constants and helpers for the word drill."""

import os
from pathlib import Path

DEFAULT_PORT: int = 7870
DEFAULT_HOST: str = "127.0.0.1"


def get_port() -> int:
    """Return the server port from DRILL_PORT env var, or DEFAULT_PORT."""
    raw = os.environ.get("DRILL_PORT")
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            return DEFAULT_PORT
    return DEFAULT_PORT


# --- Target list ---

TARGET_FILE: Path = Path(os.environ.get("DRILL_TARGET_FILE", "target.txt"))
TARGET_DELIMITER: str = ","


# --- Recognizer configuration ---

MODEL_PATH: str = os.environ.get("DRILL_MODEL_PATH", "model")
SAMPLE_RATE: int = int(os.environ.get("DRILL_SAMPLE_RATE", "16000"))

# Deliberately low: 0.30 means only 30% certainty is needed for a correct match.
CONFIDENCE_THRESHOLD: float = float(
    os.environ.get("DRILL_CONFIDENCE_THRESHOLD", "0.30")
)


# --- Audio capture ---

CHUNK_SAMPLES: int = int(
    os.environ.get("DRILL_CHUNK_SAMPLES", "4000")
)  # 250ms at 16kHz
