"""Drill session: matching, state machine, and async orchestration."""

from drill.session.controller import SessionController
from drill.session.display import DisplayFeed
from drill.session.drill_engine import DrillEngine
from drill.session.match_evaluator import MatchEvaluator, normalize_transcript
from drill.session.types import (
    MatchVerdict,
    SessionSnapshot,
    SessionState,
    StartDecision,
    Verdict,
)

__all__ = [
    "DisplayFeed",
    "DrillEngine",
    "MatchEvaluator",
    "MatchVerdict",
    "SessionController",
    "SessionSnapshot",
    "SessionState",
    "StartDecision",
    "Verdict",
    "normalize_transcript",
]
