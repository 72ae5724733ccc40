"""Target list parsing and grammar construction."""

from drill.targets.grammar import Grammar, build_grammar, phrase_for_key
from drill.targets.parser import load_targets, parse_targets
from drill.targets.types import DrillItem

__all__ = [
    "DrillItem",
    "Grammar",
    "build_grammar",
    "load_targets",
    "parse_targets",
    "phrase_for_key",
]
