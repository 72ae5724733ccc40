"""Builds the closed recognition vocabulary from the target list.

Restricting the recognizer to the target phrases shrinks its search
space, so a wrong-but-close answer still comes back as one of the
phrases with a low confidence instead of open-vocabulary noise.  That
is what makes a low confidence threshold usable.
"""

from __future__ import annotations

import json
from typing import Iterable

from pydantic import BaseModel

from drill.targets.types import DrillItem


def phrase_for_key(key: str) -> str:
    """Return the spoken phrase for a target key.

    ``"Touch_Your_Nose"`` becomes ``"touch your nose"``.  Idempotent.
    """
    return key.replace("_", " ").lower().strip()


class Grammar(BaseModel):
    """Ordered phrase list the recognizer may transcribe to."""

    phrases: list[str]

    def to_json(self) -> str:
        """Render as a Vosk grammar: a JSON array of phrases.

        No ``[unk]`` entry is added, so the recognizer can only produce
        one of the phrases or silence.
        """
        return json.dumps(self.phrases, ensure_ascii=False)


def build_grammar(targets: Iterable[DrillItem]) -> Grammar:
    """One phrase per target, in target order.  Duplicates are kept."""
    return Grammar(phrases=[phrase_for_key(item.key) for item in targets])
