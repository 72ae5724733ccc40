"""Tests for drill.targets.grammar — recognition vocabulary."""

import json

from drill.targets.grammar import Grammar, build_grammar, phrase_for_key
from drill.targets.types import DrillItem


def _item(key: str) -> DrillItem:
    return DrillItem(key=key, display=key, image_path=f"{key}.png", category="x")


class TestPhraseForKey:

    def test_underscores_become_spaces(self):
        assert phrase_for_key("touch_your_nose") == "touch your nose"

    def test_lower_cased(self):
        assert phrase_for_key("Red_Ball") == "red ball"

    def test_idempotent(self):
        once = phrase_for_key("  Touch_Your_Nose ")
        assert phrase_for_key(once) == once


class TestBuildGrammar:

    def test_one_phrase_per_target_in_order(self, targets):
        grammar = build_grammar(targets)
        assert grammar.phrases == ["touch nose", "apple", "red ball"]

    def test_duplicates_kept(self):
        grammar = build_grammar([_item("cat"), _item("Cat"), _item("dog")])
        assert grammar.phrases == ["cat", "cat", "dog"]

    def test_deterministic(self, targets):
        assert build_grammar(targets) == build_grammar(targets)
        assert build_grammar(targets).to_json() == build_grammar(targets).to_json()

    def test_empty(self):
        assert build_grammar([]).phrases == []


class TestGrammarJson:

    def test_json_array_of_phrases(self):
        grammar = Grammar(phrases=["touch nose", "apple"])
        assert json.loads(grammar.to_json()) == ["touch nose", "apple"]

    def test_no_unknown_word_entry(self, targets):
        assert "[unk]" not in build_grammar(targets).to_json()

    def test_non_ascii_preserved(self):
        grammar = build_grammar([_item("café")])
        assert "café" in grammar.to_json()
