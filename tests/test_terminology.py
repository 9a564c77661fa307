# -*- coding: utf-8 -*-
"""
Tests for terminology/rule prompt rendering and TerminologyManager persistence.
"""

from core.storage import MemoryStore
from core.terminology import (
    KEY_KEYWORDS, KEY_PROPER_NOUNS, KEY_RULES,
    Keyword, ProperNoun, Rule, TerminologyManager, build_terminology_instruction,
)


class TestInstruction:

    def test_empty_when_nothing_enabled(self):
        assert build_terminology_instruction() == ""
        assert build_terminology_instruction(
            [Keyword("HP", enabled=False)], [], [Rule("Be polite", enabled=False)],
        ) == ""

    def test_keywords_and_nouns(self):
        text = build_terminology_instruction(
            [Keyword("HP"), Keyword("MP")],
            [ProperNoun("Aldia", "An-đi-a")],
        )
        assert text.startswith("--- TERMINOLOGY RULES ---\nYou MUST strictly follow these rules:\n")
        assert 'Keep them exactly as they are in the original text: "HP", "MP".' in text
        assert '"Aldia" must be translated to "An-đi-a"' in text
        assert "CONTEXTUAL RULES" not in text

    def test_disabled_items_left_out(self):
        text = build_terminology_instruction(
            [Keyword("HP"), Keyword("Secret", enabled=False)],
            [ProperNoun("Old", "Cũ", enabled=False)],
        )
        assert '"HP"' in text
        assert "Secret" not in text
        assert "ALWAYS TRANSLATE" not in text

    def test_rules_section(self):
        text = build_terminology_instruction(rules=[Rule("Eileen speaks formally"), Rule("Off", enabled=False)])
        assert text.startswith("--- CONTEXTUAL RULES ---\n")
        assert text.endswith("The rules are:\n- Eileen speaks formally")
        assert "Off" not in text

    def test_both_sections_in_order(self):
        text = build_terminology_instruction([Keyword("HP")], [], [Rule("Short lines")])
        assert text.index("TERMINOLOGY RULES") < text.index("CONTEXTUAL RULES")


class TestTerminologyManager:

    def test_add_and_persist(self, memory_store):
        store = memory_store
        manager = TerminologyManager(store)
        manager.add_keyword("HP")
        manager.add_proper_noun("Aldia", "An-đi-a")
        manager.add_rule("Keep it short")

        reloaded = TerminologyManager(store)
        assert [k.value for k in reloaded.keywords] == ["HP"]
        assert [(p.source, p.translation) for p in reloaded.proper_nouns] == [("Aldia", "An-đi-a")]
        assert [r.text for r in reloaded.rules] == ["Keep it short"]
        assert reloaded.keywords[0].id == manager.keywords[0].id

    def test_duplicates_and_blanks_rejected(self):
        manager = TerminologyManager(MemoryStore())
        assert manager.add_keyword("HP") is not None
        assert manager.add_keyword(" HP ") is None
        assert manager.add_keyword("   ") is None
        assert manager.add_rule("") is None
        assert manager.add_proper_noun("Aldia", "") is None
        assert len(manager.keywords) == 1

    def test_proper_noun_updates_existing_source(self):
        manager = TerminologyManager(MemoryStore())
        first = manager.add_proper_noun("Aldia", "A")
        second = manager.add_proper_noun("Aldia", "B")
        assert first is second
        assert len(manager.proper_nouns) == 1
        assert manager.proper_nouns[0].translation == "B"

    def test_toggle_excludes_from_instruction(self, memory_store):
        store = memory_store
        manager = TerminologyManager(store)
        keyword = manager.add_keyword("HP")

        assert manager.toggle(keyword.id) is False
        assert manager.build_instruction() == ""
        assert store.get(KEY_KEYWORDS)[0]['enabled'] is False

        assert manager.toggle(keyword.id) is True
        assert '"HP"' in manager.build_instruction()

    def test_toggle_unknown_id(self):
        assert TerminologyManager(MemoryStore()).toggle("nope") is None

    def test_remove(self):
        store = MemoryStore()
        manager = TerminologyManager(store)
        rule = manager.add_rule("Keep it short")
        assert manager.remove(rule.id) is True
        assert manager.remove(rule.id) is False
        assert store.get(KEY_RULES) == []

    def test_malformed_records_skipped(self):
        store = MemoryStore({
            KEY_KEYWORDS: [{"value": "HP", "enabled": True, "id": "k1"}, {"value": 3}, "junk"],
            KEY_PROPER_NOUNS: {"not": "a list"},
            KEY_RULES: [{"text": "Rule without id"}],
        })
        manager = TerminologyManager(store)
        assert [(k.value, k.id) for k in manager.keywords] == [("HP", "k1")]
        assert manager.proper_nouns == []
        assert manager.rules[0].enabled is True
        assert manager.rules[0].id

    def test_terminology_snapshot(self):
        manager = TerminologyManager()
        manager.add_keyword("HP")
        snapshot = manager.terminology
        manager.add_keyword("MP")
        assert [k.value for k in snapshot.keywords] == ["HP"]
