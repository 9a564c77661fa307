# -*- coding: utf-8 -*-
"""
Terminology & Rule Injection

Keywords that must stay untranslated, proper nouns with a fixed
translation, and free-text contextual rules. Each item has an `enabled`
toggle; disabled items are kept in storage but left out of the prompt.
"""

import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from locforge_logger import get_logger
from core.storage import KeyValueStore

logger = get_logger("core.terminology")

KEY_KEYWORDS = "terminology_keywords"
KEY_PROPER_NOUNS = "terminology_proper_nouns"
KEY_RULES = "translation_rules"


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Keyword:
    value: str
    enabled: bool = True
    id: str = field(default_factory=_new_id)


@dataclass
class ProperNoun:
    source: str
    translation: str
    enabled: bool = True
    id: str = field(default_factory=_new_id)


@dataclass
class Rule:
    text: str
    enabled: bool = True
    id: str = field(default_factory=_new_id)


@dataclass
class Terminology:
    """Keywords and proper nouns as handed to the translator."""
    keywords: List[Keyword] = field(default_factory=list)
    proper_nouns: List[ProperNoun] = field(default_factory=list)


def build_terminology_instruction(
    keywords: Iterable[Keyword] = (),
    proper_nouns: Iterable[ProperNoun] = (),
    rules: Iterable[Rule] = (),
) -> str:
    """
    Render the enabled terminology and rules as a prompt fragment.

    Returns an empty string when nothing is enabled.
    """
    active_keywords = [k for k in keywords if k.enabled]
    active_nouns = [p for p in proper_nouns if p.enabled]
    active_rules = [r for r in rules if r.enabled]

    sections = []

    clauses = []
    if active_keywords:
        listed = ', '.join(f'"{k.value}"' for k in active_keywords)
        clauses.append(
            "- DO NOT TRANSLATE the following keywords. "
            f"Keep them exactly as they are in the original text: {listed}."
        )
    if active_nouns:
        listed = ', '.join(f'"{p.source}" must be translated to "{p.translation}"' for p in active_nouns)
        clauses.append(f"- ALWAYS TRANSLATE these proper nouns as specified: {listed}.")
    if clauses:
        sections.append(
            "--- TERMINOLOGY RULES ---\n"
            "You MUST strictly follow these rules:\n" + '\n'.join(clauses)
        )

    if active_rules:
        sections.append(
            "--- CONTEXTUAL RULES ---\n"
            "Before translating, you MUST analyze the user's input text against the following rules. "
            "For each rule, if the characters or context it describes are present in the input text, "
            "you MUST apply that rule to your translation. If a rule does not apply to the current text, "
            "you must ignore it. The rules are:\n"
            + '\n'.join(f"- {r.text}" for r in active_rules)
        )

    return '\n'.join(sections)


class TerminologyManager:
    """
    Keeps the keyword, proper-noun and rule lists and persists them
    through a KeyValueStore.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store
        self.keywords: List[Keyword] = []
        self.proper_nouns: List[ProperNoun] = []
        self.rules: List[Rule] = []
        if store is not None:
            self.load()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def load(self):
        """Load all three lists from the store. Malformed records are skipped."""
        self.keywords = self._load_list(KEY_KEYWORDS, Keyword, ('value',))
        self.proper_nouns = self._load_list(KEY_PROPER_NOUNS, ProperNoun, ('source', 'translation'))
        self.rules = self._load_list(KEY_RULES, Rule, ('text',))
        logger.debug(
            f"Loaded terminology: {len(self.keywords)} keywords, "
            f"{len(self.proper_nouns)} proper nouns, {len(self.rules)} rules"
        )

    def _load_list(self, key: str, cls, required):
        raw = self._store.get(key, []) if self._store is not None else []
        items = []
        if not isinstance(raw, list):
            logger.warning(f"Stored '{key}' is not a list, ignoring it")
            return items
        for record in raw:
            if not isinstance(record, dict) or not all(isinstance(record.get(f), str) for f in required):
                logger.warning(f"Skipping malformed '{key}' record: {record!r}")
                continue
            kwargs: Dict[str, Any] = {f: record[f] for f in required}
            kwargs['enabled'] = bool(record.get('enabled', True))
            if record.get('id'):
                kwargs['id'] = str(record['id'])
            items.append(cls(**kwargs))
        return items

    def save(self):
        if self._store is None:
            return
        self._store.set(KEY_KEYWORDS, [asdict(k) for k in self.keywords])
        self._store.set(KEY_PROPER_NOUNS, [asdict(p) for p in self.proper_nouns])
        self._store.set(KEY_RULES, [asdict(r) for r in self.rules])

    # =========================================================================
    # EDITING
    # =========================================================================

    def add_keyword(self, value: str) -> Optional[Keyword]:
        value = value.strip()
        if not value or any(k.value == value for k in self.keywords):
            return None
        keyword = Keyword(value)
        self.keywords.append(keyword)
        self.save()
        return keyword

    def add_proper_noun(self, source: str, translation: str) -> Optional[ProperNoun]:
        """Add a pair, or update the translation of an existing source."""
        source, translation = source.strip(), translation.strip()
        if not source or not translation:
            return None
        for noun in self.proper_nouns:
            if noun.source == source:
                noun.translation = translation
                self.save()
                return noun
        noun = ProperNoun(source, translation)
        self.proper_nouns.append(noun)
        self.save()
        return noun

    def add_rule(self, text: str) -> Optional[Rule]:
        text = text.strip()
        if not text:
            return None
        rule = Rule(text)
        self.rules.append(rule)
        self.save()
        return rule

    def _all_items(self):
        return [*self.keywords, *self.proper_nouns, *self.rules]

    def toggle(self, item_id: str) -> Optional[bool]:
        """Flip `enabled` on the item with this id. Returns the new value."""
        for item in self._all_items():
            if item.id == item_id:
                item.enabled = not item.enabled
                self.save()
                return item.enabled
        return None

    def remove(self, item_id: str) -> bool:
        before = len(self._all_items())
        self.keywords = [k for k in self.keywords if k.id != item_id]
        self.proper_nouns = [p for p in self.proper_nouns if p.id != item_id]
        self.rules = [r for r in self.rules if r.id != item_id]
        removed = len(self._all_items()) < before
        if removed:
            self.save()
        return removed

    @property
    def terminology(self) -> Terminology:
        return Terminology(list(self.keywords), list(self.proper_nouns))

    def build_instruction(self) -> str:
        return build_terminology_instruction(self.keywords, self.proper_nouns, self.rules)
