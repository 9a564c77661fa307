# -*- coding: utf-8 -*-
"""
Tests for the Ren'Py line classifier.
"""

import pytest

from locforge_enums import EntryStatus, EntryType
from parser.renpy_parser import RenpyParser, parse_renpy_script


class TestRenpyExtraction:
    """Which lines become entries, and how they are typed."""

    def test_extracted_line_ids(self, renpy_script):
        entries = parse_renpy_script(renpy_script)
        assert [e.id for e in entries] == [5, 6, 8, 10, 14]

    def test_dialogue_entry(self, renpy_script):
        entry = parse_renpy_script(renpy_script)[0]
        assert entry.type == EntryType.DIALOGUE
        assert entry.speaker == "e"
        assert entry.original_text == "Hello, [player_name]!"
        assert entry.line_index == 5
        assert entry.status == EntryStatus.PENDING
        assert entry.translated_text == ""
        assert entry.parsed_data['indent'] == "    "
        assert entry.parsed_data['quote'] == '"'
        assert entry.parsed_data['speaker_prefix'] == "e"

    def test_narration_entry(self, renpy_script):
        entry = parse_renpy_script(renpy_script)[1]
        assert entry.type == EntryType.NARRATION
        assert not entry.speaker
        assert entry.original_text == "The room is quiet."

    def test_choice_entries(self, renpy_script):
        choices = [e for e in parse_renpy_script(renpy_script) if e.type == EntryType.CHOICE]
        assert [c.original_text for c in choices] == ["Stay here", "Leave"]
        assert all(c.speaker == "Player" for c in choices)
        assert choices[1].parsed_data['quote'] == "'"
        assert choices[1].parsed_data['suffix'] == " :"

    def test_escaped_quotes_kept_literally(self, renpy_script):
        entry = parse_renpy_script(renpy_script)[-1]
        assert entry.original_text == 'She said \\"hi\\" to me.'

    def test_comment_becomes_context_once(self, renpy_script):
        entries = parse_renpy_script(renpy_script)
        assert entries[0].context == "Eileen greets the player"
        assert entries[1].context is None

    def test_parsing_is_idempotent(self, renpy_script):
        first = parse_renpy_script(renpy_script)
        second = parse_renpy_script(renpy_script)
        assert [(e.id, e.original_text, e.type) for e in first] == \
               [(e.id, e.original_text, e.type) for e in second]


class TestRenpyEdgeCases:

    @pytest.mark.parametrize("keyword", ["jump", "call", "show", "scene", "define", "default", "label", "play"])
    def test_statement_keyword_is_not_a_speaker(self, keyword):
        assert parse_renpy_script(f'    {keyword} "something"') == []

    def test_ordinary_identifier_is_a_speaker(self):
        entries = parse_renpy_script('    bob "something"')
        assert len(entries) == 1
        assert entries[0].speaker == "bob"

    def test_mismatched_quotes_not_extracted(self):
        assert parse_renpy_script('    e "Hello\'') == []

    def test_trailing_code_not_extracted(self):
        assert parse_renpy_script('    e "Hello" with dissolve') == []

    @pytest.mark.parametrize("line", ['    ""', '    e "   "', '    "":'])
    def test_empty_text_discarded(self, line):
        assert parse_renpy_script(line) == []

    def test_comment_lines_never_extracted(self):
        assert parse_renpy_script('    # e "Not dialogue"') == []

    def test_crlf_line_endings(self):
        entries = parse_renpy_script('e "One"\r\n"Two"\r\n')
        assert [e.original_text for e in entries] == ["One", "Two"]
        assert entries[0].parsed_data['suffix'] == "\r"

    def test_custom_ignore_keywords(self):
        parser = RenpyParser(ignore_keywords={"narrator"})
        assert parser.parse('narrator "Hi"') == []
        assert len(parser.parse('e "Hi"')) == 1

    def test_can_parse(self):
        parser = RenpyParser()
        assert parser.can_parse("script.rpy")
        assert parser.can_parse("dump.TXT")
        assert not parser.can_parse("Map001.json")
