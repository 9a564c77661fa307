# -*- coding: utf-8 -*-
"""
Tests for Ren'Py reconstruction (in-place rewrite and old/new translation file).
"""

from core.renpy_writer import (
    build_translation_file, escape_quotes, rebuild_script,
    rewrite_filename, translation_filename,
)
from locforge_enums import EntryStatus
from parser.renpy_parser import parse_renpy_script


def _finish(entry, text):
    entry.mark_translating()
    entry.mark_done(text)


class TestEscapeQuotes:

    def test_escapes_bare_quotes(self):
        assert escape_quotes('He said "no"') == 'He said \\"no\\"'

    def test_already_escaped_quotes_untouched(self):
        assert escape_quotes('He said \\"no\\"') == 'He said \\"no\\"'

    def test_only_the_line_quote_is_escaped(self):
        assert escape_quotes('It\'s "fine"', "'") == 'It\\\'s "fine"'

    def test_escaped_backslash_before_quote(self):
        # \\" is an escaped backslash followed by a bare quote
        assert escape_quotes('a\\\\"b') == 'a\\\\\\"b'

    def test_trailing_backslash_doubled(self):
        assert escape_quotes("C:\\dir\\") == "C:\\dir\\\\"
        assert escape_quotes("ends\\\\") == "ends\\\\"
        assert escape_quotes("Say \"hi\"\\") == "Say \\\"hi\\\"\\\\"


class TestRebuildScript:

    def test_identity_round_trip(self, renpy_script):
        """Translating every entry to its own text reproduces the file byte for byte."""
        entries = parse_renpy_script(renpy_script)
        for entry in entries:
            _finish(entry, entry.original_text)
        assert rebuild_script(renpy_script.split('\n'), entries) == renpy_script

    def test_translated_lines_replaced(self, renpy_script):
        entries = parse_renpy_script(renpy_script)
        by_id = {e.id: e for e in entries}
        _finish(by_id[5], "Xin chào, [player_name]!")
        _finish(by_id[8], "Ở lại")
        _finish(by_id[10], "Rời đi")

        lines = rebuild_script(renpy_script.split('\n'), entries).split('\n')
        assert lines[5] == '    e "Xin chào, [player_name]!"'
        assert lines[8] == '        "Ở lại":'
        assert lines[10] == "        'Rời đi' :"
        # untouched
        assert lines[6] == '    "The room is quiet."'
        assert lines[13] == '    $ score = "high"'

    def test_quotes_in_translation_are_escaped(self):
        script = 'e "Hi"'
        entries = parse_renpy_script(script)
        _finish(entries[0], 'Say "hello"')
        assert rebuild_script(script.split('\n'), entries) == 'e "Say \\"hello\\""'

    def test_trailing_backslash_does_not_escape_closing_quote(self):
        script = 'e "Path"'
        entries = parse_renpy_script(script)
        _finish(entries[0], "C:\\dir\\")
        assert rebuild_script(script.split('\n'), entries) == 'e "C:\\dir\\\\"'

    def test_pending_and_failed_entries_skipped(self):
        script = 'e "One"\ne "Two"'
        entries = parse_renpy_script(script)
        entries[1].mark_translating()
        entries[1].mark_error("boom")
        assert rebuild_script(script.split('\n'), entries) == script

    def test_out_of_range_line_skipped(self):
        entries = parse_renpy_script('a\nb\ne "Hi"')
        _finish(entries[0], "Chào")
        assert rebuild_script(['a'], entries) == 'a'

    def test_does_not_mutate_input_lines(self):
        lines = ['e "Hi"']
        entries = parse_renpy_script(lines[0])
        _finish(entries[0], "Chào")
        rebuild_script(lines, entries)
        assert lines == ['e "Hi"']

    def test_crlf_preserved(self):
        script = 'e "One"\r\n"Two"\r\n'
        entries = parse_renpy_script(script)
        _finish(entries[0], "Một")
        assert rebuild_script(script.split('\n'), entries) == 'e "Một"\r\n"Two"\r\n'


class TestTranslationFile:

    def test_blocks_for_completed_entries(self, renpy_script):
        entries = parse_renpy_script(renpy_script)
        _finish(entries[0], 'Chào "bạn"')
        output = build_translation_file(entries)

        assert output.startswith("# Translation file generated by LocForge\n\n")
        assert "# Line 6\n# Context: Eileen greets the player\n" in output
        assert 'old "Hello, [player_name]!"\n' in output
        assert 'new "Chào \\"bạn\\""\n\n' in output
        # only one entry was completed
        assert output.count("old ") == 1

    def test_no_context_line_without_context(self):
        entries = parse_renpy_script('"Narration"')
        _finish(entries[0], "Dẫn truyện")
        output = build_translation_file(entries)
        assert "# Context" not in output
        assert "# Line 1\nold \"Narration\"\nnew \"Dẫn truyện\"\n" in output

    def test_trailing_backslash_in_new_line(self):
        entries = parse_renpy_script('"Path"')
        _finish(entries[0], "C:\\dir\\")
        assert 'new "C:\\dir\\\\"\n' in build_translation_file(entries)

    def test_empty_when_nothing_done(self, renpy_script):
        entries = parse_renpy_script(renpy_script)
        assert build_translation_file(entries) == "# Translation file generated by LocForge\n\n"
        assert all(e.status == EntryStatus.PENDING for e in entries)


def test_export_file_names():
    assert rewrite_filename("script.rpy") == "script_translated.rpy"
    assert translation_filename("chapter1.txt") == "chapter1_tl.rpy"
