# -*- coding: utf-8 -*-
"""
Ren'Py Script Writer

Turns translated entries back into Ren'Py text, either by rewriting the
original lines in place or as a separate old/new translation file.
Both functions are pure: they never touch the file model.
"""

import re
from pathlib import Path
from typing import Iterable, List

from locforge_enums import EntryStatus
from locforge_logger import get_logger
from models.entry import Entry

logger = get_logger("core.renpy_writer")

TRANSLATION_FILE_HEADER = "# Translation file generated by LocForge"

REWRITE_SUFFIX = "_translated.rpy"
TRANSLATION_FILE_SUFFIX = "_tl.rpy"


def escape_quotes(text: str, quote: str = '"') -> str:
    """
    Backslash-escape every unescaped occurrence of `quote`.

    A quote is already escaped when an odd number of backslashes precedes
    it, so text that came out of a Ren'Py string is not double-escaped.
    A trailing unpaired backslash is doubled so it cannot escape the
    closing quote.
    """
    if not text:
        return text
    if quote in text:
        pattern = re.compile(r'(\\*)' + re.escape(quote))

        def _repl(match):
            slashes = match.group(1)
            if len(slashes) % 2 == 0:
                return f"{slashes}\\{quote}"
            return match.group(0)

        text = pattern.sub(_repl, text)

    trailing = len(text) - len(text.rstrip('\\'))
    if trailing % 2:
        text += '\\'
    return text


def _is_complete(entry: Entry) -> bool:
    return entry.status == EntryStatus.DONE and bool(entry.translated_text and entry.translated_text.strip())


def format_line(entry: Entry, text: str) -> str:
    """Rebuild one script line around `text` from the entry's location metadata."""
    data = entry.parsed_data
    quote = data.get('quote', '"')
    speaker_prefix = data.get('speaker_prefix', '')
    separator = data.get('separator') or (' ' if speaker_prefix else '')
    prefix = f"{speaker_prefix}{separator}" if speaker_prefix else ''
    return f"{data.get('indent', '')}{prefix}{quote}{escape_quotes(text, quote)}{quote}{data.get('suffix', '')}"


def rebuild_script(lines: List[str], entries: Iterable[Entry]) -> str:
    """
    Rewrite translated lines in a copy of `lines`.

    Entries that are not done (or have blank translations) leave their
    line untouched. Out-of-range line indices are skipped with a warning.
    """
    output = list(lines)
    replaced = 0
    for entry in entries:
        if not _is_complete(entry):
            continue
        line_index = entry.line_index if entry.line_index is not None else entry.id
        if not isinstance(line_index, int) or not 0 <= line_index < len(output):
            logger.warning(f"Entry {entry.id!r} points outside the script ({len(output)} lines), skipped")
            continue
        output[line_index] = format_line(entry, entry.translated_text)
        replaced += 1

    logger.debug(f"rebuild_script: {replaced} lines replaced")
    return '\n'.join(output)


def build_translation_file(entries: Iterable[Entry]) -> str:
    """Produce an old/new translation file for every completed entry."""
    parts = [TRANSLATION_FILE_HEADER, ""]
    for entry in entries:
        if not _is_complete(entry):
            continue
        line_number = (entry.line_index if entry.line_index is not None else entry.id) + 1
        parts.append(f"# Line {line_number}")
        if entry.context:
            parts.append(f"# Context: {entry.context}")
        parts.append(f'old "{escape_quotes(entry.original_text)}"')
        parts.append(f'new "{escape_quotes(entry.translated_text)}"')
        parts.append("")
    return '\n'.join(parts) + '\n'


def rewrite_filename(filename: str) -> str:
    return f"{Path(filename).stem}{REWRITE_SUFFIX}"


def translation_filename(filename: str) -> str:
    return f"{Path(filename).stem}{TRANSLATION_FILE_SUFFIX}"
