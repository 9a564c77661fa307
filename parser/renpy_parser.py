# -*- coding: utf-8 -*-
"""
Ren'Py Script Parser

Line-oriented extraction of dialogue, narration and menu choices.
Each physical line yields at most one entry, keyed by its zero-based index.
"""

from pathlib import Path
from typing import List, Optional

import locforge_config as config
from locforge_enums import EntryType, FileFormat
from locforge_logger import get_logger
from models.entry import Entry
from parser.base import BaseParser
from parser.patterns import RenpyPatterns

logger = get_logger("parser.renpy")


class RenpyParser(BaseParser):
    """
    Parser for Ren'Py `.rpy` scripts (and plain `.txt` exports of them).

    Per line, in order: skip blanks; remember comments as a context hint;
    try the choice shape; try the dialogue shape. Everything else is code.
    """

    file_format = FileFormat.RENPY

    def __init__(self, ignore_keywords=None):
        super().__init__()
        self._ignore_keywords = frozenset(ignore_keywords or config.RENPY_IGNORE_KEYWORDS)
        self._pending_context: Optional[str] = None

    def can_parse(self, filename: str) -> bool:
        return Path(filename).suffix.lower() in config.RENPY_EXTENSIONS

    def parse(self, content: str) -> List[Entry]:
        self.reset()

        for line_index, raw_line in enumerate(content.split('\n')):
            # CRLF files: keep the '\r' out of the match and put it back on rebuild
            line = raw_line[:-1] if raw_line.endswith('\r') else raw_line
            eol = raw_line[len(line):]

            stripped = line.strip()
            if not stripped:
                continue

            comment = RenpyPatterns.COMMENT.match(line)
            if comment:
                self._pending_context = comment.group(1) or None
                continue

            self._parse_line(line_index, line, eol)

        logger.debug(f"Ren'Py parse complete: {len(self._entries)} entries")
        return self._entries

    def _parse_line(self, line_index: int, line: str, eol: str):
        match = RenpyPatterns.CHOICE.match(line)
        if match:
            indent, quote, text, suffix = match.groups()
            self._emit(
                line_index, text, EntryType.CHOICE, config.PLAYER_SPEAKER,
                {
                    'indent': indent,
                    'quote': quote,
                    'speaker_prefix': '',
                    'separator': '',
                    'suffix': suffix + eol,
                },
            )
            return

        match = RenpyPatterns.DIALOGUE.match(line)
        if not match:
            return

        indent, speaker, separator, quote, text = match.groups()
        if speaker and speaker in self._ignore_keywords:
            logger.debug(f"Line {line_index + 1}: '{speaker}' is a statement keyword, not a speaker")
            return

        entry_type = EntryType.DIALOGUE if speaker else EntryType.NARRATION
        self._emit(
            line_index, text, entry_type, speaker,
            {
                'indent': indent,
                'quote': quote,
                'speaker_prefix': speaker or '',
                'separator': separator or '',
                'suffix': eol,
            },
        )

    def _emit(self, line_index, text, entry_type, speaker, parsed_data):
        entry = self._create_entry(
            entry_id=line_index,
            original_text=text,
            entry_type=entry_type,
            speaker=speaker,
            context=self._pending_context,
            parsed_data=parsed_data,
            line_index=line_index,
        )
        # The comment hint only labels the next extracted line
        if entry is not None:
            self._pending_context = None

    def reset(self):
        super().reset()
        self._pending_context = None


def parse_renpy_script(content: str, ignore_keywords=None) -> List[Entry]:
    """
    Extract entries from Ren'Py script text.

    Args:
        content: Full file text
        ignore_keywords: Statement keywords never treated as speakers
            (defaults to config.RENPY_IGNORE_KEYWORDS)

    Returns:
        Entries in line order
    """
    return RenpyParser(ignore_keywords).parse(content)
