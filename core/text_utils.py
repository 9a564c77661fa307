import re
from collections import Counter
from typing import List

from locforge_enums import FileFormat
from parser.patterns import RenpyPatterns, RpgMakerPatterns

# Ren'Py syntax the translator must leave alone
RENPY_TOKEN_PATTERNS = [
    RenpyPatterns.INTERPOLATION,
    RenpyPatterns.TEXT_TAG,
    RenpyPatterns.PERCENT_FORMAT,
    RenpyPatterns.ESCAPE,
]

# Combined patterns, built on first use
_TOKEN_REGEX = {}


def _get_token_regex(file_format: FileFormat):
    """Get compiled regex for all control-code patterns of a format."""
    file_format = FileFormat(file_format)
    if file_format not in _TOKEN_REGEX:
        if file_format == FileFormat.RENPY:
            combined = '|'.join(f'(?:{p.pattern})' for p in RENPY_TOKEN_PATTERNS)
        else:
            combined = RpgMakerPatterns.CONTROL_CODE.pattern
        _TOKEN_REGEX[file_format] = re.compile(combined)
    return _TOKEN_REGEX[file_format]


def extract_control_codes(text: str, file_format: FileFormat) -> List[str]:
    """
    List the control codes in `text`, in order of appearance.

    Ren'Py: [variables], {tags}, %-interpolation, backslash escapes.
    RPG Maker: \\n<Name>, \\C[n], \\I[n], \\V[n] and single-char codes.
    """
    if not text:
        return []
    return _get_token_regex(file_format).findall(text)


def missing_control_codes(source: str, translated: str, file_format: FileFormat) -> List[str]:
    """
    Control codes present in `source` but absent (or fewer) in `translated`.

    Returns:
        Missing codes, one item per missing occurrence
    """
    expected = Counter(extract_control_codes(source, file_format))
    if not expected:
        return []
    found = Counter(extract_control_codes(translated, file_format))
    missing = expected - found
    return sorted(missing.elements())


def strip_speaker_tag(segment: str, tag: str) -> str:
    """
    Remove the speaker tag sent with a segment.

    strip_speaker_tag('[Eileen]: Hello', '[Eileen]') -> 'Hello'. The tag is
    matched case-insensitively. Any other bracketed prefix is part of the
    text ('[name]: ...') and is kept.
    """
    marker = f"{tag}:"
    head = segment.lstrip()
    if head[:len(marker)].lower() == marker.lower():
        return head[len(marker):].lstrip()
    return segment


def truncate(text: str, limit: int = 60) -> str:
    """Single-line preview for tables and log lines."""
    flat = (text or "").replace('\n', ' ↵ ')
    return flat if len(flat) <= limit else flat[:limit - 3] + "..."
