# -*- coding: utf-8 -*-
"""
Script Regex Patterns

Centralized regex patterns for extraction and for control-code detection.
"""

import re


class RenpyPatterns:
    """
    Regex patterns for the Ren'Py line classifier.

    Both text shapes require the same quote character on each side and
    anchor to the end of the line, so `e "Hi" with dissolve` is not text.
    """

    # =========================================================================
    # TEXT EXTRACTION PATTERNS
    # =========================================================================

    # Menu choice: indent, quoted text, trailing colon
    # groups: indent, quote, text, suffix
    CHOICE = re.compile(r'^(\s*)(["\'])(.*?)\2(\s*:)$')

    # Dialogue / narration: indent, optional speaker identifier, quoted text
    # groups: indent, speaker, separator, quote, text
    DIALOGUE = re.compile(r'^(\s*)(?:([A-Za-z0-9_]+)(\s+))?(["\'])(.*?)\4$')

    # Comment: '#' then the hint text
    COMMENT = re.compile(r'^\s*#\s*(.*?)\s*$')

    # =========================================================================
    # CONTROL SYNTAX (kept verbatim by the translator)
    # =========================================================================

    # [player_name], [mc.name]
    INTERPOLATION = re.compile(r'\[[^\[\]]+\]')
    # {b}, {/i}, {color=#f00}, {w=0.5}
    TEXT_TAG = re.compile(r'\{[^{}]+\}')
    # %(name)s, %s, %d
    PERCENT_FORMAT = re.compile(r'%(?:\([^)]+\))?[-#0 +]*\d*(?:\.\d+)?[sdifr]')
    # literal \n, \" inside the quoted string
    ESCAPE = re.compile(r'\\[n"\'\\]')


class RpgMakerPatterns:
    """Regex patterns for RPG Maker MZ message text and file names."""

    # Map042.json -> 42
    MAP_FILENAME = re.compile(r'Map(\d+)\.json', re.IGNORECASE)

    MAP_INFOS_FILENAME = re.compile(r'(^|[\\/])MapInfos\.json$', re.IGNORECASE)

    # \n<Name>, \C[2], \I[64], \V[10], \N[1], \P[1], \G, \{, \}, \., \|, \!, \^, \$, \#
    CONTROL_CODE = re.compile(r'\\n<[^>]*>|\\[A-Za-z]+\[[^\]]*\]|\\[A-Za-z]|\\[.|!^{}$#<>\\]')
