# -*- coding: utf-8 -*-
"""
LocForge Parser Package

Format-specific extraction using the Strategy pattern:
Ren'Py scripts are classified line by line, RPG Maker MZ data files are
walked as event command lists.
"""

from parser.base import BaseParser, ParserStrategy
from parser.patterns import RenpyPatterns, RpgMakerPatterns
from parser.renpy_parser import RenpyParser, parse_renpy_script
from parser.rpgmaker_parser import (
    RpgMakerParser,
    is_map_infos_file,
    parse_map_infos,
    parse_rpgmaker_data,
)

__all__ = [
    'BaseParser',
    'ParserStrategy',
    'RenpyPatterns',
    'RpgMakerPatterns',
    'RenpyParser',
    'RpgMakerParser',
    'parse_renpy_script',
    'parse_rpgmaker_data',
    'parse_map_infos',
    'is_map_infos_file',
]
