# -*- coding: utf-8 -*-
"""
RPG Maker MZ Exporter

RPG Maker data files are never rewritten in place; the extracted entries
are exported as a JSON mapping that external tooling (or a human) applies
to the game data.
"""

import json
from pathlib import Path
from typing import Iterable

from locforge_logger import get_logger
from models.entry import Entry

logger = get_logger("core.rpgmaker_exporter")

EXPORT_SUFFIX = "_extracted.json"


def export_entries(entries: Iterable[Entry]) -> str:
    """Serialize entries to a pretty-printed JSON array."""
    payload = [entry.to_dict() for entry in entries]
    logger.debug(f"Exporting {len(payload)} RPG Maker entries")
    return json.dumps(payload, indent=2, ensure_ascii=False)


def export_filename(filename: str) -> str:
    """Map001.json -> Map001_extracted.json"""
    return f"{Path(filename).stem}{EXPORT_SUFFIX}"
