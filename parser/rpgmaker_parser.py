# -*- coding: utf-8 -*-
"""
RPG Maker MZ Data Parser

Extracts message text from map (MapXXX.json), common event
(CommonEvents.json) and troop (Troops.json) documents.

All Show Text blocks and choice labels of one event page (or one common
event) are merged into a single entry so the translator sees the whole
scene. Blocks are separated by a blank line; choice labels carry a
"[Choice] " tag.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import locforge_config as config
from locforge_enums import EntryType, FileFormat, RpgmSource
from locforge_exceptions import DocumentShapeError, ParseError
from locforge_logger import get_logger
from models.entry import Entry
from parser.base import BaseParser
from parser.patterns import RpgMakerPatterns
from parser.rpgmaker_commands import (
    OtherCommand, ShowChoices, ShowTextLine, ShowTextSetup, iter_commands,
)

logger = get_logger("parser.rpgmaker")

BLOCK_SEPARATOR = "\n\n"
LINE_SEPARATOR = "\n"


def _pad_id(value) -> str:
    return str(value).rjust(3, '0')


def is_map_infos_file(filename: str) -> bool:
    """True for the MapInfos.json side-table document."""
    return bool(RpgMakerPatterns.MAP_INFOS_FILENAME.search(filename or ""))


def _load_json(json_text: str, filename: Optional[str]):
    if json_text is None or not json_text.strip():
        return None
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e.msg}", file_name=filename, line_number=e.lineno) from e


def parse_map_infos(json_text: str, filename: str = config.RPGM_MAP_INFOS_FILENAME) -> Dict[int, Dict[str, Any]]:
    """
    Load MapInfos.json into a map id -> record table.

    Null slots and records without a truthy id are skipped.
    """
    data = _load_json(json_text, filename)
    if data is None:
        return {}
    if isinstance(data, dict):
        records = list(data.values())
    elif isinstance(data, list):
        records = data
    else:
        raise DocumentShapeError("MapInfos must be a JSON array", file_name=filename)

    table: Dict[int, Dict[str, Any]] = {}
    for record in records:
        if isinstance(record, dict) and record.get('id'):
            try:
                table[int(record['id'])] = record
            except (TypeError, ValueError):
                logger.debug(f"MapInfos record with non-numeric id skipped: {record.get('id')!r}")
    logger.info(f"Loaded {len(table)} MapInfos records from {filename}")
    return table


class RpgMakerParser(BaseParser):
    """Parser for RPG Maker MZ data JSON."""

    file_format = FileFormat.RPGMAKER

    def __init__(self, filename: str = "", map_infos: Optional[Dict[int, Dict[str, Any]]] = None):
        super().__init__()
        self._filename = filename
        self._map_infos = map_infos or {}
        self._map_label = ""

    def can_parse(self, filename: str) -> bool:
        return Path(filename).suffix.lower() == '.json' and not is_map_infos_file(filename)

    def parse(self, content: str) -> List[Entry]:
        self.reset()
        data = _load_json(content, self._filename)
        if not data:
            return self._entries

        if isinstance(data, dict) and isinstance(data.get('events'), list):
            self._map_label = self._resolve_map_label(data)
            self._parse_map(data['events'])
        elif isinstance(data, list):
            self._parse_database_list(data)
        else:
            raise DocumentShapeError(
                "Not a map, common event or troop document", file_name=self._filename
            )

        logger.debug(f"RPG Maker parse complete: {self._filename} -> {len(self._entries)} entries")
        return self._entries

    def reset(self):
        super().reset()
        self._map_label = ""

    # =========================================================================
    # CONTEXT LABELS
    # =========================================================================

    def _resolve_map_label(self, data: Dict[str, Any]) -> str:
        display_name = data.get('displayName') or ""

        editor_name = ""
        match = RpgMakerPatterns.MAP_FILENAME.search(self._filename or "")
        if match and self._map_infos:
            record = self._map_infos.get(int(match.group(1)))
            if record and record.get('name'):
                editor_name = record['name']

        if editor_name and display_name:
            return f"{editor_name} ({display_name})"
        if editor_name:
            return editor_name
        if display_name:
            return f"Map ({display_name})"
        return ""

    def _full_context(self, event_label: str) -> str:
        if self._map_label:
            return f"[{self._map_label}] {event_label}"
        return event_label

    # =========================================================================
    # DOCUMENT WALKERS
    # =========================================================================

    def _parse_map(self, events: List[Any]):
        for event_index, event in enumerate(events):
            if not isinstance(event, dict) or not isinstance(event.get('pages'), list):
                continue
            event_id = event.get('id')
            if event_id is None:
                event_id = event_index
            event_label = f"{_pad_id(event_id)} {event.get('name') or f'EV{event_id}'}"

            for page_index, page in enumerate(event['pages']):
                if not isinstance(page, dict) or not page.get('list'):
                    continue
                self._process_list(
                    page['list'],
                    entry_id=f"Ev_{event_id}_Pg_{page_index}_merged",
                    event_label=event_label,
                    parsed_data={
                        'source': RpgmSource.MAP.value,
                        'event_id': event_id,
                        'page_index': page_index,
                    },
                )

    def _parse_database_list(self, items: List[Any]):
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                continue
            item_id = item.get('id')
            if item_id is None:
                item_id = index

            if item.get('list'):
                name = item.get('name') or f"CommonEvent{item_id}"
                self._process_list(
                    item['list'],
                    entry_id=f"Common_{item_id}_merged",
                    event_label=f"Common {_pad_id(item_id)}: {name}",
                    parsed_data={
                        'source': RpgmSource.COMMON_EVENT.value,
                        'event_id': item_id,
                    },
                )
            elif isinstance(item.get('pages'), list):
                name = item.get('name') or f"Troop{item_id}"
                event_label = f"Troop {_pad_id(item_id)}: {name}"
                for page_index, page in enumerate(item['pages']):
                    if not isinstance(page, dict) or not page.get('list'):
                        continue
                    self._process_list(
                        page['list'],
                        entry_id=f"Troop_{item_id}_Pg_{page_index}_merged",
                        event_label=event_label,
                        parsed_data={
                            'source': RpgmSource.TROOP.value,
                            'event_id': item_id,
                            'page_index': page_index,
                        },
                    )

    def _process_list(self, command_list, entry_id: str, event_label: str, parsed_data: Dict[str, Any]):
        """Walk one command list and emit at most one merged entry."""
        page_parts: List[str] = []
        buffer: List[str] = []

        def flush():
            if buffer:
                page_parts.append(LINE_SEPARATOR.join(buffer))
                buffer.clear()

        for command in iter_commands(command_list):
            if isinstance(command, ShowTextSetup):
                flush()
            elif isinstance(command, ShowTextLine):
                buffer.append(command.text)
            elif isinstance(command, ShowChoices):
                flush()
                page_parts.extend(f"{config.CHOICE_TAG} {label}" for label in command.choices)
            elif isinstance(command, OtherCommand):
                flush()
        flush()

        if not page_parts:
            return

        self._create_entry(
            entry_id=entry_id,
            original_text=BLOCK_SEPARATOR.join(page_parts),
            entry_type=EntryType.DIALOGUE,
            speaker="",
            context=self._full_context(event_label),
            parsed_data=parsed_data,
        )


def parse_rpgmaker_data(json_text: str, filename: str, map_infos: Optional[Dict[int, Dict[str, Any]]] = None) -> List[Entry]:
    """
    Extract merged entries from one RPG Maker MZ data document.

    Args:
        json_text: Raw JSON file content
        filename: File name, used to find the map id (MapXXX.json)
        map_infos: Optional map id -> MapInfos record table

    Returns:
        One entry per event page / common event / troop page with text

    Raises:
        ParseError: Malformed JSON
        DocumentShapeError: Valid JSON of an unknown layout
    """
    return RpgMakerParser(filename, map_infos).parse(json_text)
