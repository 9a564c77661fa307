# -*- coding: utf-8 -*-
"""
LocForge Project Model

Session workspace:
- Loaded files (ParsedFile instances) in upload order
- The MapInfos side table used to label RPG Maker maps
"""

from typing import Any, Callable, Dict, List, Optional

from locforge_logger import get_logger
from models.parsed_file import ParsedFile

logger = get_logger("models.project")


class ProjectModel:
    """
    Holds every file loaded in the current session.

    The MapInfo table maps map id -> MapInfos record. Uploads merge into it
    additively; a later upload overwrites records with the same id.
    """

    def __init__(self):
        self._files: Dict[str, ParsedFile] = {}
        self._map_infos: Dict[int, Dict[str, Any]] = {}

        self._observers: Dict[str, List[Callable]] = {
            'file_added': [],
            'file_removed': [],
            'map_infos_changed': [],
        }

    # =============================================================================
    # PROPERTIES
    # =============================================================================

    @property
    def files(self) -> List[ParsedFile]:
        return list(self._files.values())

    @property
    def file_count(self) -> int:
        return len(self._files)

    @property
    def map_infos(self) -> Dict[int, Dict[str, Any]]:
        return dict(self._map_infos)

    # =============================================================================
    # OBSERVER PATTERN
    # =============================================================================

    def subscribe(self, event: str, callback: Callable):
        """Subscribe to project events."""
        if event in self._observers:
            self._observers[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable):
        """Unsubscribe from an event."""
        if event in self._observers and callback in self._observers[event]:
            self._observers[event].remove(callback)

    def _notify(self, event: str, *args):
        """Notify all subscribers of an event."""
        for callback in self._observers.get(event, []):
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Error in project observer callback for '{event}': {e}")

    # =============================================================================
    # FILE OPERATIONS
    # =============================================================================

    def add_file(self, parsed_file: ParsedFile) -> bool:
        if parsed_file.file_id in self._files:
            logger.warning(f"File already loaded: {parsed_file.filename}")
            return False
        self._files[parsed_file.file_id] = parsed_file
        self._notify('file_added', parsed_file)
        logger.debug(f"File added to project: {parsed_file.filename}")
        return True

    def remove_file(self, file_id: str) -> bool:
        """Drop a file together with all of its entries."""
        parsed_file = self._files.pop(file_id, None)
        if parsed_file is None:
            return False
        self._notify('file_removed', parsed_file)
        logger.debug(f"File removed from project: {parsed_file.filename}")
        return True

    def get_file(self, file_id: str) -> Optional[ParsedFile]:
        return self._files.get(file_id)

    # =============================================================================
    # MAP INFOS
    # =============================================================================

    def merge_map_infos(self, records: Dict[int, Dict[str, Any]]) -> int:
        """
        Merge MapInfos records into the side table.

        Returns:
            Number of records merged
        """
        if not records:
            return 0
        self._map_infos.update(records)
        self._notify('map_infos_changed', len(self._map_infos))
        logger.info(f"MapInfos table updated: {len(records)} records merged, {len(self._map_infos)} total")
        return len(records)

    def clear(self):
        for file_id in list(self._files.keys()):
            self.remove_file(file_id)
        self._map_infos.clear()
