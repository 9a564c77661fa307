# -*- coding: utf-8 -*-
"""
LocForge ParsedFile Model

Per-file state: the extracted entries, the raw source and an overall status.
Implements the Observer pattern so a surrounding UI can follow batch progress.
"""

import uuid
from typing import Callable, Dict, Iterable, List, Optional

from locforge_enums import EntryStatus, FileFormat, FileStatus
from locforge_logger import get_logger
from models.entry import Entry, EntryId

logger = get_logger("models.parsed_file")


class ParsedFile:
    """
    A loaded script or data file.

    Ren'Py files keep `lines` (the raw text split on '\\n') for in-place
    reconstruction. RPG Maker files keep the raw text only for reference.
    """

    def __init__(
        self,
        filename: str,
        file_format: FileFormat,
        entries: List[Entry],
        raw_text: str = "",
        file_id: Optional[str] = None,
    ):
        self._file_id = file_id or uuid.uuid4().hex
        self._filename = filename
        self._format = FileFormat(file_format)
        self._entries = entries
        self._raw_text = raw_text
        self._lines = raw_text.split('\n') if self._format == FileFormat.RENPY else []
        self._status = FileStatus.LOADED
        self._index: Dict[EntryId, Entry] = {e.id: e for e in entries}

        self._observers: Dict[str, List[Callable]] = {
            'entries_updated': [],
            'status_changed': [],
        }

        logger.debug(f"ParsedFile created: {filename} ({self._format.value}, {len(entries)} entries)")

    # =============================================================================
    # PROPERTIES
    # =============================================================================

    @property
    def file_id(self) -> str:
        return self._file_id

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def format(self) -> FileFormat:
        return self._format

    @property
    def entries(self) -> List[Entry]:
        return self._entries

    @property
    def lines(self) -> List[str]:
        return self._lines

    @property
    def raw_text(self) -> str:
        return self._raw_text

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def status(self) -> FileStatus:
        return self._status

    @status.setter
    def status(self, value: FileStatus):
        value = FileStatus(value)
        if self._status != value:
            self._status = value
            self._notify('status_changed', value)

    @property
    def done_count(self) -> int:
        return sum(1 for e in self._entries if e.status == EntryStatus.DONE)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._entries if e.status == EntryStatus.ERROR)

    # =============================================================================
    # OBSERVER PATTERN
    # =============================================================================

    def subscribe(self, event: str, callback: Callable):
        """Subscribe to 'entries_updated' or 'status_changed'."""
        if event in self._observers:
            self._observers[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable):
        if event in self._observers and callback in self._observers[event]:
            self._observers[event].remove(callback)

    def _notify(self, event: str, *args):
        """Notify all subscribers of an event."""
        for callback in self._observers.get(event, []):
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Error in observer callback for '{event}': {e}")

    def notify_entries_updated(self, entry_ids: Iterable[EntryId]):
        self._notify('entries_updated', list(entry_ids))

    # =============================================================================
    # ENTRY OPERATIONS
    # =============================================================================

    def get_entry(self, entry_id: EntryId) -> Optional[Entry]:
        return self._index.get(entry_id)

    def select_entries(self, entry_ids: Optional[Iterable[EntryId]] = None) -> List[Entry]:
        """Entries in file order, limited to entry_ids when given."""
        if entry_ids is None:
            return list(self._entries)
        wanted = set(entry_ids)
        return [e for e in self._entries if e.id in wanted]

    def refresh_status(self):
        """Derive the file status from its entries after a batch."""
        if any(e.status == EntryStatus.TRANSLATING for e in self._entries):
            self.status = FileStatus.PROCESSING
        elif self._entries and all(e.status == EntryStatus.DONE for e in self._entries):
            self.status = FileStatus.DONE
        else:
            self.status = FileStatus.LOADED

    def __repr__(self):
        return f"<ParsedFile {self._filename} [{self._format.value}] {len(self._entries)} entries>"
