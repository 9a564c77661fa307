# -*- coding: utf-8 -*-
"""
Base Parser Classes

Abstract base classes and Strategy pattern interfaces for parsing.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Protocol

from locforge_logger import get_logger
from locforge_enums import EntryType, FileFormat
from models.entry import Entry, EntryId

logger = get_logger("parser.base")


class ParserStrategy(Protocol):
    """
    Protocol for parser strategies.

    Defines the interface that all parser implementations must follow.
    """

    file_format: FileFormat

    def parse(self, content: str) -> List[Entry]:
        """
        Parse raw file text into Entries.

        Args:
            content: Full file text

        Returns:
            Ordered list of entries
        """
        ...

    def can_parse(self, filename: str) -> bool:
        """
        Check if this parser is appropriate for the file.

        Args:
            filename: Uploaded file name

        Returns:
            True if this parser handles the file
        """
        ...


class BaseParser(ABC):
    """
    Abstract base class for parsers.

    Provides common functionality for all parser implementations.
    """

    def __init__(self):
        self._entries: List[Entry] = []
        self._seen_ids = set()

    @abstractmethod
    def parse(self, content: str) -> List[Entry]:
        """Parse raw file text into Entries."""
        pass

    @abstractmethod
    def can_parse(self, filename: str) -> bool:
        """Check if this parser handles the file."""
        pass

    def _create_entry(
        self,
        entry_id: EntryId,
        original_text: str,
        entry_type: EntryType,
        speaker: Optional[str] = None,
        context: Optional[str] = None,
        parsed_data: Optional[Dict[str, Any]] = None,
        line_index: Optional[int] = None,
    ) -> Optional[Entry]:
        """
        Create an Entry and append it to the parse result.

        Empty (after trim) text and duplicate ids are discarded.
        """
        if not original_text or not original_text.strip():
            return None
        if entry_id in self._seen_ids:
            logger.warning(f"Duplicate entry id {entry_id!r} skipped")
            return None
        entry = Entry(
            id=entry_id,
            original_text=original_text,
            type=entry_type,
            speaker=speaker,
            context=context,
            parsed_data=parsed_data or {},
            line_index=line_index,
        )
        self._seen_ids.add(entry_id)
        self._entries.append(entry)
        return entry

    def reset(self):
        """Reset parser state for new file."""
        self._entries = []
        self._seen_ids = set()
