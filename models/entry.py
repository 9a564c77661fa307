# -*- coding: utf-8 -*-
"""
LocForge Entry Model

A single extractable string, its location in the source file and its
translation lifecycle.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from locforge_enums import EntryType, EntryStatus, STATUS_TRANSITIONS
from locforge_exceptions import InvalidStatusTransition
from locforge_logger import get_logger

logger = get_logger("models.entry")

EntryId = Union[int, str]


@dataclass
class Entry:
    """
    One unit of translatable text.

    Attributes:
        id: Stable id within a file. Ren'Py uses the zero-based line index,
            RPG Maker a merged id such as 'Ev_3_Pg_0_merged'.
        original_text: Source string as extracted (control codes kept).
        translated_text: Empty until the entry reaches 'done'.
        type: Kind of text (dialogue, narration, choice, other).
        speaker: Speaker name; None or '' means narration.
        status: Lifecycle state.
        error_message: Reason for the last failure when status is 'error'.
        context: Human-readable location label.
        parsed_data: Format-specific location metadata.
        line_index: Ren'Py source line (same as id), None for RPG Maker.
    """
    id: EntryId
    original_text: str
    type: EntryType = EntryType.DIALOGUE
    speaker: Optional[str] = None
    translated_text: str = ""
    status: EntryStatus = EntryStatus.PENDING
    error_message: Optional[str] = None
    context: Optional[str] = None
    parsed_data: Dict[str, Any] = field(default_factory=dict)
    line_index: Optional[int] = None

    @property
    def is_translatable(self) -> bool:
        """Pending and failed entries can be (re)submitted."""
        return self.status in (EntryStatus.PENDING, EntryStatus.ERROR)

    @property
    def is_done(self) -> bool:
        return self.status == EntryStatus.DONE and bool(self.translated_text)

    def transition(self, new_status: EntryStatus):
        """Move to new_status, raising InvalidStatusTransition if not allowed."""
        new_status = EntryStatus(new_status)
        if new_status not in STATUS_TRANSITIONS[self.status]:
            raise InvalidStatusTransition(self.id, self.status.value, new_status.value)
        self.status = new_status

    def mark_translating(self):
        self.transition(EntryStatus.TRANSLATING)
        self.error_message = None

    def mark_done(self, translated_text: str):
        self.transition(EntryStatus.DONE)
        self.translated_text = translated_text
        self.error_message = None

    def mark_error(self, reason: str):
        self.transition(EntryStatus.ERROR)
        self.error_message = reason
        logger.debug(f"Entry {self.id!r} failed: {reason}")

    def to_dict(self) -> Dict[str, Any]:
        """Export representation (camelCase keys, as written to *_extracted.json)."""
        return {
            'id': self.id,
            'originalText': self.original_text,
            'translatedText': self.translated_text,
            'type': self.type.value,
            'speaker': self.speaker or "",
            'status': self.status.value,
            'context': self.context or "",
        }
