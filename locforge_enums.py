"""
LocForge Enum Definitions

Type-safe enums for entry types, lifecycle states and file formats.
"""

from enum import Enum


class EntryType(str, Enum):
    """Kinds of extracted text"""
    DIALOGUE = 'dialogue'
    NARRATION = 'narration'
    CHOICE = 'choice'
    OTHER = 'other'


class EntryStatus(str, Enum):
    """Translation lifecycle of a single entry"""
    PENDING = 'pending'
    TRANSLATING = 'translating'
    DONE = 'done'
    ERROR = 'error'


# Allowed lifecycle moves; error may be retried by re-entering translating
STATUS_TRANSITIONS = {
    EntryStatus.PENDING: {EntryStatus.TRANSLATING},
    EntryStatus.TRANSLATING: {EntryStatus.DONE, EntryStatus.ERROR},
    EntryStatus.ERROR: {EntryStatus.TRANSLATING},
    EntryStatus.DONE: set(),
}


class FileStatus(str, Enum):
    """Overall state of an uploaded file"""
    LOADED = 'loaded'
    PROCESSING = 'processing'
    DONE = 'done'


class FileFormat(str, Enum):
    """Supported script dialects"""
    RENPY = 'renpy'
    RPGMAKER = 'rpgmaker'


class RpgmSource(str, Enum):
    """Which RPG Maker document layout an entry came from"""
    MAP = 'map'
    COMMON_EVENT = 'common_event'
    TROOP = 'troop'


class ExportMode(str, Enum):
    """Download flavours offered per file"""
    REWRITE = 'rewrite'
    TRANSLATION_FILE = 'tl'
    JSON = 'json'


class NotificationType(str, Enum):
    SUCCESS = 'success'
    ERROR = 'error'
