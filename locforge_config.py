import os
from pathlib import Path

VERSION = "0.4.0"

DEFAULT_MODEL_NAME = "gemini-2.5-flash"
GENERATION_TEMPERATURE = 0.7

# Gemini client retry policy for transient 429/503 failures
REQUEST_MAX_RETRIES = 4
REQUEST_BACKOFF_CAP_SECONDS = 30

DEFAULT_SOURCE_LANG = "auto"
DEFAULT_TARGET_LANG = "vi"

SUPPORTED_LANGUAGES = {
    "ja": "Japanese",
    "en": "English",
    "zh-CN": "Chinese (Simplified)",
    "ko": "Korean",
    "vi": "Vietnamese",
}

# Batch protocol
BATCH_DELIMITER = "#####"
BATCH_CHUNK_SIZE = 15
BATCH_MAX_WORKERS = 1

# Ren'Py extraction
PLAYER_SPEAKER = "Player"
NARRATOR_TAG = "Narrator"
RENPY_EXTENSIONS = (".rpy", ".txt")
RENPY_IGNORE_KEYWORDS = frozenset({
    "image", "scene", "show", "hide", "play", "stop", "queue",
    "define", "default", "return", "jump", "call", "label",
    "if", "else", "elif", "while", "menu", "with", "window", "voice", "$",
})

# RPG Maker MZ event command codes
RPGM_CODE_SHOW_TEXT_SETUP = 101
RPGM_CODE_SHOW_TEXT_LINE = 401
RPGM_CODE_SHOW_CHOICES = 102
RPGM_MAP_INFOS_FILENAME = "MapInfos.json"
CHOICE_TAG = "[Choice]"

SETTINGS_DIR = Path(os.environ.get("LOCFORGE_HOME", Path.home() / ".locforge"))
SETTINGS_FILE_PATH = SETTINGS_DIR / "settings.json"

__all__ = [
    "VERSION", "DEFAULT_MODEL_NAME", "GENERATION_TEMPERATURE",
    "REQUEST_MAX_RETRIES", "REQUEST_BACKOFF_CAP_SECONDS",
    "DEFAULT_SOURCE_LANG", "DEFAULT_TARGET_LANG", "SUPPORTED_LANGUAGES",
    "BATCH_DELIMITER", "BATCH_CHUNK_SIZE", "BATCH_MAX_WORKERS",
    "PLAYER_SPEAKER", "NARRATOR_TAG", "RENPY_EXTENSIONS", "RENPY_IGNORE_KEYWORDS",
    "RPGM_CODE_SHOW_TEXT_SETUP", "RPGM_CODE_SHOW_TEXT_LINE", "RPGM_CODE_SHOW_CHOICES",
    "RPGM_MAP_INFOS_FILENAME", "CHOICE_TAG",
    "SETTINGS_DIR", "SETTINGS_FILE_PATH",
]

# Import logger at the end to avoid circular imports
from locforge_logger import get_logger
_logger = get_logger("config")
_logger.debug("locforge_config.py loaded")
