"""
LocForge Settings Module
Handles loading and saving of application settings through a storage port.
"""

from typing import Any, Dict, Optional

import locforge_config as config
from locforge_logger import get_logger, mask_secret
from core.storage import JsonFileStore, KeyValueStore

logger = get_logger("settings")

KEY_API_KEY = "api_key"
KEY_MODEL = "gemini_model"
KEY_SOURCE_LANG = "default_source_language"
KEY_TARGET_LANG = "default_target_language"
KEY_CHUNK_SIZE = "batch_chunk_size"
KEY_MAX_WORKERS = "batch_max_workers"
KEY_SAFETY = "safety_settings"


def default_settings() -> Dict[str, Any]:
    return {
        KEY_API_KEY: None,
        KEY_MODEL: config.DEFAULT_MODEL_NAME,
        KEY_SOURCE_LANG: config.DEFAULT_SOURCE_LANG,
        KEY_TARGET_LANG: config.DEFAULT_TARGET_LANG,
        KEY_CHUNK_SIZE: config.BATCH_CHUNK_SIZE,
        KEY_MAX_WORKERS: config.BATCH_MAX_WORKERS,
        KEY_SAFETY: {"enabled": False, "thresholds": {}},
    }


def open_default_store() -> JsonFileStore:
    """Open the per-user settings file (~/.locforge/settings.json)."""
    return JsonFileStore(config.SETTINGS_FILE_PATH)


def load_settings(store: KeyValueStore) -> Dict[str, Any]:
    """Read settings from the store, or defaults where absent or invalid."""
    defaults = default_settings()
    settings = defaults.copy()
    for key in defaults:
        value = store.get(key)
        if value is not None:
            settings[key] = value

    # Validate chunk size / worker count
    for key in (KEY_CHUNK_SIZE, KEY_MAX_WORKERS):
        value = settings.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            logger.warning(f"Invalid '{key}' value ({value!r}). Using default.")
            settings[key] = defaults[key]

    for key in (KEY_MODEL, KEY_SOURCE_LANG, KEY_TARGET_LANG):
        if not isinstance(settings.get(key), str) or not settings[key].strip():
            logger.warning(f"Invalid '{key}' value. Using default.")
            settings[key] = defaults[key]

    safety = settings.get(KEY_SAFETY)
    if not isinstance(safety, dict) or not isinstance(safety.get("enabled"), bool):
        logger.warning("Invalid 'safety_settings' value. Using default.")
        settings[KEY_SAFETY] = defaults[KEY_SAFETY]

    logger.debug("Settings loaded.")
    return settings


def save_settings(store: KeyValueStore, settings_data: Dict[str, Any]):
    """Write every known setting back to the store."""
    for key in default_settings():
        if key in settings_data:
            store.set(key, settings_data[key])
    logger.info("Settings saved.")


def load_api_key(store: KeyValueStore) -> Optional[str]:
    key = store.get(KEY_API_KEY)
    if isinstance(key, str) and key.strip():
        logger.debug(f"[load_api_key] Found key ending with {mask_secret(key)}.")
        return key.strip()
    logger.debug("[load_api_key] No API key stored.")
    return None


def save_api_key(store: KeyValueStore, api_key: Optional[str]) -> str:
    """
    Store or remove the API key.

    Returns:
        "saved", "removed" or "unchanged"
    """
    current = store.get(KEY_API_KEY)
    if api_key:
        if current == api_key:
            return "unchanged"
        store.set(KEY_API_KEY, api_key)
        logger.info(f"API key saved ({mask_secret(api_key)}).")
        return "saved"
    if current is not None:
        store.delete(KEY_API_KEY)
        logger.info("API key removed.")
        return "removed"
    return "unchanged"
