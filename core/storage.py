# -*- coding: utf-8 -*-
"""
LocForge Storage Port

Key-value persistence for user preferences (terminology lists, rules,
model choice, API key). Callers receive a store instance instead of
touching files directly, so tests can run against MemoryStore.

Lifecycle: JsonFileStore loads once at construction and writes the whole
document back on every change.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Protocol

from locforge_logger import get_logger
from locforge_exceptions import SettingsLoadError, SettingsSaveError

logger = get_logger("core.storage")

_MISSING = object()


class KeyValueStore(Protocol):
    """Interface every storage backend provides."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self) -> Iterable[str]:
        ...


class MemoryStore:
    """Volatile store, used for tests and one-shot CLI runs."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())


class JsonFileStore:
    """
    Store backed by a single JSON object on disk.

    A missing file starts empty. A corrupt file (invalid JSON or not
    UTF-8) is logged and treated as empty; it is only overwritten on the
    next successful save. A file that exists but cannot be read raises
    SettingsLoadError.
    """

    def __init__(self, path):
        self._path = Path(path)
        self._data: Dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self):
        if not self._path.is_file():
            logger.info(f"Settings file not found ({self._path}). Starting empty.")
            return
        try:
            with self._path.open('r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.error(f"Settings file ({self._path}) is corrupt (invalid JSON). Starting empty.")
            return
        except OSError as e:
            logger.critical(f"Could not read settings file ({self._path}): {e}")
            raise SettingsLoadError(f"Could not read settings from {self._path}", details=str(e)) from e

        if isinstance(loaded, dict):
            self._data = loaded
            logger.debug(f"Loaded {len(self._data)} keys from {self._path}")
        else:
            logger.warning("Settings file is not a JSON object. Starting empty.")

    def _save(self):
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open('w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=4, ensure_ascii=False)
        except OSError as e:
            logger.critical(f"Could not save settings ({self._path}): {e}")
            raise SettingsSaveError(f"Could not save settings to {self._path}", details=str(e)) from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if self._data.get(key, _MISSING) == value:
            return
        self._data[key] = value
        self._save()

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._save()

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())
