# -*- coding: utf-8 -*-
"""
Tests for the storage port and the settings helpers built on it.
"""

import json
from pathlib import Path

import pytest

import locforge_config as config
import locforge_settings as settings
from core.storage import JsonFileStore, MemoryStore
from locforge_exceptions import SettingsLoadError, SettingsSaveError


class TestJsonFileStore:

    def test_missing_file_starts_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "settings.json")
        assert list(store.keys()) == []
        assert store.get("anything", 5) == 5

    def test_set_writes_through(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        store = JsonFileStore(path)
        store.set("gemini_model", "gemini-test")

        assert json.loads(path.read_text(encoding="utf-8")) == {"gemini_model": "gemini-test"}
        assert JsonFileStore(path).get("gemini_model") == "gemini-test"

    def test_delete(self, tmp_path):
        path = tmp_path / "settings.json"
        store = JsonFileStore(path)
        store.set("a", 1)
        store.delete("a")
        store.delete("never-there")
        assert json.loads(path.read_text(encoding="utf-8")) == {}

    def test_corrupt_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")
        store = JsonFileStore(path)
        assert list(store.keys()) == []
        # left alone until the next save
        assert path.read_text(encoding="utf-8") == "{broken"

    def test_non_utf8_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_bytes(b"\xff\xfe{\x00")
        assert list(JsonFileStore(path).keys()) == []

    def test_unreadable_file_raises(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        path.write_text("{}", encoding="utf-8")

        def deny(self, *args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(Path, "open", deny)
        with pytest.raises(SettingsLoadError):
            JsonFileStore(path)

    def test_non_object_document(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert list(JsonFileStore(path).keys()) == []

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        store = JsonFileStore(blocker / "settings.json")
        with pytest.raises(SettingsSaveError):
            store.set("a", 1)


class TestSettings:

    def test_defaults_when_empty(self):
        loaded = settings.load_settings(MemoryStore())
        assert loaded == settings.default_settings()
        assert loaded[settings.KEY_MODEL] == config.DEFAULT_MODEL_NAME

    def test_invalid_values_fall_back(self):
        store = MemoryStore({
            settings.KEY_CHUNK_SIZE: 0,
            settings.KEY_MAX_WORKERS: True,
            settings.KEY_MODEL: "   ",
            settings.KEY_SAFETY: {"enabled": "yes"},
            settings.KEY_TARGET_LANG: "ja",
        })
        loaded = settings.load_settings(store)
        defaults = settings.default_settings()
        assert loaded[settings.KEY_CHUNK_SIZE] == defaults[settings.KEY_CHUNK_SIZE]
        assert loaded[settings.KEY_MAX_WORKERS] == defaults[settings.KEY_MAX_WORKERS]
        assert loaded[settings.KEY_MODEL] == defaults[settings.KEY_MODEL]
        assert loaded[settings.KEY_SAFETY] == defaults[settings.KEY_SAFETY]
        assert loaded[settings.KEY_TARGET_LANG] == "ja"

    def test_save_round_trip(self):
        store = MemoryStore()
        data = settings.default_settings()
        data[settings.KEY_CHUNK_SIZE] = 30
        data["unknown_key"] = "ignored"
        settings.save_settings(store, data)

        assert settings.load_settings(store)[settings.KEY_CHUNK_SIZE] == 30
        assert "unknown_key" not in store.keys()


class TestApiKey:

    def test_save_load_remove(self):
        store = MemoryStore()
        assert settings.load_api_key(store) is None
        assert settings.save_api_key(store, "AIza-secret") == "saved"
        assert settings.save_api_key(store, "AIza-secret") == "unchanged"
        assert settings.load_api_key(store) == "AIza-secret"
        assert settings.save_api_key(store, None) == "removed"
        assert settings.load_api_key(store) is None
        assert settings.save_api_key(store, "") == "unchanged"

    def test_blank_stored_key_ignored(self):
        assert settings.load_api_key(MemoryStore({settings.KEY_API_KEY: "  "})) is None
