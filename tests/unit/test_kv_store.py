"""
Unit tests for the JSON file key-value store.
"""

import pytest

from abyss.services.conversation import (
    JsonFileKeyValueStore,
    SessionManager,
    SettingsStore,
    UserSettings,
)


@pytest.fixture
def file_store(tmp_path):
    return JsonFileKeyValueStore(tmp_path / "store")


def test_missing_key(file_store):
    assert file_store.get("settings") is None


def test_set_get_delete(file_store):
    file_store.set("settings", '{"theme": "light"}')
    assert file_store.get("settings") == '{"theme": "light"}'
    assert (file_store.base_dir / "settings.json").exists()

    file_store.delete("settings")
    assert file_store.get("settings") is None
    file_store.delete("settings")


def test_no_temp_files_left(file_store):
    file_store.set("conversations", "[]")
    assert sorted(p.name for p in file_store.base_dir.iterdir()) == ["conversations.json"]


@pytest.mark.parametrize("key", ["", "../escape", "nested/key", ".hidden"])
def test_rejects_unsafe_keys(file_store, key):
    with pytest.raises(ValueError):
        file_store.set(key, "x")


def test_history_survives_restart(tmp_path):
    store_dir = tmp_path / "store"
    first = SessionManager(SettingsStore(JsonFileKeyValueStore(store_dir)))
    first.hydrate()
    first.update_settings(theme="light")
    first.clear_all()
    expected = first.messages

    second = SessionManager(SettingsStore(JsonFileKeyValueStore(store_dir)))
    second.hydrate()

    assert second.settings == UserSettings(theme="light")
    assert second.messages == expected
    assert second.session_id != first.session_id
