"""
Unit tests for the settings store.
"""

import json

import pytest

from abyss.core.exceptions import ArchiveUnreadableError
from abyss.services.conversation import ConversationSession, Message, UserSettings
from abyss.services.conversation.settings_store import CONVERSATIONS_KEY, SETTINGS_KEY


class TestLoadSettings:
    """Defaults and lenient parsing of the settings record."""

    def test_absent_record_yields_defaults(self, store):
        loaded = store.load_settings()
        assert loaded.preserve_history is True
        assert loaded.theme == "dark"

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '"dark"', "null"])
    def test_malformed_record_yields_defaults(self, kv, store, raw):
        kv.set(SETTINGS_KEY, raw)
        assert store.load_settings() == UserSettings()

    def test_only_literal_false_disables_history(self, kv, store):
        kv.set(SETTINGS_KEY, json.dumps({"preserveHistory": 0, "theme": "light"}))
        loaded = store.load_settings()
        assert loaded.preserve_history is True
        assert loaded.theme == "light"

        kv.set(SETTINGS_KEY, json.dumps({"preserveHistory": False}))
        assert store.load_settings().preserve_history is False

    def test_unknown_theme_falls_back_to_dark(self, kv, store):
        kv.set(SETTINGS_KEY, json.dumps({"theme": "sepia"}))
        assert store.load_settings().theme == "dark"

    def test_save_overwrites_whole_record(self, kv, store):
        store.save_settings(UserSettings(preserve_history=False, theme="light"))
        assert json.loads(kv.get(SETTINGS_KEY)) == {"preserveHistory": False, "theme": "light"}
        assert store.load_settings() == UserSettings(preserve_history=False, theme="light")


class TestArchive:
    """Append-only archive persistence."""

    def test_absent_archive(self, store):
        assert store.load_archive() is None

    @pytest.mark.parametrize(
        "raw",
        ["{broken", '{"sessionId": "x"}', '[{"messages": "nope"}]', '[{"sessionId": "s", "messages": [{"role": "bot"}]}]'],
    )
    def test_malformed_archive_is_absent(self, kv, store, raw):
        kv.set(CONVERSATIONS_KEY, raw)
        assert store.load_archive() is None

    def test_append_then_reload_preserves_messages(self, store):
        first = Message(role="agent", content="Hello", type="empathetic_reflection")
        second = Message(role="user", content="Hi there", type="user_input")
        store.append_session(ConversationSession(session_id="session-1", messages=[first, second]))

        archive = store.load_archive()
        assert len(archive) == 1
        assert archive[0].session_id == "session-1"
        assert archive[0].messages == [first, second]

    def test_append_grows_archive(self, store):
        store.append_session(ConversationSession(session_id="a", messages=[]))
        store.append_session(ConversationSession(session_id="a", messages=[]))
        store.append_session(ConversationSession(session_id="b", messages=[]))
        assert [item.session_id for item in store.load_archive()] == ["a", "a", "b"]

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            json.dumps(
                [
                    {"sessionId": "s1", "messages": []},
                    {"sessionId": "s2", "messages": [{"id": "m", "role": "assistant", "content": "x"}]},
                ]
            ),
        ],
    )
    def test_append_never_overwrites_unreadable_archive(self, kv, store, raw):
        kv.set(CONVERSATIONS_KEY, raw)

        with pytest.raises(ArchiveUnreadableError):
            store.append_session(ConversationSession(session_id="s", messages=[]))

        assert kv.get(CONVERSATIONS_KEY) == raw

    def test_append_after_clear_starts_fresh(self, kv, store):
        kv.set(CONVERSATIONS_KEY, "not json")
        store.clear_archive()
        store.append_session(ConversationSession(session_id="s", messages=[]))
        assert [item.session_id for item in store.load_archive()] == ["s"]

    def test_read_archive_text_is_verbatim(self, kv, store):
        kv.set(CONVERSATIONS_KEY, '[{"sessionId": "s", "messages": [], "extra": 1}]')
        assert store.read_archive_text() == '[{"sessionId": "s", "messages": [], "extra": 1}]'

    def test_stored_record_shape(self, kv, store):
        message = Message(role="user", content="x")
        store.append_session(ConversationSession(session_id="s", messages=[message]))
        record = json.loads(kv.get(CONVERSATIONS_KEY))[0]
        assert set(record) == {"messages", "lastUpdated", "sessionId"}
        assert record["messages"][0]["id"] == message.id
        assert "crisis_detected" not in record["messages"][0]

    def test_clear_archive_keeps_settings(self, kv, store):
        store.save_settings(UserSettings(theme="light"))
        store.append_session(ConversationSession(session_id="s", messages=[]))
        store.clear_archive()
        assert store.load_archive() is None
        assert store.load_settings().theme == "light"
