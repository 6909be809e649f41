"""
Persistence of user settings and the conversation archive.

Two records live in the key-value store:
1. ``settings`` - the user's preferences, replaced whole on every save
2. ``conversations`` - the archive, a list of session snapshots that only grows

Malformed stored data never propagates to callers: it is logged and treated
as if nothing had been stored.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from abyss.core.exceptions import ArchiveUnreadableError

from .kv_store import KeyValueStore
from .models import DEFAULT_THEME, THEMES, ConversationSession, UserSettings

logger = logging.getLogger("abyss.settings_store")

SETTINGS_KEY = "settings"
CONVERSATIONS_KEY = "conversations"


class SettingsStore:
    """Read and write settings and the archive through a key-value store."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def load_settings(self) -> UserSettings:
        """Return stored settings, or the defaults when absent or unreadable."""
        payload = self._read_json(SETTINGS_KEY)
        if payload is None:
            return UserSettings()
        if not isinstance(payload, dict):
            logger.warning("Ignoring settings record of type %s", type(payload).__name__)
            return UserSettings()

        theme = payload.get("theme")
        return UserSettings(
            preserve_history=payload.get("preserveHistory") is not False,
            theme=theme if theme in THEMES else DEFAULT_THEME,
        )

    def save_settings(self, user_settings: UserSettings) -> None:
        self.kv.set(SETTINGS_KEY, json.dumps(user_settings.to_record()))

    # ------------------------------------------------------------------
    # Archive
    # ------------------------------------------------------------------
    def load_archive(self) -> Optional[List[ConversationSession]]:
        """Return the archived sessions, or ``None`` when absent or malformed."""
        payload = self._read_json(CONVERSATIONS_KEY)
        if payload is None:
            return None
        if not isinstance(payload, list):
            logger.warning("Ignoring conversation archive of type %s", type(payload).__name__)
            return None
        try:
            return [ConversationSession.model_validate(item) for item in payload]
        except ValidationError as exc:
            logger.warning("Failed to load conversation history: %s", exc)
            return None

    def read_archive_text(self) -> Optional[str]:
        """Return the archive exactly as stored, or ``None`` when absent."""
        return self.kv.get(CONVERSATIONS_KEY)

    def append_session(self, session: ConversationSession) -> None:
        """Append ``session`` to the archive.

        An archive that is stored but unreadable is left untouched and
        ``ArchiveUnreadableError`` is raised instead of replacing it.
        """
        archive = self.load_archive()
        if archive is None:
            if self.read_archive_text() is not None:
                raise ArchiveUnreadableError(
                    "Stored conversation archive is unreadable; not overwriting it"
                )
            archive = []
        archive.append(session)
        records = [item.to_record() for item in archive]
        self.kv.set(CONVERSATIONS_KEY, json.dumps(records, ensure_ascii=False))
        logger.debug(
            "Saved session %s with %d messages (archive size %d)",
            session.session_id,
            len(session.messages),
            len(records),
        )

    def clear_archive(self) -> None:
        self.kv.delete(CONVERSATIONS_KEY)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read_json(self, key: str) -> Optional[Any]:
        raw = self.kv.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Stored %s record is not valid JSON: %s", key, exc)
            return None
