"""In-memory transcript of the running session and its persistence."""
from __future__ import annotations

import json
import logging
from datetime import date
from enum import Enum
from typing import Callable, List, Optional

from abyss.core.exceptions import (
    ArchiveUnreadableError,
    ExportFailedError,
    NoDataError,
    SessionNotReadyError,
)

from .models import (
    TYPE_EMPATHETIC_REFLECTION,
    ConversationSession,
    Message,
    Theme,
    UserSettings,
    mint_id,
    utcnow,
)
from .settings_store import SettingsStore

logger = logging.getLogger("abyss.session_manager")

GREETING_TEXT = (
    "Hello. I'm here to listen and understand what's on your mind. This is a "
    "judgment-free space where you can share whatever feels important to you "
    "right now. What's been weighing on you?"
)
FRESH_START_TEXT = (
    "All conversations have been cleared. This is a fresh start. "
    "What's on your mind today?"
)

MessagesListener = Callable[[List[Message]], None]
SettingsListener = Callable[[UserSettings], None]


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    ACTIVE = "active"


def _agent_greeting(text: str) -> Message:
    return Message(role="agent", content=text, type=TYPE_EMPATHETIC_REFLECTION)


class SessionManager:
    """Owns the transcript for one process run.

    Identifiers may be injected for deterministic tests; otherwise fresh ones
    are minted when the session hydrates.
    """

    def __init__(
        self,
        store: SettingsStore,
        *,
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        self.store = store
        self._session_id = session_id
        self._user_id = user_id
        self._state = SessionState.UNINITIALIZED
        self._messages: List[Message] = []
        self._settings = UserSettings()
        self._message_listeners: List[MessagesListener] = []
        self._settings_listeners: List[SettingsListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def hydrate(self) -> None:
        if self._state is not SessionState.UNINITIALIZED:
            raise SessionNotReadyError("Session has already been hydrated")
        self._state = SessionState.HYDRATING

        self._session_id = self._session_id or mint_id("session")
        self._user_id = self._user_id or mint_id("user")
        self._settings = self.store.load_settings()

        archive = self.store.load_archive() if self._settings.preserve_history else None
        if archive:
            latest = archive[-1]
            self._messages = list(latest.messages)
            logger.info(
                "Restored %d messages from archived session %s",
                len(self._messages),
                latest.session_id,
            )
        else:
            self._messages = [_agent_greeting(GREETING_TEXT)]

        self._state = SessionState.ACTIVE
        logger.info("Session %s active for user %s", self._session_id, self._user_id)
        self._emit_messages()
        self._emit_settings()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session_id(self) -> str:
        self._require_active()
        return self._session_id

    @property
    def user_id(self) -> str:
        self._require_active()
        return self._user_id

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def settings(self) -> UserSettings:
        return self._settings.model_copy()

    # ------------------------------------------------------------------
    # Transcript
    # ------------------------------------------------------------------
    def append_message(self, message: Message) -> None:
        self._require_active()
        self._messages.append(message)
        self._save()
        self._emit_messages()

    def clear_all(self) -> None:
        """Delete the archive and start over from a single greeting."""
        self._require_active()
        self.store.clear_archive()
        self._messages = [_agent_greeting(FRESH_START_TEXT)]
        self._save()
        logger.info("Conversation archive cleared")
        self._emit_messages()

    def export_archive(self) -> bytes:
        self._require_active()
        raw = self.store.read_archive_text()
        if raw is None:
            raise NoDataError("No conversations to export.")
        try:
            archive = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Export failed, stored archive is not valid JSON: %s", exc)
            raise ExportFailedError("Failed to export conversations.") from exc
        payload = json.dumps(archive, indent=2, ensure_ascii=False)
        logger.info("Exported conversation archive (%d bytes)", len(payload))
        return payload.encode("utf-8")

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        today = today or utcnow().date()
        return f"abyss-conversations-{today.isoformat()}.json"

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def update_settings(
        self,
        *,
        preserve_history: Optional[bool] = None,
        theme: Optional[Theme] = None,
    ) -> UserSettings:
        self._require_active()
        updated = self._settings.model_copy()
        if preserve_history is not None:
            updated.preserve_history = preserve_history
        if theme is not None:
            updated.theme = theme
        self.store.save_settings(updated)
        self._settings = updated
        self._emit_settings()
        return self.settings

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def subscribe_messages(self, listener: MessagesListener) -> Callable[[], None]:
        self._message_listeners.append(listener)
        return lambda: self._message_listeners.remove(listener)

    def subscribe_settings(self, listener: SettingsListener) -> Callable[[], None]:
        self._settings_listeners.append(listener)
        return lambda: self._settings_listeners.remove(listener)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_active(self) -> None:
        if self._state is not SessionState.ACTIVE:
            raise SessionNotReadyError(f"Session is {self._state.value}, not active")

    def _save(self) -> None:
        if not self._settings.preserve_history:
            return
        try:
            self.store.append_session(
                ConversationSession(session_id=self._session_id, messages=list(self._messages))
            )
        except (OSError, ValueError, ArchiveUnreadableError):
            logger.exception("Failed to save conversation for session %s", self._session_id)

    def _emit_messages(self) -> None:
        for listener in list(self._message_listeners):
            try:
                listener(self.messages)
            except Exception:
                logger.exception("messages_changed listener failed")

    def _emit_settings(self) -> None:
        for listener in list(self._settings_listeners):
            try:
                listener(self.settings)
            except Exception:
                logger.exception("settings_changed listener failed")
