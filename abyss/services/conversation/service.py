"""Conversation service orchestrating the session manager and agent exchanges."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from abyss.core.config import settings
from abyss.core.exceptions import ExchangeInFlightError

from .exchange import ExchangeCoordinator
from .kv_store import JsonFileKeyValueStore
from .models import TYPE_USER_INPUT, Message
from .session_manager import SessionManager
from .settings_store import SettingsStore

logger = logging.getLogger("abyss.conversation")


@dataclass
class ExchangeResult:
    """Both messages appended by one exchange."""

    user_message: Message
    agent_message: Message


class ConversationService:
    """High level facade for one conversation per process."""

    def __init__(self, session: SessionManager, coordinator: ExchangeCoordinator) -> None:
        self.session = session
        self.coordinator = coordinator
        self._loading = False

    @property
    def loading(self) -> bool:
        return self._loading

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------
    async def submit(self, text: str) -> Optional[ExchangeResult]:
        """Append the user's message, await the agent and append its reply.

        Returns ``None`` without touching the transcript when ``text`` is blank.
        """
        if not text.strip():
            return None
        if self._loading:
            raise ExchangeInFlightError("A message is already being sent")

        self._loading = True
        try:
            user_message = Message(role="user", content=text, type=TYPE_USER_INPUT)
            self.session.append_message(user_message)

            agent_message = await self.coordinator.send(
                text,
                self.session.session_id,
                self.session.user_id,
            )
            self.session.append_message(agent_message)
        finally:
            self._loading = False

        if agent_message.crisis_detected:
            logger.warning("Agent flagged crisis in session %s", self.session.session_id)
        return ExchangeResult(user_message=user_message, agent_message=agent_message)


def build_conversation_service(store_dir=None) -> ConversationService:
    store = SettingsStore(JsonFileKeyValueStore(store_dir or settings.DATA_DIR))
    coordinator = ExchangeCoordinator(
        endpoint_url=settings.AGENT_ENDPOINT_URL,
        agent_id=settings.AGENT_ID,
        timeout=settings.AGENT_REQUEST_TIMEOUT,
    )
    return ConversationService(SessionManager(store), coordinator)


@lru_cache(maxsize=1)
def get_conversation_service() -> ConversationService:
    service = build_conversation_service()
    service.session.hydrate()
    return service
