"""Conversation service package exports."""

from .exchange import ExchangeCoordinator, normalize_agent_response
from .kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from .models import ConversationSession, Message, UserSettings
from .service import ConversationService, ExchangeResult, get_conversation_service
from .session_manager import SessionManager, SessionState
from .settings_store import SettingsStore

__all__ = [
    "ConversationService",
    "ConversationSession",
    "ExchangeCoordinator",
    "ExchangeResult",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "Message",
    "SessionManager",
    "SessionState",
    "SettingsStore",
    "UserSettings",
    "get_conversation_service",
    "normalize_agent_response",
]
