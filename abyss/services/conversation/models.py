"""Data models used by the conversation service."""
from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MessageRole = Literal["user", "agent"]
Theme = Literal["dark", "light"]

DEFAULT_THEME: Theme = "dark"
THEMES = ("dark", "light")

TYPE_EMPATHETIC_REFLECTION = "empathetic_reflection"
TYPE_USER_INPUT = "user_input"
TYPE_ERROR = "error"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def mint_id(prefix: str) -> str:
    """Return ``<prefix>-<epoch millis>-<random hex>``.

    The random suffix keeps identifiers minted within the same millisecond,
    or by another instance started at the same moment, apart.
    """
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


class Message(BaseModel):
    """A single turn of the conversation."""

    id: str = Field(default_factory=lambda: mint_id("msg"))
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    type: Optional[str] = None
    emotional_themes_detected: Optional[List[str]] = None
    crisis_detected: Optional[bool] = None

    def to_record(self) -> Dict[str, Any]:
        """Serialize for storage, leaving out unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class ConversationSession(BaseModel):
    """One archived snapshot of a session's transcript."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    messages: List[Message] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utcnow, alias="lastUpdated")

    def to_record(self) -> Dict[str, Any]:
        return {
            "messages": [message.to_record() for message in self.messages],
            "lastUpdated": self.last_updated.isoformat(),
            "sessionId": self.session_id,
        }


class UserSettings(BaseModel):
    """User preferences; the whole record is replaced on every save."""

    model_config = ConfigDict(populate_by_name=True)

    preserve_history: bool = Field(True, alias="preserveHistory")
    theme: Theme = DEFAULT_THEME

    def to_record(self) -> Dict[str, Any]:
        return {"preserveHistory": self.preserve_history, "theme": self.theme}
