"""Single request/response exchange with the remote dialogue agent."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from .models import TYPE_EMPATHETIC_REFLECTION, TYPE_ERROR, Message

logger = logging.getLogger("abyss.exchange")

TECHNICAL_ISSUE_TEXT = (
    "I'm experiencing a technical issue. Your feelings matter - please reach out "
    "to a trusted person or crisis service if you need immediate support."
)
APOLOGY_TEXT = (
    "I apologize, but I'm having difficulty processing that at the moment. Please "
    "try again, or if you're in crisis, please reach out to a mental health "
    "professional immediately."
)


class AgentTransportError(Exception):
    """The agent could not be reached or answered with an unreadable body."""


class ExchangeCoordinator:
    """Send one user message to the agent and turn the reply into a message.

    ``send`` never raises for agent-side problems: transport and logical
    failures come back as ``type="error"`` agent messages.
    """

    def __init__(
        self,
        *,
        endpoint_url: str,
        agent_id: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.agent_id = agent_id
        self.timeout = timeout
        self._transport = transport

    async def send(self, user_text: str, session_id: str, user_id: str) -> Optional[Message]:
        if not user_text.strip():
            return None

        try:
            data = await self._post(
                {
                    "message": user_text,
                    "agent_id": self.agent_id,
                    "user_id": user_id,
                    "session_id": session_id,
                }
            )
        except AgentTransportError as exc:
            logger.warning("Agent request failed: %s", exc)
            return Message(role="agent", content=TECHNICAL_ISSUE_TEXT, type=TYPE_ERROR)

        if not data.get("success"):
            logger.info("Agent reported failure for session %s", session_id)
            return Message(role="agent", content=APOLOGY_TEXT, type=TYPE_ERROR)

        return normalize_agent_response(data.get("response"))

    async def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        client_kwargs: Dict[str, Any] = {"timeout": self.timeout}
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        try:
            async with httpx.AsyncClient(**client_kwargs) as client:
                response = await client.post(self.endpoint_url, json=body)
                data = response.json()
        except httpx.HTTPError as exc:
            raise AgentTransportError(str(exc) or exc.__class__.__name__) from exc
        except ValueError as exc:
            raise AgentTransportError(f"unparseable response body: {exc}") from exc

        if not isinstance(data, dict):
            raise AgentTransportError(f"unexpected response body type {type(data).__name__}")
        return data


def normalize_agent_response(payload: Any) -> Message:
    """Map a successful agent payload onto an agent message.

    The payload is either plain text or an object carrying
    ``therapeutic_response``, ``response_type``, ``emotional_themes_detected``
    and ``crisis_detected``.
    """
    fields = payload if isinstance(payload, dict) else {"therapeutic_response": payload}

    content = fields.get("therapeutic_response")
    if not content:
        content = _stringify(payload)
    elif not isinstance(content, str):
        content = _stringify(content)
    response_type = fields.get("response_type")

    return Message(
        role="agent",
        content=content,
        type=str(response_type) if response_type else TYPE_EMPATHETIC_REFLECTION,
        emotional_themes_detected=_themes(fields.get("emotional_themes_detected")),
        crisis_detected=bool(fields.get("crisis_detected") or False),
    )


def _stringify(payload: Any) -> str:
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, ensure_ascii=False)


def _themes(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value]
    return [str(value)]
