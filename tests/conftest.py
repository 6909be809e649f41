"""
Shared fixtures for conversation tests.
"""

import json

import httpx
import pytest

from abyss.services.conversation import (
    ConversationService,
    ExchangeCoordinator,
    InMemoryKeyValueStore,
    SessionManager,
    SettingsStore,
)

AGENT_URL = "http://agent.test/api/agent"
AGENT_ID = "agent-under-test"


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return SettingsStore(kv)


@pytest.fixture
def agent_calls():
    """Request bodies received by the fake agent, in order."""
    return []


@pytest.fixture
def agent_reply():
    """Mutable reply used by the fake agent; tests replace ``body`` or ``error``."""
    return {
        "body": {"success": True, "response": {"therapeutic_response": "I hear you."}},
        "error": None,
    }


@pytest.fixture
def agent_transport(agent_calls, agent_reply):
    def handler(request: httpx.Request) -> httpx.Response:
        agent_calls.append(json.loads(request.content))
        if agent_reply["error"] is not None:
            raise agent_reply["error"]
        body = agent_reply["body"]
        if isinstance(body, str):
            return httpx.Response(200, text=body)
        return httpx.Response(200, json=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def coordinator(agent_transport):
    return ExchangeCoordinator(
        endpoint_url=AGENT_URL,
        agent_id=AGENT_ID,
        timeout=5.0,
        transport=agent_transport,
    )


@pytest.fixture
def session(store):
    manager = SessionManager(store, session_id="session-test", user_id="user-test")
    manager.hydrate()
    return manager


@pytest.fixture
def service(session, coordinator):
    return ConversationService(session, coordinator)
