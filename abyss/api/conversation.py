"""API routes for the current conversation."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict

from abyss.core.exceptions import ExchangeInFlightError, ExportFailedError, NoDataError
from abyss.services.conversation import ConversationService, Message, get_conversation_service

router = APIRouter()
logger = logging.getLogger("abyss.api.conversation")

CRISIS_NOTICE = "Crisis resources available - please reach out for support"


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class MessageOut(BaseModel):
    id: str
    role: str
    content: str
    timestamp: datetime
    type: Optional[str] = None
    emotionalThemesDetected: Optional[List[str]] = None
    crisisDetected: Optional[bool] = None
    crisisNotice: Optional[str] = None

    @classmethod
    def from_model(cls, message: Message) -> "MessageOut":
        return cls(
            id=message.id,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            type=message.type,
            emotionalThemesDetected=message.emotional_themes_detected,
            crisisDetected=message.crisis_detected,
            crisisNotice=CRISIS_NOTICE if message.crisis_detected else None,
        )


class ConversationOut(BaseModel):
    sessionId: str
    userId: str
    loading: bool
    messages: List[MessageOut]

    @classmethod
    def from_service(cls, service: ConversationService) -> "ConversationOut":
        session = service.session
        return cls(
            sessionId=session.session_id,
            userId=session.user_id,
            loading=service.loading,
            messages=[MessageOut.from_model(msg) for msg in session.messages],
        )


class SendMessageRequest(BaseModel):
    # Only the text is accepted; detection flags come from the agent.
    model_config = ConfigDict(extra="ignore")

    message: str


class SendMessageResponse(BaseModel):
    userMessage: MessageOut
    agentMessage: MessageOut
    messages: List[MessageOut]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("", response_model=ConversationOut)
async def get_conversation(service: ConversationService = Depends(get_conversation_service)):
    return ConversationOut.from_service(service)


@router.post(
    "/messages",
    response_model=SendMessageResponse,
    responses={204: {"description": "Blank message ignored"}},
)
async def send_message(
    payload: SendMessageRequest,
    service: ConversationService = Depends(get_conversation_service),
):
    try:
        result = await service.submit(payload.message)
    except ExchangeInFlightError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)

    if result is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return SendMessageResponse(
        userMessage=MessageOut.from_model(result.user_message),
        agentMessage=MessageOut.from_model(result.agent_message),
        messages=[MessageOut.from_model(msg) for msg in service.session.messages],
    )


@router.get("/export")
async def export_conversations(service: ConversationService = Depends(get_conversation_service)):
    try:
        body = service.session.export_archive()
    except NoDataError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    except ExportFailedError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)

    filename = service.session.export_filename()
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("", response_model=ConversationOut)
async def clear_conversations(
    confirm: bool = Query(False, description="Must be true; deleting history cannot be undone"),
    service: ConversationService = Depends(get_conversation_service),
):
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deleting all conversation history cannot be undone. Repeat with confirm=true.",
        )
    service.session.clear_all()
    logger.info("Cleared conversation history for session %s", service.session.session_id)
    return ConversationOut.from_service(service)
