"""API routes for user settings (history preservation and theme)."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from abyss.services.conversation import ConversationService, UserSettings, get_conversation_service
from abyss.services.conversation.models import Theme

router = APIRouter()


class SettingsOut(BaseModel):
    preserveHistory: bool
    theme: Theme

    @classmethod
    def from_model(cls, user_settings: UserSettings) -> "SettingsOut":
        return cls(preserveHistory=user_settings.preserve_history, theme=user_settings.theme)


class SettingsUpdate(BaseModel):
    preserveHistory: Optional[bool] = None
    theme: Optional[Theme] = None


@router.get("", response_model=SettingsOut)
async def get_settings(service: ConversationService = Depends(get_conversation_service)):
    return SettingsOut.from_model(service.session.settings)


@router.patch("", response_model=SettingsOut)
async def update_settings(
    payload: SettingsUpdate,
    service: ConversationService = Depends(get_conversation_service),
):
    updated = service.session.update_settings(
        preserve_history=payload.preserveHistory,
        theme=payload.theme,
    )
    return SettingsOut.from_model(updated)
