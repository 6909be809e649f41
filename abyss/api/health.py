from fastapi import APIRouter
from abyss.core.config import settings
import time

router = APIRouter()

CRISIS_RESOURCES = [
    {
        "name": "National Suicide Prevention Lifeline",
        "contact": "988",
        "href": "tel:988",
    },
    {
        "name": "Crisis Text Line",
        "contact": "Text HOME to 741741",
        "href": "sms:741741",
    },
    {
        "name": "International",
        "contact": "findahelpline.com",
        "href": "https://findahelpline.com",
    },
]

@router.get("/health")
async def health_check():
    """Liveness check with the agent configuration in use"""
    return {
        "status": "ok",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": int(time.time()),
        "agent": {
            "endpoint": settings.AGENT_ENDPOINT_URL,
            "agent_id": settings.AGENT_ID,
        },
    }

@router.get("/crisis-resources")
async def crisis_resources():
    """Static crisis support contacts shown next to the conversation"""
    return {"resources": CRISIS_RESOURCES}
