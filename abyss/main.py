import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import argparse
import logging

from .core.config import settings
from .api.conversation import router as conversation_router
from .api.preferences import router as preferences_router
from .api.health import router as health_router
from .services.conversation import get_conversation_service

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT,
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting up {settings.APP_NAME}...")
    service = get_conversation_service()
    logger.info(
        f"Conversation ready: session={service.session.session_id} "
        f"messages={len(service.session.messages)} "
        f"preserve_history={service.session.settings.preserve_history}"
    )

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Local conversation client for a remote dialogue agent",
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Add CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(conversation_router, prefix="/api/conversation", tags=["Conversation"])
app.include_router(preferences_router, prefix="/api/settings", tags=["Settings"])
app.include_router(health_router, prefix="/api", tags=["Health"])

# Root route
@app.get("/", tags=["Root"])
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs"
    }

# Health check endpoint
@app.get("/health", tags=["Health"])
async def health():
    return {
        "status": "ok",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }

if __name__ == "__main__":
    # Parse command line arguments
    parser = argparse.ArgumentParser(description=f"{settings.APP_NAME} conversation client")
    parser.add_argument("--port", type=int, default=8000, help="Port to run the server on")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to run the server on")

    args = parser.parse_args()

    # Run the application
    logger.info(f"Starting {settings.APP_NAME} on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)
