"""
Campus Assistant API - FastAPI Application Entry Point.

Feature-based modular architecture:
  Each feature in campus_assistant/features/ has its own router, service, and schemas.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from supabase import Client

from campus_assistant.config import get_settings
from campus_assistant.core.database import execute
from campus_assistant.core.dependencies import get_db

# ── Feature Routers ──────────────────────────────────────
from campus_assistant.features.auth.router import router as auth_router
from campus_assistant.features.chat.router import router as chat_router
from campus_assistant.features.knowledge.router import router as knowledge_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup & shutdown."""
    settings = get_settings()
    logger.info(f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} starting...")
    logger.info(f"🤖 LLM Provider: {settings.LLM_PROVIDER} ({settings.LLM_MODEL})")
    logger.info(f"🔗 Supabase: {settings.SUPABASE_URL[:40]}...")
    if not settings.LLM_API_KEY:
        logger.warning("LLM_API_KEY is not set")
    yield
    logger.info("👋 Shutting down...")


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Campus assistant backend: profiles, knowledge base and context-aware chat",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Register Feature Routers ─────────────────────────
    app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
    app.include_router(chat_router, prefix="/api/chat", tags=["Chat"])
    app.include_router(knowledge_router, prefix="/api/kb", tags=["Knowledge Base"])

    # ── Liveness ─────────────────────────────────────────
    @app.get("/", tags=["System"], response_class=PlainTextResponse)
    async def root():
        return "Campus Assistant API is running"

    @app.get("/health", tags=["System"])
    async def health_check(db: Client = Depends(get_db)):
        """Keep-alive: a tiny query so the hosted database never idles out."""
        try:
            await execute(db.table("profiles").select("id").limit(1))
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return JSONResponse(
                status_code=500,
                content={"status": "error", "message": "Database connection failed"},
            )
        return {
            "status": "ok",
            "message": "Service is healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()
