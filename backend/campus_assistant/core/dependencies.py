"""
FastAPI dependency injection functions.

Clients are built once from the cached Settings and shared read-only across
requests; services are cheap per-request objects wired from them.
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from campus_assistant.config import Settings, get_settings
from campus_assistant.core.database import execute, get_supabase_client
from campus_assistant.core.identity import ClerkClient
from campus_assistant.core.security import verify_session_token
from campus_assistant.features.auth.service import AuthService
from campus_assistant.features.chat.context import ContextAggregator
from campus_assistant.features.chat.generative import GenerativeClient
from campus_assistant.features.chat.service import ChatService
from campus_assistant.features.knowledge.embedding import EmbeddingClient
from campus_assistant.features.knowledge.service import KnowledgeService

# Bearer token scheme for Swagger UI; missing header handled below as 401
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Client:
    """Dependency: get Supabase client."""
    return get_supabase_client()


@lru_cache
def get_embedding_client() -> EmbeddingClient:
    return EmbeddingClient.from_settings(get_settings())


@lru_cache
def get_generative_client() -> GenerativeClient:
    return GenerativeClient.from_settings(get_settings())


@lru_cache
def get_identity_client() -> ClerkClient:
    return ClerkClient(get_settings())


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    """Dependency: verify the Clerk session token and return its subject.

    Returns:
        str: The Clerk user id.

    Raises:
        HTTPException 401: If the token is missing, invalid or expired.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = await verify_session_token(credentials.credentials, settings)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
        )

    return user_id


# ── Services ─────────────────────────────────────────────

def get_knowledge_service(
    db: Client = Depends(get_db),
    embedder: EmbeddingClient = Depends(get_embedding_client),
    settings: Settings = Depends(get_settings),
) -> KnowledgeService:
    return KnowledgeService(db, embedder, settings)


def get_chat_service(
    db: Client = Depends(get_db),
    knowledge: KnowledgeService = Depends(get_knowledge_service),
    generator: GenerativeClient = Depends(get_generative_client),
    settings: Settings = Depends(get_settings),
) -> ChatService:
    return ChatService(ContextAggregator(db, knowledge, settings), generator)


def get_auth_service(
    db: Client = Depends(get_db),
    identity: ClerkClient = Depends(get_identity_client),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, identity, settings)


async def require_admin(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
) -> str:
    """Dependency: allow only users whose profile role is ``admin``."""
    rows = await execute(
        db.table("profiles").select("role").eq("id", user_id).limit(1)
    )
    if not rows or rows[0].get("role") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user_id
