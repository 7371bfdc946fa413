"""
Application configuration using Pydantic Settings.
All config is loaded from environment variables / .env file.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "campus-assistant-api"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"  # comma-separated

    # ── Supabase ─────────────────────────────────────────
    SUPABASE_URL: str
    SUPABASE_KEY: str  # anon/public key
    SUPABASE_SERVICE_KEY: str = ""  # service_role key, preferred when set

    # ── Clerk (identity provider) ────────────────────────
    CLERK_SECRET_KEY: str = ""  # backend API key (sk_...)
    CLERK_JWT_KEY: str = ""  # PEM public key for networkless verification
    CLERK_JWKS_URL: str = "https://api.clerk.com/v1/jwks"
    CLERK_API_URL: str = "https://api.clerk.com/v1"
    CLERK_AUTHORIZED_PARTIES: str = ""  # comma-separated allowed `azp` origins
    JWKS_CACHE_TTL_SECONDS: int = 3600
    IDENTITY_TIMEOUT: float = 10.0

    # ── Role access codes ────────────────────────────────
    ADMIN_SECRET: str = ""  # empty disables admin self-promotion
    FACULTY_SECRET: str = ""

    # ── LLM (Provider-Agnostic) ──────────────────────────
    LLM_PROVIDER: str = "gemini"  # gemini | openai | groq
    LLM_MODEL: str = "gemini-2.5-flash"
    LLM_API_KEY: str = ""
    LLM_TEMPERATURE: float = 1.0
    LLM_TIMEOUT: float = 60.0  # seconds, generation failure is fatal

    # ── Embedding ────────────────────────────────────────
    EMBEDDING_PROVIDER: str = "gemini"
    EMBEDDING_MODEL: str = "text-embedding-004"
    EMBEDDING_DIMENSIONS: int = 768
    EMBEDDING_TIMEOUT: float = 20.0
    MODEL_MAX_RETRIES: int = 0  # chat and embedding SDK retries

    # ── Retrieval ────────────────────────────────────────
    KB_MATCH_THRESHOLD: float = 0.5
    KB_CHAT_MATCH_COUNT: int = 3
    KB_SEARCH_MATCH_COUNT: int = 5
    EVENTS_CONTEXT_LIMIT: int = 5
    CONTEXT_SOURCE_TIMEOUT: float = 10.0  # per source, failure degrades to empty

    # ── Uploads ──────────────────────────────────────────
    MAX_IMAGE_SIZE_MB: int = 10

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def authorized_parties(self) -> list[str]:
        return [p.strip() for p in self.CLERK_AUTHORIZED_PARTIES.split(",") if p.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance (singleton)."""
    return Settings()
