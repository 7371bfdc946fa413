"""
Model factories for the assistant.

Two models back the service: the chat model used for answers (text and
image) and the embedding model used for KB indexing and search. Both are
chosen by env vars:
  LLM_PROVIDER=gemini | openai | groq        EMBEDDING_PROVIDER=gemini | openai

Every client is built with the configured request timeout and
``MODEL_MAX_RETRIES`` (default 0). A failed call surfaces to the caller
immediately; the SDKs' own retry loops are not used.
"""

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel

from campus_assistant.config import Settings, get_settings

CHAT_PROVIDERS = ("gemini", "openai", "groq")
EMBEDDING_PROVIDERS = ("gemini", "openai")


def _request_policy(settings: Settings, timeout: float) -> dict:
    return {"timeout": timeout, "max_retries": settings.MODEL_MAX_RETRIES}


def create_llm(settings: Settings | None = None) -> BaseChatModel:
    """Build the chat model for answer generation.

    Raises:
        ValueError: If LLM_PROVIDER is not one of CHAT_PROVIDERS.
    """
    settings = settings or get_settings()
    policy = _request_policy(settings, settings.LLM_TIMEOUT)
    provider = settings.LLM_PROVIDER

    if provider == "gemini":
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=settings.LLM_MODEL,
            google_api_key=settings.LLM_API_KEY,
            temperature=settings.LLM_TEMPERATURE,
            **policy,
        )
    if provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=settings.LLM_MODEL,
            api_key=settings.LLM_API_KEY,
            temperature=settings.LLM_TEMPERATURE,
            **policy,
        )
    if provider == "groq":
        from langchain_groq import ChatGroq

        return ChatGroq(
            model=settings.LLM_MODEL,
            api_key=settings.LLM_API_KEY,
            temperature=settings.LLM_TEMPERATURE,
            **policy,
        )

    raise ValueError(f"Unknown LLM provider '{provider}', expected one of {CHAT_PROVIDERS}")


def create_embeddings(settings: Settings | None = None) -> Embeddings:
    """Build the embedding model used for KB vectors.

    Gemini embeddings take their deadline through ``request_options``;
    retries are bounded by the caller's ``EMBEDDING_TIMEOUT``.
    """
    settings = settings or get_settings()
    provider = settings.EMBEDDING_PROVIDER

    if provider == "gemini":
        from langchain_google_genai import GoogleGenerativeAIEmbeddings

        return GoogleGenerativeAIEmbeddings(
            model=f"models/{settings.EMBEDDING_MODEL}",
            google_api_key=settings.LLM_API_KEY,
            request_options={"timeout": settings.EMBEDDING_TIMEOUT},
        )
    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        return OpenAIEmbeddings(
            model=settings.EMBEDDING_MODEL,
            api_key=settings.LLM_API_KEY,
            **_request_policy(settings, settings.EMBEDDING_TIMEOUT),
        )

    raise ValueError(
        f"Unknown embedding provider '{provider}', expected one of {EMBEDDING_PROVIDERS}"
    )
