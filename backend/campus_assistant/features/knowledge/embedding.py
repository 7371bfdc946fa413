"""
Knowledge feature: Embedding client.
Wraps the LLM provider's embedding model for use across the app.
"""

import logging

from langchain_core.embeddings import Embeddings

from campus_assistant.config import Settings
from campus_assistant.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Turns text into a fixed-length vector."""

    def __init__(self, model: Embeddings, dimensions: int):
        self.model = model
        self.dimensions = dimensions

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmbeddingClient":
        from campus_assistant.core.llm_provider import create_embeddings

        return cls(create_embeddings(settings), settings.EMBEDDING_DIMENSIONS)

    async def embed(self, text: str) -> list[float]:
        """Generate embedding vector for a single text string.

        Args:
            text: The text to embed.

        Returns:
            A list of floats, truncated to the configured dimensionality
            so it matches the ``vector(n)`` column.

        Raises:
            EmbeddingError: If the provider call fails.
        """
        try:
            vector = await self.model.aembed_query(text)
        except Exception as e:
            logger.error(f"Embedding error: {e}")
            raise EmbeddingError(f"Failed to compute embedding: {e}") from e
        return list(vector[: self.dimensions])
