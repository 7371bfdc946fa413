"""
Chat feature: Orchestrates context retrieval and model calls.

Conversation history is not persisted in this version.
"""

import logging

from campus_assistant.features.chat.context import ContextAggregator
from campus_assistant.features.chat.generative import GenerativeClient

logger = logging.getLogger(__name__)


class ChatService:
    """Text chat (context-augmented) and image chat (prompt + image only)."""

    def __init__(self, aggregator: ContextAggregator, generator: GenerativeClient):
        self.aggregator = aggregator
        self.generator = generator

    async def text_chat(self, user_id: str, message: str) -> str:
        """Answer a message with the user's campus context.

        Raises:
            GenerationError: If the model call fails. Context sources never raise.
        """
        logger.info(f"Looking up context for: {message[:80]}")
        context = await self.aggregator.build_context(user_id, message)
        return await self.generator.generate_text(message, context)

    async def image_chat(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        """Answer a prompt about an uploaded image. No context aggregation.

        Raises:
            GenerationError: If the model call fails.
        """
        return await self.generator.generate_from_image(prompt, image_bytes, mime_type)
