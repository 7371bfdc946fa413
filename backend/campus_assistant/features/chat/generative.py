"""
Chat feature: Generative model client (text and image prompts).
"""

import asyncio
import base64
import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

from campus_assistant.config import Settings
from campus_assistant.core.exceptions import GenerationError

logger = logging.getLogger(__name__)


def build_text_prompt(message: str, context: str | None = None) -> str:
    """Join the rendered context block and the user's question."""
    if not context:
        return message
    return f"Context: {context}\n\nQuestion: {message}"


def build_image_content(prompt: str, image_bytes: bytes, mime_type: str) -> list[dict]:
    """Build multimodal content blocks with the image inlined as a data URL."""
    data = base64.b64encode(image_bytes).decode("ascii")
    content_blocks: list[dict] = [
        {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{data}"}},
    ]
    if prompt:
        content_blocks.append({"type": "text", "text": prompt})
    return content_blocks


def extract_text(content) -> str:
    """Flatten a chat model reply (plain string or content-block list) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, dict) and item.get("type", "text") == "text" and "text" in item:
                parts.append(item["text"])
            elif isinstance(item, str):
                parts.append(item)
        return "".join(parts)
    return str(content)


class GenerativeClient:
    """Sends prompts to the chat model. Every failure is fatal for the caller."""

    def __init__(self, llm: BaseChatModel, timeout: float):
        self.llm = llm
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerativeClient":
        from campus_assistant.core.llm_provider import create_llm

        return cls(create_llm(settings), settings.LLM_TIMEOUT)

    async def generate_text(self, prompt: str, context: str | None = None) -> str:
        content = build_text_prompt(prompt, context)
        return await self._invoke(content, kind="text")

    async def generate_from_image(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        content = build_image_content(prompt, image_bytes, mime_type)
        return await self._invoke(content, kind="vision")

    async def _invoke(self, content, kind: str) -> str:
        try:
            reply = await asyncio.wait_for(
                self.llm.ainvoke([HumanMessage(content=content)]),
                self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"LLM {kind} call timed out after {self.timeout}s")
            raise GenerationError("Model call timed out") from e
        except Exception as e:
            logger.error(f"LLM {kind} error: {e}", exc_info=True)
            raise GenerationError() from e
        return extract_text(reply.content)
