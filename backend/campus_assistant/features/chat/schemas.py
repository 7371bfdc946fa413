"""
Chat feature: Pydantic schemas for request/response models.
"""

from pydantic import BaseModel, ConfigDict, Field


class TextChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    conversation_id: str | None = Field(None, alias="conversationId")  # accepted, not persisted yet

    model_config = ConfigDict(populate_by_name=True)


class ChatResponse(BaseModel):
    response: str
