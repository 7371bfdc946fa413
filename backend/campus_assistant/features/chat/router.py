"""
Chat feature: API routes.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from campus_assistant.config import Settings, get_settings
from campus_assistant.core.dependencies import get_chat_service, get_current_user_id
from campus_assistant.core.exceptions import GenerationError
from campus_assistant.features.chat.schemas import ChatResponse, TextChatRequest
from campus_assistant.features.chat.service import ChatService

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/heic", "image/heif"}


@router.post("/text", response_model=ChatResponse)
async def text_chat(
    data: TextChatRequest,
    user_id: str = Depends(get_current_user_id),
    service: ChatService = Depends(get_chat_service),
):
    """Answer a message using the user's timetable, reminders, events and the KB."""
    try:
        response_text = await service.text_chat(user_id, data.message)
    except GenerationError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate response",
        )
    return ChatResponse(response=response_text)


@router.post("/image", response_model=ChatResponse)
async def image_chat(
    image: UploadFile | None = File(None),
    prompt: str = Form(""),
    user_id: str = Depends(get_current_user_id),
    service: ChatService = Depends(get_chat_service),
    settings: Settings = Depends(get_settings),
):
    """Answer a prompt about one uploaded image (multipart field ``image``)."""
    if image is None:
        raise HTTPException(status_code=400, detail="No files were uploaded.")

    mime_type = image.content_type or ""
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {mime_type or 'unknown'}")

    contents = await image.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    if len(contents) > settings.MAX_IMAGE_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (max {settings.MAX_IMAGE_SIZE_MB}MB)",
        )

    try:
        response_text = await service.image_chat(prompt, contents, mime_type)
    except GenerationError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process image",
        )
    return ChatResponse(response=response_text)
