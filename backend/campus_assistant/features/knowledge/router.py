"""
Knowledge feature: API routes for KB search and article administration.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from campus_assistant.core.dependencies import (
    get_current_user_id,
    get_knowledge_service,
    require_admin,
)
from campus_assistant.core.exceptions import ArticleNotFoundError, app_error_to_http
from campus_assistant.features.knowledge.schemas import (
    ArticleCreate,
    ArticleResponse,
    ArticleUpdate,
    MessageResponse,
    SearchMatch,
)
from campus_assistant.features.knowledge.service import KnowledgeService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Knowledge Base"])


@router.get("/search", response_model=list[SearchMatch])
async def search_kb(
    query: str | None = None,
    user_id: str = Depends(get_current_user_id),
    service: KnowledgeService = Depends(get_knowledge_service),
):
    """Semantic search over KB articles (similarity >= threshold)."""
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="Query is required")

    try:
        return await service.search(query, match_count=service.settings.KB_SEARCH_MATCH_COUNT)
    except Exception as e:
        logger.error(f"Search KB error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to search knowledge base")


@router.get("/articles", response_model=list[ArticleResponse])
async def list_articles(
    user_id: str = Depends(get_current_user_id),
    service: KnowledgeService = Depends(get_knowledge_service),
):
    """List all articles, most recently updated first."""
    try:
        return await service.list_articles()
    except Exception as e:
        logger.error(f"Error fetching articles: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch articles")


@router.post("/articles", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    data: ArticleCreate,
    admin_id: str = Depends(require_admin),
    service: KnowledgeService = Depends(get_knowledge_service),
):
    """Create an article and index it for semantic search."""
    try:
        return await service.create_article(data)
    except Exception as e:
        logger.error(f"Error creating article: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create article")


@router.put("/articles/{article_id}", response_model=MessageResponse)
async def update_article(
    article_id: str,
    data: ArticleUpdate,
    admin_id: str = Depends(require_admin),
    service: KnowledgeService = Depends(get_knowledge_service),
):
    """Update an article; re-index when title or content changes."""
    try:
        await service.update_article(article_id, data)
    except ArticleNotFoundError as e:
        raise app_error_to_http(e, status_code=404)
    except Exception as e:
        logger.error(f"Error updating article {article_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update article")
    return MessageResponse(message="Article updated successfully")


@router.delete("/articles/{article_id}", response_model=MessageResponse)
async def delete_article(
    article_id: str,
    admin_id: str = Depends(require_admin),
    service: KnowledgeService = Depends(get_knowledge_service),
):
    """Delete an article together with its embeddings."""
    try:
        await service.delete_article(article_id)
    except Exception as e:
        logger.error(f"Error deleting article {article_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete article")
    return MessageResponse(message="Article deleted successfully")
