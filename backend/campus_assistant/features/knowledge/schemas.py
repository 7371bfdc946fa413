"""
Knowledge feature: Schemas for KB articles and search results.
"""

from pydantic import BaseModel, Field
from datetime import datetime


class ArticleCreate(BaseModel):
    """Request to create a KB article."""
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category: str | None = None


class ArticleUpdate(BaseModel):
    """Partial update; only fields that are set replace stored values."""
    title: str | None = Field(None, min_length=1)
    content: str | None = Field(None, min_length=1)
    category: str | None = None

    @property
    def touches_embedding(self) -> bool:
        return self.title is not None or self.content is not None


class ArticleResponse(BaseModel):
    id: str
    title: str
    slug: str
    content: str
    category: str | None = None
    updated_at: datetime | None = None


class SearchMatch(BaseModel):
    """One row of the ``match_kb_articles`` RPC."""
    article_id: str | None = None
    title: str
    content: str
    category: str | None = None
    similarity: float


class MessageResponse(BaseModel):
    message: str
