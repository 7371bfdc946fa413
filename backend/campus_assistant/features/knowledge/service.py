"""
Knowledge feature: Service layer for KB articles and vector retrieval.

Article content is the source of truth; ``kb_embeddings`` is kept in sync
with it (one row per article, ``chunk_index`` 0). Embedding work never fails
an article write: the article may briefly exist without a searchable vector.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone

from supabase import Client

from campus_assistant.config import Settings
from campus_assistant.core.database import execute, merge_fields
from campus_assistant.core.exceptions import ArticleNotFoundError
from campus_assistant.features.knowledge.embedding import EmbeddingClient
from campus_assistant.features.knowledge.schemas import ArticleCreate, ArticleUpdate

logger = logging.getLogger(__name__)

ARTICLES_TABLE = "kb_articles"
EMBEDDINGS_TABLE = "kb_embeddings"
MATCH_RPC = "match_kb_articles"


def make_slug(title: str) -> str:
    """Lowercase, spaces to hyphens, drop anything that is not [A-Za-z0-9_-]."""
    slug = title.lower().replace(" ", "-")
    return re.sub(r"[^\w-]+", "", slug, flags=re.ASCII)


def embedding_text(title: str, content: str) -> str:
    return f"{title}: {content}"


class KnowledgeService:
    """KB article CRUD plus pgvector similarity search."""

    def __init__(self, db: Client, embedder: EmbeddingClient, settings: Settings):
        self.db = db
        self.embedder = embedder
        self.settings = settings

    # ── Search ───────────────────────────────────────────

    async def search(
        self,
        query: str,
        match_count: int,
        threshold: float | None = None,
    ) -> list[dict]:
        """Semantic search over article embeddings.

        Args:
            query: Natural language search query.
            match_count: Maximum number of matches.
            threshold: Minimum similarity, defaults to KB_MATCH_THRESHOLD.

        Returns:
            Matches joined to their article (title, content, similarity),
            best first. Never contains a row below ``threshold``.
        """
        if threshold is None:
            threshold = self.settings.KB_MATCH_THRESHOLD

        query_vector = await self.embedder.embed(query)
        rows = await execute(
            self.db.rpc(
                MATCH_RPC,
                {
                    "query_embedding": query_vector,
                    "match_threshold": threshold,
                    "match_count": match_count,
                },
            )
        )
        matches = [r for r in rows if (r.get("similarity") or 0) >= threshold]
        matches.sort(key=lambda r: r["similarity"], reverse=True)
        return matches[:match_count]

    # ── Articles ─────────────────────────────────────────

    async def list_articles(self) -> list[dict]:
        return await execute(
            self.db.table(ARTICLES_TABLE)
            .select("*")
            .order("updated_at", desc=True)
        )

    async def get_article(self, article_id: str) -> dict:
        rows = await execute(
            self.db.table(ARTICLES_TABLE)
            .select("*")
            .eq("id", article_id)
            .limit(1)
        )
        if not rows:
            raise ArticleNotFoundError(article_id)
        return rows[0]

    async def create_article(self, data: ArticleCreate) -> dict:
        """Insert an article, then index it. Indexing failures are logged only."""
        rows = await execute(
            self.db.table(ARTICLES_TABLE).insert({
                "title": data.title,
                "slug": make_slug(data.title),
                "content": data.content,
                "category": data.category,
            })
        )
        article = rows[0]

        indexed = await self._sync_embedding(article["id"], article["title"], article["content"], replace=False)
        if not indexed:
            logger.warning(f"⚠️ Article {article['id']} saved but not searchable until its next update")
        return article

    async def update_article(self, article_id: str, data: ArticleUpdate) -> dict:
        """Apply a partial update; re-index when title or content was sent.

        Raises:
            ArticleNotFoundError: If the article does not exist.
        """
        current = await self.get_article(article_id)
        merged = merge_fields(current, data)

        update_data = {
            "title": merged["title"],
            "content": merged["content"],
            "category": merged.get("category"),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        rows = await execute(
            self.db.table(ARTICLES_TABLE)
            .update(update_data)
            .eq("id", article_id)
        )
        article = rows[0] if rows else {**merged, **update_data}

        if data.touches_embedding:
            indexed = await self._sync_embedding(article_id, merged["title"], merged["content"], replace=True)
            if not indexed:
                logger.warning(f"⚠️ Article {article_id} saved but its search entry is stale")
        return article

    async def delete_article(self, article_id: str) -> None:
        """Delete an article and every embedding row that references it."""
        await execute(self.db.table(EMBEDDINGS_TABLE).delete().eq("article_id", article_id))
        await execute(self.db.table(ARTICLES_TABLE).delete().eq("id", article_id))

    # ── Embedding sync ───────────────────────────────────

    async def _sync_embedding(self, article_id: str, title: str, content: str, replace: bool) -> bool:
        """Compute the article vector and store it as the single chunk row.

        With ``replace`` the old rows are deleted once the new vector exists,
        so a failed embedding call keeps the previous row searchable. The
        delete and insert are separate statements, not one transaction.

        Returns:
            True if the row was written, False if indexing failed.
        """
        try:
            vector = await asyncio.wait_for(
                self.embedder.embed(embedding_text(title, content)),
                self.settings.EMBEDDING_TIMEOUT,
            )
            if replace:
                await execute(self.db.table(EMBEDDINGS_TABLE).delete().eq("article_id", article_id))
            await execute(
                self.db.table(EMBEDDINGS_TABLE).insert({
                    "article_id": article_id,
                    "chunk_index": 0,
                    "chunk_content": content,
                    "embedding": vector,
                })
            )
        except Exception as e:
            logger.error(f"❌ Failed to index article {article_id}: {e}")
            return False

        logger.info(f"✅ Indexed article {article_id} ({len(vector)} dims)")
        return True
