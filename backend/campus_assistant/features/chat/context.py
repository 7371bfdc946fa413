"""
Chat feature: Context aggregation for retrieval-augmented answers.

Four independent sources feed the prompt: the user's timetable, pending
reminders, recent campus events, and the top knowledge-base matches for the
query. They are fetched concurrently; a source that fails or times out is
logged and rendered as its empty-state line instead of failing the request.
"""

import asyncio
import logging
from typing import Awaitable

from supabase import Client

from campus_assistant.config import Settings
from campus_assistant.core.database import execute
from campus_assistant.features.chat.prompts import render_context
from campus_assistant.features.knowledge.service import KnowledgeService

logger = logging.getLogger(__name__)


class ContextAggregator:
    """Builds the structured context block for one user and query."""

    def __init__(self, db: Client, knowledge: KnowledgeService, settings: Settings):
        self.db = db
        self.knowledge = knowledge
        self.settings = settings

    async def build_context(self, user_id: str, query: str) -> str:
        timetables, reminders, events, kb_matches = await asyncio.gather(
            self._degradable("timetable", self.fetch_timetable(user_id)),
            self._degradable("reminders", self.fetch_pending_reminders(user_id)),
            self._degradable("events", self.fetch_recent_events()),
            self._degradable("knowledge", self.fetch_knowledge(query)),
        )
        logger.info(
            f"Context for {user_id}: {len(timetables)} classes, {len(reminders)} reminders, "
            f"{len(events)} events, {len(kb_matches)} KB matches"
        )
        return render_context(timetables, reminders, events, kb_matches)

    # ── Sources ──────────────────────────────────────────

    async def fetch_timetable(self, user_id: str) -> list[dict]:
        """All weekly entries; rows recur by day_of_week so no date window applies."""
        return await execute(
            self.db.table("timetables").select("*").eq("user_id", user_id)
        )

    async def fetch_pending_reminders(self, user_id: str) -> list[dict]:
        return await execute(
            self.db.table("reminders")
            .select("*")
            .eq("user_id", user_id)
            .eq("is_completed", False)
        )

    async def fetch_recent_events(self) -> list[dict]:
        return await execute(
            self.db.table("events_notices")
            .select("*")
            .order("created_at", desc=True)
            .limit(self.settings.EVENTS_CONTEXT_LIMIT)
        )

    async def fetch_knowledge(self, query: str) -> list[dict]:
        # embed -> similarity search, one dependent chain
        return await self.knowledge.search(query, match_count=self.settings.KB_CHAT_MATCH_COUNT)

    # ── Degradation ──────────────────────────────────────

    async def _degradable(self, source: str, fetch: Awaitable[list[dict]]) -> list[dict]:
        try:
            return await asyncio.wait_for(fetch, self.settings.CONTEXT_SOURCE_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning(f"⚠️ Context source '{source}' timed out, using empty section")
        except Exception as e:
            logger.warning(f"⚠️ Context source '{source}' failed, using empty section: {e}")
        return []
