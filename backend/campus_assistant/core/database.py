"""
Database connections: Supabase client setup and async query helpers.
"""

import asyncio
from functools import lru_cache

from pydantic import BaseModel
from supabase import create_client, Client

from campus_assistant.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """Get the Supabase client (singleton).

    Uses the service_role key when configured (server-side writes bypass RLS),
    otherwise falls back to the anon key.
    """
    settings = get_settings()
    key = settings.SUPABASE_SERVICE_KEY or settings.SUPABASE_KEY
    return create_client(settings.SUPABASE_URL, key)


async def execute(builder, timeout: float | None = None) -> list[dict]:
    """Run a supabase-py request builder off the event loop.

    supabase-py is synchronous; the blocking HTTP call runs in a worker thread
    so concurrent fetches do not serialize on the loop.

    Returns:
        The response rows (``[]`` when PostgREST returns nothing).

    Raises:
        asyncio.TimeoutError: If ``timeout`` elapses first.
    """
    call = asyncio.to_thread(builder.execute)
    if timeout is not None:
        result = await asyncio.wait_for(call, timeout)
    else:
        result = await call
    return result.data or []


def merge_fields(current: dict, changes: BaseModel) -> dict:
    """Merge a partial-update model onto a stored row.

    Precedence: a field set (non-None) in ``changes`` wins, every other field
    keeps its stored value.
    """
    return {**current, **changes.model_dump(exclude_none=True)}
