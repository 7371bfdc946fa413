"""Pytest configuration, in-memory fakes and FastAPI client fixtures."""

import asyncio
import math
import os
import threading
import time
import uuid
from datetime import datetime, timezone

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ADMIN_SECRET", "admin-code")
os.environ.setdefault("FACULTY_SECRET", "faculty-code")

import pytest
from fastapi.testclient import TestClient

from campus_assistant.config import Settings
from campus_assistant.core.dependencies import (
    get_current_user_id,
    get_db,
    get_embedding_client,
    get_generative_client,
    get_identity_client,
)
from campus_assistant.core.exceptions import GenerationError
from campus_assistant.main import app

USER_ID = "user_2abc"


# ── Fake Supabase ────────────────────────────────────────

class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = len(data)


class FakeQuery:
    """Supports the chained PostgREST calls this service makes."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload = None
        self.filters: list[tuple[str, object]] = []
        self.order_by: tuple[str, bool] | None = None
        self.limit_n: int | None = None

    def select(self, *columns, **kwargs):
        self.op = "select"
        return self

    def insert(self, rows):
        self.op = "insert"
        self.payload = rows if isinstance(rows, list) else [rows]
        return self

    def upsert(self, rows, on_conflict="id", ignore_duplicates=False):
        self.op = "upsert"
        self.payload = rows if isinstance(rows, list) else [rows]
        self.conflict_key = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def update(self, data):
        self.op = "update"
        self.payload = data
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(c) == v for c, v in self.filters)

    def execute(self):
        self.db.calls.append((self.table_name, self.op))
        if self.db.latency:
            time.sleep(self.db.latency)
        if self.table_name in self.db.failing:
            raise RuntimeError(f"{self.table_name} unavailable")
        with self.db.lock:
            return self._apply()

    def _apply(self) -> FakeResponse:
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "insert":
            now = datetime.now(timezone.utc).isoformat()
            created = []
            for row in self.payload:
                new_row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **row}
                rows.append(new_row)
                created.append(dict(new_row))
            return FakeResponse(created)

        if self.op == "upsert":
            written = []
            for row in self.payload:
                key = row[self.conflict_key]
                existing = next((r for r in rows if r.get(self.conflict_key) == key), None)
                if existing is None:
                    rows.append(dict(row))
                    written.append(dict(row))
                elif not self.ignore_duplicates:
                    existing.update(row)
                    written.append(dict(existing))
            return FakeResponse(written)

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return FakeResponse(updated)

        if self.op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return FakeResponse(removed)

        result = [dict(r) for r in rows if self._matches(r)]
        if self.order_by:
            column, desc = self.order_by
            result.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self.limit_n is not None:
            result = result[: self.limit_n]
        return FakeResponse(result)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.calls.append((self.name, "rpc"))
        self.db.rpc_params.append(self.params)
        if self.name in self.db.failing:
            raise RuntimeError(f"{self.name} unavailable")
        if self.db.rpc_override is not None:
            return FakeResponse([dict(r) for r in self.db.rpc_override])
        return FakeResponse(self.db.match_kb_articles(**self.params))


def cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeSupabase:
    """In-memory stand-in for the supabase-py Client."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self.rpc_params: list[dict] = []
        self.failing: set[str] = set()
        self.rpc_override: list[dict] | None = None
        self.latency = 0.0  # seconds slept by every table query
        self.lock = threading.Lock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        return FakeRpc(self, name, params)

    def seed(self, table: str, *rows: dict) -> list[dict]:
        stored = self.tables.setdefault(table, [])
        for row in rows:
            stored.append({"id": str(uuid.uuid4()), **row})
        return stored

    def match_kb_articles(self, query_embedding, match_threshold, match_count) -> list[dict]:
        articles = {a["id"]: a for a in self.tables.get("kb_articles", [])}
        matches = []
        for e in self.tables.get("kb_embeddings", []):
            article = articles.get(e["article_id"])
            if article is None:
                continue
            similarity = cosine(query_embedding, e["embedding"])
            if similarity >= match_threshold:
                matches.append({
                    "id": e["id"],
                    "article_id": article["id"],
                    "title": article["title"],
                    "content": article["content"],
                    "category": article.get("category"),
                    "similarity": similarity,
                })
        matches.sort(key=lambda m: m["similarity"], reverse=True)
        return matches[:match_count]

    def embeddings_for(self, article_id: str) -> list[dict]:
        return [e for e in self.tables.get("kb_embeddings", []) if e["article_id"] == article_id]


# ── Fake model / identity clients ────────────────────────

class FakeEmbeddingClient:
    def __init__(self, vector: list[float] | None = None):
        self.vector = vector or [1.0, 0.0, 0.0]
        self.calls: list[str] = []
        self.fail = False
        self.delay = 0.0

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("embedding quota exceeded")
        return list(self.vector)


class FakeGenerativeClient:
    def __init__(self, reply: str = "Here is your answer."):
        self.reply = reply
        self.text_calls: list[tuple[str, str | None]] = []
        self.image_calls: list[tuple[str, bytes, str]] = []
        self.fail = False

    async def generate_text(self, prompt: str, context: str | None = None) -> str:
        self.text_calls.append((prompt, context))
        if self.fail:
            raise GenerationError()
        return self.reply

    async def generate_from_image(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        self.image_calls.append((prompt, image_bytes, mime_type))
        if self.fail:
            raise GenerationError()
        return self.reply


class FakeIdentityClient:
    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    async def update_user_role(self, user_id: str, role: str) -> None:
        self.calls.append((user_id, role))


# ── Fixtures ─────────────────────────────────────────────

@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def fake_embedder() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()


@pytest.fixture
def fake_generator() -> FakeGenerativeClient:
    return FakeGenerativeClient()


@pytest.fixture
def fake_identity() -> FakeIdentityClient:
    return FakeIdentityClient()


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        return Settings(
            SUPABASE_URL="http://localhost:54321",
            SUPABASE_KEY="test-anon-key",
            **overrides,
        )
    return _make


@pytest.fixture
def anon_client(fake_db, fake_embedder, fake_generator, fake_identity):
    """Client with fake backends but real token verification."""
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_embedding_client] = lambda: fake_embedder
    app.dependency_overrides[get_generative_client] = lambda: fake_generator
    app.dependency_overrides[get_identity_client] = lambda: fake_identity
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def client(anon_client):
    """Client authenticated as USER_ID."""
    app.dependency_overrides[get_current_user_id] = lambda: USER_ID
    return anon_client


@pytest.fixture
def admin_client(client, fake_db):
    fake_db.seed("profiles", {"id": USER_ID, "email": "admin@campus.edu", "role": "admin"})
    return client
