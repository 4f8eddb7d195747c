"""Storage for open review sessions.

Sessions are ephemeral: they live until committed, cancelled, or their
TTL runs out.  With REDIS_URL set they are shared across API instances;
otherwise they sit in process memory.

Both stores hold the JSON form of the session, so a caller always gets a
fresh copy and must save() after editing.
"""

from __future__ import annotations

import json
from typing import Protocol, runtime_checkable
from uuid import UUID

from app.core.config import SETTINGS
from app.db.redis import redis_pool
from app.services.review_session import ReviewSession


@runtime_checkable
class ReviewSessionStore(Protocol):
    async def get(self, session_id: UUID) -> ReviewSession | None:
        """Fetch a session.  Returns None if unknown or expired."""
        ...

    async def save(self, session: ReviewSession) -> None:
        """Create or replace a session, restarting its TTL."""
        ...

    async def delete(self, session_id: UUID) -> bool:
        """Drop a session.  Returns False if it was already gone."""
        ...


class InMemoryReviewSessionStore:
    """In-memory store for dev and tests; no TTL enforcement.

    The autouse fixture in conftest.py clears the store between tests.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, session_id: UUID) -> ReviewSession | None:
        raw = self._store.get(str(session_id))
        if raw is None:
            return None
        return ReviewSession.from_dict(json.loads(raw))

    async def save(self, session: ReviewSession) -> None:
        self._store[str(session.id)] = json.dumps(session.to_dict())

    async def delete(self, session_id: UUID) -> bool:
        return self._store.pop(str(session_id), None) is not None


class RedisReviewSessionStore:
    """Redis-backed store, shared across API instances."""

    _PREFIX = "review:"

    def __init__(self, redis_client, ttl_seconds: int) -> None:
        self._redis = redis_client
        self._ttl = ttl_seconds

    async def get(self, session_id: UUID) -> ReviewSession | None:
        raw = await self._redis.get(f"{self._PREFIX}{session_id}")
        if raw is None:
            return None
        return ReviewSession.from_dict(json.loads(raw))

    async def save(self, session: ReviewSession) -> None:
        await self._redis.setex(
            f"{self._PREFIX}{session.id}", self._ttl, json.dumps(session.to_dict())
        )

    async def delete(self, session_id: UUID) -> bool:
        return bool(await self._redis.delete(f"{self._PREFIX}{session_id}"))


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if redis_pool is not None:
    review_store: ReviewSessionStore = RedisReviewSessionStore(
        redis_pool, SETTINGS.review_session_ttl_seconds
    )
else:
    review_store = InMemoryReviewSessionStore()
