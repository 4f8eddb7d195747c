"""Redis client for open review sessions.

Set REDIS_URL to share review sessions across API instances.  Left unset
(local dev, tests), `redis_pool` is None and app/services/review_store.py
keeps sessions in process memory.

Only disposable working copies live here, each with a TTL of
REVIEW_SESSION_TTL_SECONDS.  Committed grades go to the attempt
repository.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)

redis_pool: aioredis.Redis | None = None  # type: ignore[type-arg]

if SETTINGS.redis_url:
    redis_pool = aioredis.from_url(
        SETTINGS.redis_url,
        decode_responses=True,  # sessions are JSON text
        max_connections=20,
    )


async def ping_redis() -> bool:
    """True when Redis answers PING.  False when unreachable or not configured."""
    if redis_pool is None:
        return False
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except (RedisError, OSError):
        logger.warning("Redis ping failed", exc_info=True)
        return False
    return True


@asynccontextmanager
async def lifespan_redis():
    """Check Redis at startup and close the pool on shutdown.

    An unreachable Redis does not block startup; /health reports it as
    degraded and review endpoints fail until it returns.
    """
    if redis_pool is None:
        logger.info("No REDIS_URL configured, review sessions kept in memory")
        yield
        return

    if await ping_redis():
        logger.info(
            "Redis connected, review session TTL=%ds",
            SETTINGS.review_session_ttl_seconds,
        )
    else:
        logger.error("Redis unreachable on startup, review sessions unavailable")

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
