"""Health and readiness endpoints.

  /health (liveness): the process is up.  Also reports the status of
    each backing service.  Always 200; `status` says "degraded" when a
    configured backend is unreachable.

  /ready (readiness): the instance can take traffic.  503 when the
    configured database cannot be reached, since committed grades have
    nowhere to go.  Redis only holds review sessions, so it does not
    affect readiness.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from app.db import engine as db_engine
from app.db import redis as db_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    checks: dict[str, str] = {}

    if db_redis.redis_pool is None:
        checks["redis"] = "not_configured"
    else:
        checks["redis"] = "ok" if await db_redis.ping_redis() else "degraded"

    if db_engine.engine is None:
        checks["database"] = "not_configured"
    else:
        checks["database"] = "ok" if await db_engine.ping_database() else "degraded"

    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if db_engine.engine is not None and not await db_engine.ping_database():
        logger.warning("Readiness check failed: database unreachable")
        return Response(status_code=503)
    return Response(status_code=200)
