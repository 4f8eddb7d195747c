"""Request context middleware: request ID, timing and one summary line.

WHY REQUEST IDs
-----------------
Two graders committing reviews at the same moment produce interleaved
log lines:

  INFO  Review opened session=5c1f... by=grader-a
  INFO  Review opened session=9e07... by=grader-b
  WARNING  Quiz not found
  INFO  Review committed session=9e07... score=8/10

Which request hit the missing quiz?  With a request ID on every record
(a top-level key in JSON output) the answer is a filter away:

  {"level": "INFO", "request_id": "req-abc", "message": "Review opened ..."}
  {"level": "WARNING", "request_id": "req-abc", "message": "Quiz not found"}

The ID comes from the client's X-Request-ID header when present (a
gateway in front of the service usually sets one) and is generated
otherwise.  It is echoed back on the response, so a learner reporting a
wrong score can quote it in a support ticket.

HOW THE ID REACHES THE LOG LINES
----------------------------------
The middleware only sets `request_id_var`.  RequestContextFilter in
app/core/logging.py reads it for every record the handler emits, so the
scorer, the lifecycle service and the repos never pass the ID around.
`require_user` does the same for the caller's user_id once the bearer
token is verified.

Each request runs in its own asyncio task with its own copy of the
context, so two concurrent requests on the event-loop thread never see
each other's values.

REQUEST TIMING
---------------
The summary line carries `duration_ms`.  It measures the same span as the
http_request_duration_seconds histogram in MetricsMiddleware, so a slow
commit in the logs can be matched against the latency dashboard.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID, times the request, logs one summary line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
