"""Prometheus HTTP metrics: request count, latency and in-flight gauge.

Requests are labelled by the matched route template
(`/v1/reviews/{session_id}`), not the raw path, so every attempt and
review session does not get a time series of its own.  Paths that match
no route share the label "unmatched".  Scrapes of /metrics are not
counted.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from app.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

_SCRAPE_PATH = "/metrics"


def _endpoint_label(request: Request) -> str:
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", "unmatched")
    return "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == _SCRAPE_PATH:
            return await call_next(request)

        endpoint = _endpoint_label(request)
        # Unhandled exceptions become a 500 further out
        status_code = "500"
        start = time.monotonic()
        ACTIVE_REQUESTS.inc()
        try:
            response = await call_next(request)
            status_code = str(response.status_code)
            return response
        finally:
            ACTIVE_REQUESTS.dec()
            REQUEST_COUNT.labels(
                method=request.method, endpoint=endpoint, status_code=status_code
            ).inc()
            REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(
                time.monotonic() - start
            )
