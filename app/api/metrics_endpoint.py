"""Prometheus scrape endpoint.

Prometheus calls this every scrape interval and gets back plain text in
the exposition format, not JSON.  Every metric declared in
app/core/metrics.py appears, one line per label combination:

  # HELP review_commits_total Committed reviews; regrade=true when ...
  # TYPE review_commits_total counter
  review_commits_total{regrade="false"} 12.0
  review_commits_total{regrade="true"} 3.0
  # TYPE auto_score_total counter
  auto_score_total{question_type="short_answer",result="incorrect"} 41.0

Each line becomes a time series that PromQL can query, e.g. the share of
commits that are regrades:

  sum(rate(review_commits_total{regrade="true"}[1h]))
    / sum(rate(review_commits_total[1h]))

MetricsMiddleware skips this path, so scrapes do not show up in the HTTP
request counters.

SECURITY NOTE: the endpoint is unauthenticated.  Grading volumes and
error rates are internal data; in production, expose /metrics only to
the Prometheus server (network policy or a separate internal port).
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose all Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
