"""Prometheus metric inventory for the grading service.

Every metric the service exports is declared here; modules import the
ones they own and increment them at the point of action.

WHO FILLS WHAT
----------------
  HTTP metrics: MetricsMiddleware, labelled by route template
    (`/v1/reviews/{session_id}`) so attempt and session IDs do not each
    create a time series.

  Grading metrics: AttemptLifecycle.  The pure scoring functions
    (auto_score, aggregate) never touch a metric, so they can be called
    any number of times, e.g. when rendering an attempt breakdown,
    without inflating the counts.

WHAT THE GRADING METRICS ANSWER
---------------------------------
  quiz_attempts_submitted_total
    Submission rate.  A drop to zero during an exam window means
    learners cannot submit.

  auto_score_total{question_type, result}
    result is correct, incorrect or manual.  A short_answer question
    whose incorrect share jumps after an edit usually has a bad answer
    key.  The manual count is the review backlog being created.

  review_sessions_total{outcome}
    opened minus (committed + cancelled) approximates sessions left to
    expire in the store.

  review_commits_total{regrade}
    regrade="true" counts commits on attempts that were already graded.

  review_duration_seconds
    Wall time from opening a review session to committing it.  Buckets
    run from 30 seconds to an hour, the default session TTL; a session
    open longer than that has expired and never gets here.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Grading metrics
# ---------------------------------------------------------------------------

ATTEMPTS_SUBMITTED = Counter(
    "quiz_attempts_submitted_total",
    "Quiz attempts accepted from learners",
)

AUTO_SCORES = Counter(
    "auto_score_total",
    "Questions scored at submission time, by question type and outcome",
    ["question_type", "result"],  # result: correct|incorrect|manual
)

REVIEW_SESSIONS = Counter(
    "review_sessions_total",
    "Review session transitions",
    ["outcome"],  # opened|committed|cancelled
)

REVIEW_COMMITS = Counter(
    "review_commits_total",
    "Committed reviews; regrade=true when the attempt was already graded",
    ["regrade"],
)

REVIEW_DURATION = Histogram(
    "review_duration_seconds",
    "Time from opening a review session to committing it",
    buckets=[30, 60, 120, 300, 600, 1200, 1800, 3600],
)
