from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.attempts import router as attempts_router
from app.api.health import router as health_router
from app.api.metrics_endpoint import router as metrics_router
from app.api.questions import router as questions_router
from app.api.quizzes import router as quizzes_router
from app.api.reviews import router as reviews_router
from app.core.config import SETTINGS
from app.core.logging import setup_logging
from app.db.engine import lifespan_db
from app.db.redis import lifespan_redis
from app.middleware.metrics import MetricsMiddleware
from app.middleware.request_context import RequestContextMiddleware
from app.services.errors import (
    AttemptLimitReachedError,
    AttemptNotFoundError,
    GradingError,
    OrderConflictError,
    QuestionNotFoundError,
    QuestionValidationError,
    QuizInactiveError,
    QuizNotFoundError,
    QuizValidationError,
    ReviewSessionNotFoundError,
)

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[GradingError], int] = {
    QuizNotFoundError: 404,
    QuestionNotFoundError: 404,
    AttemptNotFoundError: 404,
    ReviewSessionNotFoundError: 404,
    QuizValidationError: 422,
    QuestionValidationError: 422,
    OrderConflictError: 409,
    AttemptLimitReachedError: 409,
    QuizInactiveError: 403,
}

_NOT_FOUND_DETAIL: dict[type[GradingError], str] = {
    QuizNotFoundError: "quiz not found",
    QuestionNotFoundError: "question not found",
    AttemptNotFoundError: "attempt not found",
    ReviewSessionNotFoundError: "review session not found",
}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Teardown runs in reverse order: Redis first, then the database.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="quiz-grading-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) -> Metrics -> CORS -> route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(GradingError)
async def grading_error_handler(request: Request, exc: GradingError) -> JSONResponse:
    """Map domain errors to HTTP responses shaped like HTTPException's."""
    code = 400
    detail = str(exc) or type(exc).__name__
    for cls in type(exc).__mro__:
        if cls in _ERROR_STATUS:
            code = _ERROR_STATUS[cls]
            detail = _NOT_FOUND_DETAIL.get(cls, detail)
            break
    logger.warning(
        "%s %s rejected: %s (%s)",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc,
    )
    return JSONResponse(status_code=code, content={"detail": detail})


app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(quizzes_router)
app.include_router(questions_router)
app.include_router(attempts_router)
app.include_router(reviews_router)

logger.info(
    "quiz-grading-service started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
