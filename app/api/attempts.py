"""Attempt submission and result endpoints.

Learners submit attempts and read their own results; admins list every
attempt of a quiz, optionally filtered by grading status.
"""

from __future__ import annotations

import logging
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from app.api.dependencies import (
    get_lifecycle,
    get_question_bank,
    require_admin,
    require_user,
)
from app.models.attempt import QuizAttempt
from app.models.principal import Principal
from app.services.attempt_lifecycle import AttemptLifecycle
from app.services.grading import aggregate, breakdown, needs_review
from app.services.question_bank import QuestionBank

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["attempts"])


class AttemptSubmit(BaseModel):
    answers: dict[str, str]
    started_at: int
    completed_at: int | None = None


class AttemptOut(BaseModel):
    id: UUID
    quiz_id: UUID
    user_id: str
    status: str
    answers: dict[str, str]
    score: int
    percentage: int
    passed: bool
    started_at: int
    completed_at: int
    time_taken: int
    is_graded: bool
    graded_by: str | None
    graded_at: int | None
    question_scores: dict[str, int]
    question_feedback: dict[str, str]
    feedback: str | None


class QuestionResultOut(BaseModel):
    question_id: UUID
    question_type: str
    points: int
    answer: str | None
    auto_score: int
    awarded: int
    overridden: bool
    correct: bool
    feedback: str | None


class AttemptDetailOut(BaseModel):
    attempt: AttemptOut
    total_possible: int
    needs_review: bool
    questions: list[QuestionResultOut]


def attempt_out(attempt: QuizAttempt) -> AttemptOut:
    return AttemptOut(
        id=attempt.id,
        quiz_id=attempt.quiz_id,
        user_id=attempt.user_id,
        status=attempt.status,
        answers=attempt.answers,
        score=attempt.score,
        percentage=attempt.percentage,
        passed=attempt.passed,
        started_at=attempt.started_at,
        completed_at=attempt.completed_at,
        time_taken=attempt.time_taken,
        is_graded=attempt.is_graded,
        graded_by=attempt.graded_by,
        graded_at=attempt.graded_at,
        question_scores=attempt.question_scores,
        question_feedback=attempt.question_feedback,
        feedback=attempt.feedback,
    )


@router.post(
    "/quizzes/{quiz_id}/attempts",
    response_model=AttemptOut,
    status_code=status.HTTP_201_CREATED,
)
async def submit_attempt(
    quiz_id: UUID,
    body: AttemptSubmit,
    principal: Annotated[Principal, Depends(require_user)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
) -> AttemptOut:
    attempt = await lifecycle.submit_attempt(
        quiz_id,
        principal.user_id,
        body.answers,
        started_at=body.started_at,
        completed_at=body.completed_at,
    )
    return attempt_out(attempt)


@router.get("/quizzes/{quiz_id}/attempts", response_model=list[AttemptOut])
async def list_attempts(
    quiz_id: UUID,
    _admin: Annotated[Principal, Depends(require_admin)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
    status_filter: Annotated[
        Literal["all", "graded", "ungraded"], Query(alias="status")
    ] = "all",
) -> list[AttemptOut]:
    attempts = await lifecycle.list_attempts(quiz_id, status_filter)
    return [attempt_out(a) for a in attempts]


@router.get("/quizzes/{quiz_id}/attempts/latest", response_model=AttemptOut)
async def latest_attempt(
    quiz_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
) -> AttemptOut:
    attempt = await lifecycle.latest_attempt(quiz_id, principal.user_id)
    if attempt is None:
        raise HTTPException(status_code=404, detail="no attempt for this quiz")
    return attempt_out(attempt)


@router.get("/attempts/{attempt_id}", response_model=AttemptDetailOut)
async def get_attempt(
    attempt_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
    bank: Annotated[QuestionBank, Depends(get_question_bank)],
) -> AttemptDetailOut:
    attempt = await lifecycle.get_attempt(attempt_id)
    if not principal.can_view_attempt(attempt.user_id):
        logger.warning(
            "Access denied: user=%s is not the owner of attempt=%s",
            principal.user_id,
            attempt_id,
        )
        # 404 rather than 403 so attempt ids are not confirmed to strangers
        raise HTTPException(status_code=404, detail="attempt not found")

    quiz = await bank.get_quiz(attempt.quiz_id)
    questions = await bank.list_questions(attempt.quiz_id)
    summary = aggregate(quiz, questions, attempt)
    rows = [
        QuestionResultOut(
            question_id=r.question_id,
            question_type=r.question_type,
            points=r.points,
            answer=r.answer,
            auto_score=r.auto_score,
            awarded=r.awarded,
            overridden=r.overridden,
            correct=r.correct,
            feedback=r.feedback,
        )
        for r in breakdown(questions, attempt)
    ]
    return AttemptDetailOut(
        attempt=attempt_out(attempt),
        total_possible=summary.total_possible,
        needs_review=needs_review(questions),
        questions=rows,
    )
