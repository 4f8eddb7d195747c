"""Review session endpoints (admin only).

    POST   /v1/attempts/{attempt_id}/reviews   open a session
    GET    /v1/reviews/{session_id}            current working copy
    PATCH  /v1/reviews/{session_id}            edit scores and feedback
    POST   /v1/reviews/{session_id}/commit     persist and mark graded
    DELETE /v1/reviews/{session_id}            discard
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from app.api.attempts import AttemptOut, attempt_out
from app.api.dependencies import get_lifecycle, require_admin
from app.models.principal import Principal
from app.services.attempt_lifecycle import AttemptLifecycle
from app.services.review_session import ReviewSession

router = APIRouter(prefix="/v1", tags=["reviews"])


class ReviewQuestionOut(BaseModel):
    question_id: str
    points: int
    auto_score: int
    score: int
    overridden: bool
    feedback: str | None


class ReviewOut(BaseModel):
    id: UUID
    attempt_id: UUID
    reviewer_id: str
    opened_at: int
    feedback: str
    questions: list[ReviewQuestionOut]


class ReviewPatch(BaseModel):
    scores: dict[str, int] | None = None
    question_feedback: dict[str, str] | None = None
    feedback: str | None = None


def review_out(session: ReviewSession) -> ReviewOut:
    return ReviewOut(
        id=session.id,
        attempt_id=session.attempt_id,
        reviewer_id=session.reviewer_id,
        opened_at=session.opened_at,
        feedback=session.feedback,
        questions=[
            ReviewQuestionOut(
                question_id=qid,
                points=points,
                auto_score=session.auto_scores.get(qid, 0),
                score=session.display_score(qid),
                overridden=session.is_overridden(qid),
                feedback=session.question_feedback.get(qid),
            )
            for qid, points in session.max_points.items()
        ],
    )


@router.post(
    "/attempts/{attempt_id}/reviews",
    response_model=ReviewOut,
    status_code=status.HTTP_201_CREATED,
)
async def open_review(
    attempt_id: UUID,
    admin: Annotated[Principal, Depends(require_admin)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
) -> ReviewOut:
    return review_out(await lifecycle.open_review(attempt_id, admin.user_id))


@router.get("/reviews/{session_id}", response_model=ReviewOut)
async def get_review(
    session_id: UUID,
    _admin: Annotated[Principal, Depends(require_admin)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
) -> ReviewOut:
    return review_out(await lifecycle.get_review(session_id))


@router.patch("/reviews/{session_id}", response_model=ReviewOut)
async def edit_review(
    session_id: UUID,
    body: ReviewPatch,
    _admin: Annotated[Principal, Depends(require_admin)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
) -> ReviewOut:
    session = await lifecycle.edit_review(
        session_id,
        scores=body.scores,
        question_feedback=body.question_feedback,
        feedback=body.feedback,
    )
    return review_out(session)


@router.post("/reviews/{session_id}/commit", response_model=AttemptOut)
async def commit_review(
    session_id: UUID,
    admin: Annotated[Principal, Depends(require_admin)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
) -> AttemptOut:
    return attempt_out(await lifecycle.commit_review(session_id, admin.user_id))


@router.delete("/reviews/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_review(
    session_id: UUID,
    _admin: Annotated[Principal, Depends(require_admin)],
    lifecycle: Annotated[AttemptLifecycle, Depends(get_lifecycle)],
) -> Response:
    await lifecycle.cancel_review(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
