"""Question edit, delete and move endpoints (admin only)."""

from __future__ import annotations

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from app.api.dependencies import get_question_bank, require_admin
from app.api.quizzes import OptionIn, QuestionOut, question_out, to_options
from app.models.principal import Principal
from app.services.question_bank import QuestionBank

router = APIRouter(prefix="/v1/questions", tags=["questions"])


class QuestionPatch(BaseModel):
    question_text: str | None = None
    question_type: str | None = None
    points: int | None = Field(default=None, gt=0)
    options: list[OptionIn] | None = None
    correct_answer: str | None = None
    order_index: int | None = Field(default=None, ge=0)


class MoveIn(BaseModel):
    direction: Literal["up", "down"]


class MoveOut(BaseModel):
    moved: bool
    question: QuestionOut


@router.patch("/{question_id}", response_model=QuestionOut)
async def update_question(
    question_id: UUID,
    body: QuestionPatch,
    _admin: Annotated[Principal, Depends(require_admin)],
    bank: Annotated[QuestionBank, Depends(get_question_bank)],
) -> QuestionOut:
    changes = body.model_dump(exclude_unset=True)
    if "options" in changes:
        changes["options"] = to_options(body.options)
    question = await bank.update_question(question_id, changes)
    return question_out(question, reveal_answers=True)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: UUID,
    _admin: Annotated[Principal, Depends(require_admin)],
    bank: Annotated[QuestionBank, Depends(get_question_bank)],
) -> Response:
    await bank.delete_question(question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{question_id}/move", response_model=MoveOut)
async def move_question(
    question_id: UUID,
    body: MoveIn,
    _admin: Annotated[Principal, Depends(require_admin)],
    bank: Annotated[QuestionBank, Depends(get_question_bank)],
) -> MoveOut:
    moved = await bank.reorder(question_id, body.direction)
    question = await bank.get_question(question_id)
    return MoveOut(moved=moved, question=question_out(question, reveal_answers=True))
