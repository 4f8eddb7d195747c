"""Quiz and question-bank endpoints.

Learners may read a quiz and its questions, but the answer key (option
`correct` flags and `correct_answer`) is only returned to admins.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from app.api.dependencies import get_question_bank, require_admin, require_user
from app.models.principal import Principal
from app.models.quiz import Option, Quiz, QuizQuestion
from app.services.question_bank import QuestionBank

router = APIRouter(prefix="/v1/quizzes", tags=["quizzes"])


class QuizCreate(BaseModel):
    title: str
    passing_score: int = Field(default=70, ge=0, le=100)
    time_limit: int | None = Field(default=None, gt=0)
    max_attempts: int = Field(default=1, ge=1)
    is_active: bool = True
    course_id: UUID | None = None
    description: str | None = None


class QuizOut(BaseModel):
    id: UUID
    title: str
    passing_score: int
    time_limit: int | None
    max_attempts: int
    is_active: bool
    course_id: UUID | None
    description: str | None


class OptionIn(BaseModel):
    text: str
    correct: bool = False


class OptionOut(BaseModel):
    text: str
    correct: bool | None = None  # hidden from learners


class QuestionCreate(BaseModel):
    question_text: str
    question_type: str
    points: int = Field(default=1, gt=0)
    options: list[OptionIn] | None = None
    correct_answer: str | None = None
    order_index: int | None = Field(default=None, ge=0)


class QuestionOut(BaseModel):
    id: UUID
    quiz_id: UUID
    question_text: str
    question_type: str
    points: int
    order_index: int
    options: list[OptionOut] | None = None
    correct_answer: str | None = None


def quiz_out(quiz: Quiz) -> QuizOut:
    return QuizOut(
        id=quiz.id,
        title=quiz.title,
        passing_score=quiz.passing_score,
        time_limit=quiz.time_limit,
        max_attempts=quiz.max_attempts,
        is_active=quiz.is_active,
        course_id=quiz.course_id,
        description=quiz.description,
    )


def question_out(question: QuizQuestion, *, reveal_answers: bool) -> QuestionOut:
    options = None
    if question.options:
        options = [
            OptionOut(text=o.text, correct=o.correct if reveal_answers else None)
            for o in question.options
        ]
    return QuestionOut(
        id=question.id,
        quiz_id=question.quiz_id,
        question_text=question.question_text,
        question_type=question.question_type,
        points=question.points,
        order_index=question.order_index,
        options=options,
        correct_answer=question.correct_answer if reveal_answers else None,
    )


def to_options(options: list[OptionIn] | None) -> list[Option] | None:
    if options is None:
        return None
    return [Option(text=o.text, correct=o.correct) for o in options]


@router.post("", response_model=QuizOut, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    body: QuizCreate,
    _admin: Annotated[Principal, Depends(require_admin)],
    bank: Annotated[QuestionBank, Depends(get_question_bank)],
) -> QuizOut:
    quiz = await bank.create_quiz(
        title=body.title,
        passing_score=body.passing_score,
        time_limit=body.time_limit,
        max_attempts=body.max_attempts,
        is_active=body.is_active,
        course_id=body.course_id,
        description=body.description,
    )
    return quiz_out(quiz)


@router.get("/{quiz_id}", response_model=QuizOut)
async def get_quiz(
    quiz_id: UUID,
    _principal: Annotated[Principal, Depends(require_user)],
    bank: Annotated[QuestionBank, Depends(get_question_bank)],
) -> QuizOut:
    return quiz_out(await bank.get_quiz(quiz_id))


@router.get("/{quiz_id}/questions", response_model=list[QuestionOut])
async def list_questions(
    quiz_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    bank: Annotated[QuestionBank, Depends(get_question_bank)],
) -> list[QuestionOut]:
    questions = await bank.list_questions(quiz_id)
    reveal = principal.is_admin()
    return [question_out(q, reveal_answers=reveal) for q in questions]


@router.post(
    "/{quiz_id}/questions",
    response_model=QuestionOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_question(
    quiz_id: UUID,
    body: QuestionCreate,
    _admin: Annotated[Principal, Depends(require_admin)],
    bank: Annotated[QuestionBank, Depends(get_question_bank)],
) -> QuestionOut:
    question = await bank.add_question(
        quiz_id,
        question_text=body.question_text,
        question_type=body.question_type,
        points=body.points,
        options=to_options(body.options),
        correct_answer=body.correct_answer,
        order_index=body.order_index,
    )
    return question_out(question, reveal_answers=True)
