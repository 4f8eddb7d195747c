"""Quiz and question authoring operations.

Questions of a quiz are ordered by `order_index`.  Values are unique per
quiz but need not be contiguous: deleting a question leaves a gap, and
reorder() only ever swaps two neighbouring values.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Literal
from uuid import UUID

from app.models.quiz import (
    QUESTION_TYPES,
    Option,
    Quiz,
    QuizQuestion,
    build_payload,
)
from app.repos.question_repo import QuestionRepo
from app.repos.quiz_repo import QuizRepo
from app.services.errors import (
    OrderConflictError,
    QuestionNotFoundError,
    QuestionValidationError,
    QuizNotFoundError,
    QuizValidationError,
)

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]

_EDITABLE_FIELDS = frozenset(
    {"question_text", "question_type", "points", "order_index", "options", "correct_answer"}
)

# Editable but never nullable; options and correct_answer may be cleared
_REQUIRED_FIELDS = frozenset(
    {"question_text", "question_type", "points", "order_index"}
)


def validate_question(
    *,
    question_text: str,
    question_type: str,
    points: int,
    options: Sequence[Option] | None,
    correct_answer: str | None,
    order_index: int | None = None,
) -> None:
    """Raise QuestionValidationError if the draft cannot be stored."""
    if not question_text or not question_text.strip():
        raise QuestionValidationError("question_text must be non-empty")
    if question_type not in QUESTION_TYPES:
        raise QuestionValidationError(f"unknown question_type {question_type!r}")
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise QuestionValidationError("points must be a positive integer")
    if order_index is not None and order_index < 0:
        raise QuestionValidationError("order_index must be >= 0")

    if question_type == "multiple_choice":
        opts = list(options or ())
        if not opts:
            raise QuestionValidationError("multiple_choice needs at least one option")
        if any(not o.text.strip() for o in opts):
            raise QuestionValidationError("option text must be non-empty")
        n_correct = sum(1 for o in opts if o.correct)
        if n_correct != 1:
            raise QuestionValidationError(
                f"multiple_choice needs exactly one correct option (got {n_correct})"
            )
    elif question_type == "true_false":
        if correct_answer not in ("true", "false"):
            raise QuestionValidationError('true_false correct_answer must be "true" or "false"')
    elif question_type == "short_answer":
        if not correct_answer or not correct_answer.strip():
            raise QuestionValidationError("short_answer needs a correct_answer")


class QuestionBank:
    def __init__(self, quizzes: QuizRepo, questions: QuestionRepo) -> None:
        self._quizzes = quizzes
        self._questions = questions

    # --- quizzes ---

    async def create_quiz(
        self,
        *,
        title: str,
        passing_score: int = 70,
        time_limit: int | None = None,
        max_attempts: int = 1,
        is_active: bool = True,
        course_id: UUID | None = None,
        description: str | None = None,
    ) -> Quiz:
        title = title.strip()
        if not title:
            raise QuizValidationError("title must be non-empty")
        if not 0 <= passing_score <= 100:
            raise QuizValidationError("passing_score must be between 0 and 100")
        if max_attempts < 1:
            raise QuizValidationError("max_attempts must be >= 1")
        if time_limit is not None and time_limit <= 0:
            raise QuizValidationError("time_limit must be positive")

        quiz = Quiz.new(
            title=title,
            passing_score=passing_score,
            time_limit=time_limit,
            max_attempts=max_attempts,
            is_active=is_active,
            course_id=course_id,
            description=description,
        )
        await self._quizzes.add(quiz)
        logger.info(
            "Created quiz id=%s title=%s",
            quiz.id,
            quiz.title,
            extra={"quiz_id": str(quiz.id)},
        )
        return quiz

    async def get_quiz(self, quiz_id: UUID) -> Quiz:
        quiz = await self._quizzes.get_by_id(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(str(quiz_id))
        return quiz

    # --- questions ---

    async def list_questions(self, quiz_id: UUID) -> list[QuizQuestion]:
        await self.get_quiz(quiz_id)
        return await self._questions.list_by_quiz(quiz_id)

    async def get_question(self, question_id: UUID) -> QuizQuestion:
        question = await self._questions.get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundError(str(question_id))
        return question

    async def add_question(
        self,
        quiz_id: UUID,
        *,
        question_text: str,
        question_type: str,
        points: int,
        options: Sequence[Option] | None = None,
        correct_answer: str | None = None,
        order_index: int | None = None,
    ) -> QuizQuestion:
        await self.get_quiz(quiz_id)
        validate_question(
            question_text=question_text,
            question_type=question_type,
            points=points,
            options=options,
            correct_answer=correct_answer,
            order_index=order_index,
        )

        existing = await self._questions.list_by_quiz(quiz_id)
        if order_index is None:
            order_index = max((q.order_index for q in existing), default=-1) + 1
        elif any(q.order_index == order_index for q in existing):
            logger.warning(
                "Rejected question: order_index=%d already used in quiz=%s",
                order_index,
                quiz_id,
            )
            raise OrderConflictError(f"order_index {order_index} already used")

        question = QuizQuestion.new(
            quiz_id=quiz_id,
            question_text=question_text.strip(),
            points=points,
            order_index=order_index,
            payload=build_payload(
                question_type, options=options, correct_answer=correct_answer
            ),
        )
        await self._questions.add(question)
        logger.info(
            "Added question id=%s type=%s order_index=%d",
            question.id,
            question.question_type,
            question.order_index,
            extra={"quiz_id": str(quiz_id), "question_id": str(question.id)},
        )
        return question

    async def update_question(
        self, question_id: UUID, changes: Mapping[str, object]
    ) -> QuizQuestion:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise QuestionValidationError(f"fields not editable: {sorted(unknown)}")
        nulled = sorted(
            f for f in _REQUIRED_FIELDS if f in changes and changes[f] is None
        )
        if nulled:
            raise QuestionValidationError(f"fields cannot be null: {nulled}")

        current = await self.get_question(question_id)
        merged: dict = {
            "question_text": current.question_text,
            "question_type": current.question_type,
            "points": current.points,
            "order_index": current.order_index,
            "options": current.options,
            "correct_answer": current.correct_answer,
        }
        merged.update(changes)
        validate_question(**merged)

        order_index = merged["order_index"]
        if order_index != current.order_index:
            holder = await self._questions.get_by_order_index(current.quiz_id, order_index)
            if holder is not None and holder.id != current.id:
                logger.warning(
                    "Rejected update: order_index=%d already used in quiz=%s",
                    order_index,
                    current.quiz_id,
                )
                raise OrderConflictError(f"order_index {order_index} already used")

        updated = replace(
            current,
            question_text=merged["question_text"].strip(),
            points=merged["points"],
            order_index=order_index,
            payload=build_payload(
                merged["question_type"],
                options=merged["options"],
                correct_answer=merged["correct_answer"],
            ),
        )
        await self._questions.update(updated)
        logger.info(
            "Updated question id=%s fields=%s",
            question_id,
            sorted(changes),
            extra={"quiz_id": str(current.quiz_id), "question_id": str(question_id)},
        )
        return updated

    async def delete_question(self, question_id: UUID) -> None:
        question = await self.get_question(question_id)
        await self._questions.delete(question_id)
        logger.info(
            "Deleted question id=%s order_index=%d",
            question_id,
            question.order_index,
            extra={"quiz_id": str(question.quiz_id), "question_id": str(question_id)},
        )

    async def reorder(self, question_id: UUID, direction: Direction) -> bool:
        """Swap with the neighbour at order_index -1 (up) or +1 (down).

        Returns False, changing nothing, when there is no such neighbour.
        """
        if direction not in ("up", "down"):
            raise QuestionValidationError(f"direction must be up or down (got {direction!r})")

        target = await self.get_question(question_id)
        step = -1 if direction == "up" else 1
        neighbour = await self._questions.get_by_order_index(
            target.quiz_id, target.order_index + step
        )
        if neighbour is None:
            logger.debug(
                "Move %s of question=%s is a no-op at order_index=%d",
                direction,
                question_id,
                target.order_index,
            )
            return False

        await self._questions.swap_order_index(target, neighbour)
        logger.info(
            "Moved question id=%s %s: order_index %d <-> %d",
            question_id,
            direction,
            target.order_index,
            neighbour.order_index,
            extra={"quiz_id": str(target.quiz_id), "question_id": str(question_id)},
        )
        return True
