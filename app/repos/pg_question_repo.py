"""PostgreSQL implementation of QuestionRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import case, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import QuizQuestionRow
from app.models.quiz import Option, QuizQuestion, build_payload


class PgQuestionRepo:
    """Satisfies the QuestionRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, question_id: UUID) -> QuizQuestion | None:
        stmt = select(QuizQuestionRow).where(QuizQuestionRow.id == question_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_question(row)

    async def list_by_quiz(self, quiz_id: UUID) -> list[QuizQuestion]:
        stmt = (
            select(QuizQuestionRow)
            .where(QuizQuestionRow.quiz_id == quiz_id)
            .order_by(QuizQuestionRow.order_index)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_question(r) for r in rows]

    async def get_by_order_index(
        self, quiz_id: UUID, order_index: int
    ) -> QuizQuestion | None:
        stmt = select(QuizQuestionRow).where(
            QuizQuestionRow.quiz_id == quiz_id,
            QuizQuestionRow.order_index == order_index,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_question(row)

    async def add(self, question: QuizQuestion) -> None:
        self._session.add(
            QuizQuestionRow(id=question.id, quiz_id=question.quiz_id, **_columns(question))
        )
        await self._session.flush()

    async def update(self, question: QuizQuestion) -> None:
        stmt = (
            update(QuizQuestionRow)
            .where(QuizQuestionRow.id == question.id)
            .values(**_columns(question))
        )
        await self._session.execute(stmt)

    async def delete(self, question_id: UUID) -> bool:
        stmt = delete(QuizQuestionRow).where(QuizQuestionRow.id == question_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def swap_order_index(self, first: QuizQuestion, second: QuizQuestion) -> None:
        # One statement moves both rows; the deferrable unique constraint
        # is checked after it, so no intermediate state is ever visible.
        stmt = (
            update(QuizQuestionRow)
            .where(QuizQuestionRow.id.in_([first.id, second.id]))
            .values(
                order_index=case(
                    (QuizQuestionRow.id == first.id, second.order_index),
                    else_=first.order_index,
                )
            )
        )
        await self._session.execute(stmt)


def _columns(question: QuizQuestion) -> dict:
    options = question.options
    return {
        "question_text": question.question_text,
        "question_type": question.question_type,
        "points": question.points,
        "order_index": question.order_index,
        "options": [{"text": o.text, "correct": o.correct} for o in options]
        if options
        else None,
        "correct_answer": question.correct_answer,
    }


def _row_to_question(row: QuizQuestionRow) -> QuizQuestion:
    options = [
        Option(text=str(o.get("text", "")), correct=bool(o.get("correct", False)))
        for o in (row.options or [])
    ]
    return QuizQuestion(
        id=row.id,
        quiz_id=row.quiz_id,
        question_text=row.question_text,
        points=row.points,
        order_index=row.order_index,
        payload=build_payload(
            row.question_type, options=options, correct_answer=row.correct_answer
        ),
    )
