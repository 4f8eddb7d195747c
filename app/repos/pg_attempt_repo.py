"""PostgreSQL implementation of AttemptRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import QuizAttemptRow
from app.models.attempt import QuizAttempt


class PgAttemptRepo:
    """Satisfies the AttemptRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, attempt: QuizAttempt) -> None:
        row = QuizAttemptRow(
            id=attempt.id,
            quiz_id=attempt.quiz_id,
            user_id=attempt.user_id,
            answers=dict(attempt.answers),
            started_at=attempt.started_at,
            completed_at=attempt.completed_at,
            time_taken=attempt.time_taken,
            **_grading_columns(attempt),
        )
        self._session.add(row)
        await self._session.flush()

    async def get_by_id(self, attempt_id: UUID) -> QuizAttempt | None:
        stmt = select(QuizAttemptRow).where(QuizAttemptRow.id == attempt_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_attempt(row)

    async def list_by_quiz(
        self, quiz_id: UUID, is_graded: bool | None = None
    ) -> list[QuizAttempt]:
        stmt = select(QuizAttemptRow).where(QuizAttemptRow.quiz_id == quiz_id)
        if is_graded is not None:
            stmt = stmt.where(QuizAttemptRow.is_graded == is_graded)
        stmt = stmt.order_by(QuizAttemptRow.completed_at.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_attempt(r) for r in rows]

    async def list_by_user(self, quiz_id: UUID, user_id: str) -> list[QuizAttempt]:
        stmt = (
            select(QuizAttemptRow)
            .where(
                QuizAttemptRow.quiz_id == quiz_id,
                QuizAttemptRow.user_id == user_id,
            )
            .order_by(QuizAttemptRow.completed_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_attempt(r) for r in rows]

    async def count_by_user(self, quiz_id: UUID, user_id: str) -> int:
        stmt = select(func.count()).select_from(QuizAttemptRow).where(
            QuizAttemptRow.quiz_id == quiz_id,
            QuizAttemptRow.user_id == user_id,
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def save_grading(self, attempt: QuizAttempt) -> None:
        # Overrides and the aggregate computed from them go out in one
        # UPDATE; answers are never part of it.
        stmt = (
            update(QuizAttemptRow)
            .where(QuizAttemptRow.id == attempt.id)
            .values(**_grading_columns(attempt))
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise KeyError("attempt not found")


def _grading_columns(attempt: QuizAttempt) -> dict:
    return {
        "score": attempt.score,
        "percentage": attempt.percentage,
        "passed": attempt.passed,
        "is_graded": attempt.is_graded,
        "graded_by": attempt.graded_by,
        "graded_at": attempt.graded_at,
        "question_scores": dict(attempt.question_scores),
        "question_feedback": dict(attempt.question_feedback),
        "feedback": attempt.feedback,
    }


def _row_to_attempt(row: QuizAttemptRow) -> QuizAttempt:
    return QuizAttempt(
        id=row.id,
        quiz_id=row.quiz_id,
        user_id=row.user_id,
        answers={k: str(v) for k, v in (row.answers or {}).items()},
        started_at=row.started_at,
        completed_at=row.completed_at,
        time_taken=row.time_taken,
        score=row.score,
        percentage=row.percentage,
        passed=row.passed,
        is_graded=row.is_graded,
        graded_by=row.graded_by,
        graded_at=row.graded_at,
        question_scores={k: int(v) for k, v in (row.question_scores or {}).items()},
        question_feedback=dict(row.question_feedback or {}),
        feedback=row.feedback,
    )
