"""PostgreSQL implementation of QuizRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import QuizRow
from app.models.quiz import Quiz


class PgQuizRepo:
    """Satisfies the QuizRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, quiz_id: UUID) -> Quiz | None:
        stmt = select(QuizRow).where(QuizRow.id == quiz_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_quiz(row)

    async def add(self, quiz: Quiz) -> None:
        row = QuizRow(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            course_id=quiz.course_id,
            passing_score=quiz.passing_score,
            time_limit=quiz.time_limit,
            max_attempts=quiz.max_attempts,
            is_active=quiz.is_active,
        )
        self._session.add(row)
        await self._session.flush()


def _row_to_quiz(row: QuizRow) -> Quiz:
    return Quiz(
        id=row.id,
        title=row.title,
        passing_score=row.passing_score,
        time_limit=row.time_limit,
        max_attempts=row.max_attempts,
        is_active=row.is_active,
        course_id=row.course_id,
        description=row.description,
    )
