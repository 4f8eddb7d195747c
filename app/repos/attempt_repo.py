from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from app.models.attempt import QuizAttempt


class AttemptRepo(Protocol):
    async def add(self, attempt: QuizAttempt) -> None: ...
    async def get_by_id(self, attempt_id: UUID) -> QuizAttempt | None: ...
    async def list_by_quiz(
        self, quiz_id: UUID, is_graded: bool | None = None
    ) -> list[QuizAttempt]: ...
    async def list_by_user(self, quiz_id: UUID, user_id: str) -> list[QuizAttempt]: ...
    async def count_by_user(self, quiz_id: UUID, user_id: str) -> int: ...
    async def save_grading(self, attempt: QuizAttempt) -> None: ...


def _newest_first(attempts: list[QuizAttempt]) -> list[QuizAttempt]:
    return sorted(attempts, key=lambda a: a.completed_at, reverse=True)


class InMemoryAttemptRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, QuizAttempt] = {}

    async def add(self, attempt: QuizAttempt) -> None:
        if attempt.id in self._by_id:
            raise ValueError("attempt already exists")
        self._by_id[attempt.id] = attempt

    async def get_by_id(self, attempt_id: UUID) -> QuizAttempt | None:
        return self._by_id.get(attempt_id)

    async def list_by_quiz(
        self, quiz_id: UUID, is_graded: bool | None = None
    ) -> list[QuizAttempt]:
        return _newest_first(
            [
                a
                for a in self._by_id.values()
                if a.quiz_id == quiz_id and (is_graded is None or a.is_graded == is_graded)
            ]
        )

    async def list_by_user(self, quiz_id: UUID, user_id: str) -> list[QuizAttempt]:
        return _newest_first(
            [
                a
                for a in self._by_id.values()
                if a.quiz_id == quiz_id and a.user_id == user_id
            ]
        )

    async def count_by_user(self, quiz_id: UUID, user_id: str) -> int:
        return len(await self.list_by_user(quiz_id, user_id))

    async def save_grading(self, attempt: QuizAttempt) -> None:
        """Replace the grading fields only; answers stay as submitted."""
        stored = self._by_id.get(attempt.id)
        if stored is None:
            raise KeyError("attempt not found")
        self._by_id[attempt.id] = replace(
            attempt,
            answers=stored.answers,
            started_at=stored.started_at,
            completed_at=stored.completed_at,
            time_taken=stored.time_taken,
        )

    def clear(self) -> None:
        self._by_id.clear()
