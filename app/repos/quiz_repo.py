from __future__ import annotations

from typing import Protocol
from uuid import UUID

from app.models.quiz import Quiz


class QuizRepo(Protocol):
    async def get_by_id(self, quiz_id: UUID) -> Quiz | None: ...
    async def add(self, quiz: Quiz) -> None: ...


class InMemoryQuizRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Quiz] = {}

    async def get_by_id(self, quiz_id: UUID) -> Quiz | None:
        return self._by_id.get(quiz_id)

    async def add(self, quiz: Quiz) -> None:
        if quiz.id in self._by_id:
            raise ValueError("quiz already exists")
        self._by_id[quiz.id] = quiz

    def clear(self) -> None:
        self._by_id.clear()
