from __future__ import annotations

import threading
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from app.models.quiz import QuizQuestion


class QuestionRepo(Protocol):
    async def get_by_id(self, question_id: UUID) -> QuizQuestion | None: ...
    async def list_by_quiz(self, quiz_id: UUID) -> list[QuizQuestion]: ...
    async def get_by_order_index(
        self, quiz_id: UUID, order_index: int
    ) -> QuizQuestion | None: ...
    async def add(self, question: QuizQuestion) -> None: ...
    async def update(self, question: QuizQuestion) -> None: ...
    async def delete(self, question_id: UUID) -> bool: ...
    async def swap_order_index(self, first: QuizQuestion, second: QuizQuestion) -> None: ...


class InMemoryQuestionRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, QuizQuestion] = {}
        # Held while checking or changing order_index so no reader sees
        # two questions of one quiz sharing a value.
        self._lock = threading.Lock()

    def _holder(self, quiz_id: UUID, order_index: int) -> QuizQuestion | None:
        for q in self._by_id.values():
            if q.quiz_id == quiz_id and q.order_index == order_index:
                return q
        return None

    async def get_by_id(self, question_id: UUID) -> QuizQuestion | None:
        return self._by_id.get(question_id)

    async def list_by_quiz(self, quiz_id: UUID) -> list[QuizQuestion]:
        with self._lock:
            found = [q for q in self._by_id.values() if q.quiz_id == quiz_id]
        return sorted(found, key=lambda q: q.order_index)

    async def get_by_order_index(
        self, quiz_id: UUID, order_index: int
    ) -> QuizQuestion | None:
        with self._lock:
            return self._holder(quiz_id, order_index)

    async def add(self, question: QuizQuestion) -> None:
        with self._lock:
            if question.id in self._by_id:
                raise ValueError("question already exists")
            if self._holder(question.quiz_id, question.order_index) is not None:
                raise ValueError("order_index already used in this quiz")
            self._by_id[question.id] = question

    async def update(self, question: QuizQuestion) -> None:
        with self._lock:
            if question.id not in self._by_id:
                raise KeyError("question not found")
            holder = self._holder(question.quiz_id, question.order_index)
            if holder is not None and holder.id != question.id:
                raise ValueError("order_index already used in this quiz")
            self._by_id[question.id] = question

    async def delete(self, question_id: UUID) -> bool:
        with self._lock:
            return self._by_id.pop(question_id, None) is not None

    async def swap_order_index(self, first: QuizQuestion, second: QuizQuestion) -> None:
        with self._lock:
            a = self._by_id[first.id]
            b = self._by_id[second.id]
            self._by_id[a.id] = replace(a, order_index=b.order_index)
            self._by_id[b.id] = replace(b, order_index=a.order_index)

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()
