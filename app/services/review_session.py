"""Review session: the working copy an administrator edits before commit.

A session starts from the attempt's existing overrides and feedback.
Questions without an override show their auto score, but that default is
never copied into `question_scores`; only set_score() adds entries there.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from app.models.attempt import QuizAttempt
from app.models.quiz import QuizQuestion
from app.services.auto_scorer import auto_score
from app.services.grading import clamp_score


@dataclass(slots=True)
class ReviewSession:
    id: UUID
    attempt_id: UUID
    reviewer_id: str
    opened_at: int
    # question id -> points available / auto score, in display order
    max_points: dict[str, int]
    auto_scores: dict[str, int]
    question_scores: dict[str, int] = field(default_factory=dict)
    question_feedback: dict[str, str] = field(default_factory=dict)
    feedback: str = ""

    @staticmethod
    def open(
        *,
        attempt: QuizAttempt,
        questions: list[QuizQuestion],
        reviewer_id: str,
    ) -> ReviewSession:
        ordered = sorted(questions, key=lambda q: q.order_index)
        max_points = {str(q.id): q.points for q in ordered}
        return ReviewSession(
            id=uuid4(),
            attempt_id=attempt.id,
            reviewer_id=reviewer_id,
            opened_at=int(datetime.datetime.now(datetime.UTC).timestamp()),
            max_points=max_points,
            auto_scores={
                str(q.id): auto_score(q, attempt.answers.get(str(q.id)))
                for q in ordered
            },
            # Points may have been lowered since an override was committed
            question_scores={
                key: clamp_score(value, max_points[key]) if key in max_points else value
                for key, value in attempt.question_scores.items()
            },
            question_feedback=dict(attempt.question_feedback),
            feedback=attempt.feedback or "",
        )

    def has_question(self, question_id: str) -> bool:
        return question_id in self.max_points

    def is_overridden(self, question_id: str) -> bool:
        return question_id in self.question_scores

    def display_score(self, question_id: str) -> int:
        if question_id in self.question_scores:
            return self.question_scores[question_id]
        return self.auto_scores.get(question_id, 0)

    def set_score(self, question_id: str, value: int) -> int:
        """Record an override, clamped into [0, points].  Returns the stored value.

        Raises KeyError when the question is not part of the attempt's quiz.
        """
        stored = clamp_score(value, self.max_points[question_id])
        self.question_scores[question_id] = stored
        return stored

    def set_question_feedback(self, question_id: str, text: str) -> None:
        if question_id not in self.max_points:
            raise KeyError(question_id)
        if text:
            self.question_feedback[question_id] = text
        else:
            self.question_feedback.pop(question_id, None)

    def set_overall_feedback(self, text: str) -> None:
        self.feedback = text

    # --- serialization for the session store ---

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "attempt_id": str(self.attempt_id),
            "reviewer_id": self.reviewer_id,
            "opened_at": self.opened_at,
            "max_points": self.max_points,
            "auto_scores": self.auto_scores,
            "question_scores": self.question_scores,
            "question_feedback": self.question_feedback,
            "feedback": self.feedback,
        }

    @staticmethod
    def from_dict(data: dict) -> ReviewSession:
        return ReviewSession(
            id=UUID(data["id"]),
            attempt_id=UUID(data["attempt_id"]),
            reviewer_id=data["reviewer_id"],
            opened_at=int(data["opened_at"]),
            max_points={k: int(v) for k, v in data["max_points"].items()},
            auto_scores={k: int(v) for k, v in data["auto_scores"].items()},
            question_scores={k: int(v) for k, v in data["question_scores"].items()},
            question_feedback=dict(data["question_feedback"]),
            feedback=data.get("feedback") or "",
        )
