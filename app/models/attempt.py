from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    """One learner's submission plus its current grading state.

    `answers` is fixed at submission.  Everything from `score` down is
    rewritten by each committed review.  Map keys are question ids as
    strings, matching the persisted JSON shape.
    """

    id: UUID
    quiz_id: UUID
    user_id: str
    answers: dict[str, str]
    started_at: int
    completed_at: int
    time_taken: int  # seconds
    score: int = 0
    percentage: int = 0
    passed: bool = False
    is_graded: bool = False
    graded_by: str | None = None
    graded_at: int | None = None
    question_scores: dict[str, int] = field(default_factory=dict)
    question_feedback: dict[str, str] = field(default_factory=dict)
    feedback: str | None = None

    @staticmethod
    def new(
        *,
        quiz_id: UUID,
        user_id: str,
        answers: dict[str, str],
        started_at: int,
        completed_at: int,
    ) -> QuizAttempt:
        return QuizAttempt(
            id=uuid4(),
            quiz_id=quiz_id,
            user_id=user_id,
            answers=dict(answers),
            started_at=started_at,
            completed_at=completed_at,
            time_taken=max(0, completed_at - started_at),
        )

    @property
    def status(self) -> str:
        return "graded" if self.is_graded else "submitted"


@dataclass(frozen=True, slots=True)
class GradeSummary:
    score: int
    total_possible: int
    percentage: int
    passed: bool


@dataclass(frozen=True, slots=True)
class QuestionResult:
    """One row of an attempt's per-question breakdown."""

    question_id: UUID
    question_type: str
    points: int
    answer: str | None
    auto_score: int
    awarded: int
    overridden: bool
    auto_gradable: bool
    correct: bool
    feedback: str | None = None
