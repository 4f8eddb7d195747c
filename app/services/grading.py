"""Override reconciliation and score aggregation.

All functions here are pure.  The attempt's stored score is always
recomputed from its current override map; nothing is cached between
calls, so calling aggregate() twice on the same inputs gives the same
summary.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.models.attempt import GradeSummary, QuestionResult, QuizAttempt
from app.models.quiz import Quiz, QuizQuestion
from app.services.auto_scorer import auto_score, is_auto_gradable


def clamp_score(value: int, points: int) -> int:
    """Clamp an administrator-entered score into [0, points]."""
    return max(0, min(points, value))


def round_half_up_percent(score: int, total: int) -> int:
    """round(score / total * 100) with .5 rounding up, in integer arithmetic."""
    if total <= 0:
        return 0
    return (score * 200 + total) // (2 * total)


def awarded(question: QuizQuestion, attempt: QuizAttempt) -> int:
    """Override if the attempt has one for this question, else the auto score.

    An override is clamped to the question's current points, which may
    have been lowered since the override was committed.
    """
    key = str(question.id)
    if key in attempt.question_scores:
        return clamp_score(attempt.question_scores[key], question.points)
    return auto_score(question, attempt.answers.get(key))


def aggregate(
    quiz: Quiz, questions: Iterable[QuizQuestion], attempt: QuizAttempt
) -> GradeSummary:
    owned = [q for q in questions if q.quiz_id == quiz.id]
    score = sum(awarded(q, attempt) for q in owned)
    total = sum(q.points for q in owned)
    percentage = round_half_up_percent(score, total)
    return GradeSummary(
        score=score,
        total_possible=total,
        percentage=percentage,
        passed=percentage >= quiz.passing_score,
    )


def needs_review(questions: Iterable[QuizQuestion]) -> bool:
    """True when at least one question has no machine-checkable answer."""
    return any(not is_auto_gradable(q) for q in questions)


def breakdown(
    questions: Iterable[QuizQuestion], attempt: QuizAttempt
) -> list[QuestionResult]:
    rows: list[QuestionResult] = []
    for q in sorted(questions, key=lambda q: q.order_index):
        if q.quiz_id != attempt.quiz_id:
            continue
        key = str(q.id)
        answer = attempt.answers.get(key)
        auto = auto_score(q, answer)
        gradable = is_auto_gradable(q)
        rows.append(
            QuestionResult(
                question_id=q.id,
                question_type=q.question_type,
                points=q.points,
                answer=answer,
                auto_score=auto,
                awarded=awarded(q, attempt),
                overridden=key in attempt.question_scores,
                auto_gradable=gradable,
                correct=gradable and q.points > 0 and auto == q.points,
                feedback=attempt.question_feedback.get(key),
            )
        )
    return rows
