"""Per-question automatic scoring.

auto_score() is pure and total: it never raises, never logs and never
touches metrics.  Any answer that is missing or not a string scores 0.
"""

from __future__ import annotations

from app.models.quiz import (
    MultipleChoice,
    QuizQuestion,
    ShortAnswer,
    TrueFalse,
)

AUTO_GRADABLE_TYPES = frozenset({"multiple_choice", "true_false", "short_answer"})


def _normalize(text: str) -> str:
    return text.strip().lower()


def auto_score(question: QuizQuestion, answer: object) -> int:
    """Points the question awards for `answer` with no human judgment."""
    if not isinstance(answer, str):
        return 0

    payload = question.payload

    if isinstance(payload, MultipleChoice):
        correct = payload.correct_option()
        if correct is not None and answer == correct.text:
            return question.points
        return 0

    if isinstance(payload, TrueFalse):
        return question.points if answer == payload.correct_answer else 0

    if isinstance(payload, ShortAnswer):
        expected = _normalize(payload.correct_answer)
        # A blank key would otherwise match a blank answer
        if expected and _normalize(answer) == expected:
            return question.points
        return 0

    # LongAnswer and UnsupportedQuestion have no ground truth
    return 0


def is_auto_gradable(question: QuizQuestion) -> bool:
    return question.question_type in AUTO_GRADABLE_TYPES
