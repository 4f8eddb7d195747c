"""Quiz and question domain models.

A question's type-dependent data lives in a payload object, one class per
question type.  The scorer dispatches on the payload class, so a question
can never carry options and a long-answer guideline at the same time.

Records read from storage with a type this service does not know are kept
as UnsupportedQuestion instead of being rejected; they score 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union
from uuid import UUID, uuid4

QUESTION_TYPES = ("multiple_choice", "true_false", "short_answer", "long_answer")


@dataclass(frozen=True, slots=True)
class Option:
    text: str
    correct: bool = False


@dataclass(frozen=True, slots=True)
class MultipleChoice:
    question_type: ClassVar[str] = "multiple_choice"

    options: tuple[Option, ...]

    def correct_option(self) -> Option | None:
        for option in self.options:
            if option.correct:
                return option
        return None


@dataclass(frozen=True, slots=True)
class TrueFalse:
    question_type: ClassVar[str] = "true_false"

    correct_answer: str  # "true"|"false"


@dataclass(frozen=True, slots=True)
class ShortAnswer:
    question_type: ClassVar[str] = "short_answer"

    correct_answer: str


@dataclass(frozen=True, slots=True)
class LongAnswer:
    question_type: ClassVar[str] = "long_answer"

    guidelines: str | None = None


@dataclass(frozen=True, slots=True)
class UnsupportedQuestion:
    """Stored question whose type is not in QUESTION_TYPES."""

    question_type: str
    options: tuple[Option, ...] = ()
    correct_answer: str | None = None


QuestionPayload = Union[MultipleChoice, TrueFalse, ShortAnswer, LongAnswer, UnsupportedQuestion]


def build_payload(
    question_type: str,
    *,
    options: tuple[Option, ...] | list[Option] | None = None,
    correct_answer: str | None = None,
) -> QuestionPayload:
    """Map the flat record shape (type, options, correct_answer) to a payload.

    No validation happens here; QuestionBank validates drafts before they
    are stored, and stored records are taken as they are.
    """
    opts = tuple(options or ())
    if question_type == "multiple_choice":
        return MultipleChoice(options=opts)
    if question_type == "true_false":
        return TrueFalse(correct_answer=correct_answer or "")
    if question_type == "short_answer":
        return ShortAnswer(correct_answer=correct_answer or "")
    if question_type == "long_answer":
        return LongAnswer(guidelines=correct_answer)
    return UnsupportedQuestion(
        question_type=question_type, options=opts, correct_answer=correct_answer
    )


@dataclass(frozen=True, slots=True)
class Quiz:
    id: UUID
    title: str
    passing_score: int = 70  # percent, 0-100
    time_limit: int | None = None  # minutes
    max_attempts: int = 1
    is_active: bool = True
    course_id: UUID | None = None
    description: str | None = None

    @staticmethod
    def new(
        *,
        title: str,
        passing_score: int = 70,
        time_limit: int | None = None,
        max_attempts: int = 1,
        is_active: bool = True,
        course_id: UUID | None = None,
        description: str | None = None,
    ) -> Quiz:
        return Quiz(
            id=uuid4(),
            title=title,
            passing_score=passing_score,
            time_limit=time_limit,
            max_attempts=max_attempts,
            is_active=is_active,
            course_id=course_id,
            description=description,
        )


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    id: UUID
    quiz_id: UUID
    question_text: str
    points: int
    order_index: int
    payload: QuestionPayload

    @staticmethod
    def new(
        *,
        quiz_id: UUID,
        question_text: str,
        points: int,
        order_index: int,
        payload: QuestionPayload,
    ) -> QuizQuestion:
        return QuizQuestion(
            id=uuid4(),
            quiz_id=quiz_id,
            question_text=question_text,
            points=points,
            order_index=order_index,
            payload=payload,
        )

    @property
    def question_type(self) -> str:
        return self.payload.question_type

    @property
    def options(self) -> tuple[Option, ...]:
        if isinstance(self.payload, (MultipleChoice, UnsupportedQuestion)):
            return self.payload.options
        return ()

    @property
    def correct_answer(self) -> str | None:
        if isinstance(self.payload, (TrueFalse, ShortAnswer, UnsupportedQuestion)):
            return self.payload.correct_answer
        if isinstance(self.payload, LongAnswer):
            return self.payload.guidelines
        return None
