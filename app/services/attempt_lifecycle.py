"""Attempt submission and the grading state machine.

    submitted --commit_review--> graded --commit_review--> graded ...

An attempt starts `submitted` with an auto-only score.  Only a committed
review sets `is_graded`; there is no way back to `submitted`, even for a
quiz made entirely of auto-gradable questions.

Concurrent reviews of one attempt are independent and the last commit
wins.  There is no version check on commit.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import replace
from typing import Literal
from uuid import UUID

from app.core.metrics import (
    ATTEMPTS_SUBMITTED,
    AUTO_SCORES,
    REVIEW_COMMITS,
    REVIEW_DURATION,
    REVIEW_SESSIONS,
)
from app.models.attempt import QuizAttempt
from app.repos.provider import Repos
from app.services.auto_scorer import auto_score, is_auto_gradable
from app.services.errors import (
    AttemptLimitReachedError,
    AttemptNotFoundError,
    QuestionNotFoundError,
    QuizInactiveError,
    QuizNotFoundError,
    ReviewSessionNotFoundError,
)
from app.services.grading import aggregate
from app.services.review_session import ReviewSession
from app.services.review_store import ReviewSessionStore

logger = logging.getLogger(__name__)

GradedFilter = Literal["all", "graded", "ungraded"]

_FILTERS: dict[str, bool | None] = {"all": None, "graded": True, "ungraded": False}


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


class AttemptLifecycle:
    def __init__(self, repos: Repos, sessions: ReviewSessionStore) -> None:
        self._repos = repos
        self._sessions = sessions

    # --- submission ---

    async def submit_attempt(
        self,
        quiz_id: UUID,
        user_id: str,
        answers: dict[str, str],
        *,
        started_at: int,
        completed_at: int | None = None,
    ) -> QuizAttempt:
        quiz = await self._repos.quizzes.get_by_id(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(str(quiz_id))
        if not quiz.is_active:
            logger.warning("Rejected attempt on inactive quiz=%s user=%s", quiz_id, user_id)
            raise QuizInactiveError(str(quiz_id))

        used = await self._repos.attempts.count_by_user(quiz_id, user_id)
        if used >= quiz.max_attempts:
            logger.warning(
                "Rejected attempt: user=%s used %d of %d attempts on quiz=%s",
                user_id,
                used,
                quiz.max_attempts,
                quiz_id,
            )
            raise AttemptLimitReachedError(
                f"maximum of {quiz.max_attempts} attempt(s) reached"
            )

        questions = await self._repos.questions.list_by_quiz(quiz_id)
        known = {str(q.id) for q in questions}
        attempt = QuizAttempt.new(
            quiz_id=quiz_id,
            user_id=user_id,
            # Answers to questions outside the quiz are dropped
            answers={k: v for k, v in answers.items() if k in known},
            started_at=started_at,
            completed_at=completed_at if completed_at is not None else _now(),
        )

        summary = aggregate(quiz, questions, attempt)
        attempt = replace(
            attempt,
            score=summary.score,
            percentage=summary.percentage,
            passed=summary.passed,
        )
        await self._repos.attempts.add(attempt)

        ATTEMPTS_SUBMITTED.inc()
        for q in questions:
            if not is_auto_gradable(q):
                result = "manual"
            elif auto_score(q, attempt.answers.get(str(q.id))) == q.points:
                result = "correct"
            else:
                result = "incorrect"
            AUTO_SCORES.labels(question_type=q.question_type, result=result).inc()

        logger.info(
            "Attempt submitted id=%s user=%s score=%d/%d (%d%%) passed=%s",
            attempt.id,
            user_id,
            summary.score,
            summary.total_possible,
            summary.percentage,
            summary.passed,
            extra={"attempt_id": str(attempt.id), "quiz_id": str(quiz_id)},
        )
        return attempt

    # --- reads ---

    async def get_attempt(self, attempt_id: UUID) -> QuizAttempt:
        attempt = await self._repos.attempts.get_by_id(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(str(attempt_id))
        return attempt

    async def list_attempts(
        self, quiz_id: UUID, graded_filter: GradedFilter = "all"
    ) -> list[QuizAttempt]:
        if graded_filter not in _FILTERS:
            raise ValueError(f"unknown filter {graded_filter!r}")
        if await self._repos.quizzes.get_by_id(quiz_id) is None:
            raise QuizNotFoundError(str(quiz_id))
        return await self._repos.attempts.list_by_quiz(quiz_id, _FILTERS[graded_filter])

    async def latest_attempt(self, quiz_id: UUID, user_id: str) -> QuizAttempt | None:
        attempts = await self._repos.attempts.list_by_user(quiz_id, user_id)
        return attempts[0] if attempts else None

    # --- review ---

    async def open_review(self, attempt_id: UUID, reviewer_id: str) -> ReviewSession:
        attempt = await self.get_attempt(attempt_id)
        questions = await self._repos.questions.list_by_quiz(attempt.quiz_id)
        session = ReviewSession.open(
            attempt=attempt, questions=questions, reviewer_id=reviewer_id
        )
        await self._sessions.save(session)

        REVIEW_SESSIONS.labels(outcome="opened").inc()
        logger.info(
            "Review opened session=%s by=%s",
            session.id,
            reviewer_id,
            extra={
                "attempt_id": str(attempt_id),
                "session_id": str(session.id),
                "grader_id": reviewer_id,
            },
        )
        return session

    async def get_review(self, session_id: UUID) -> ReviewSession:
        session = await self._sessions.get(session_id)
        if session is None:
            raise ReviewSessionNotFoundError(str(session_id))
        return session

    async def edit_review(
        self,
        session_id: UUID,
        *,
        scores: dict[str, int] | None = None,
        question_feedback: dict[str, str] | None = None,
        feedback: str | None = None,
    ) -> ReviewSession:
        """Apply edits to an open session.  Scores are clamped, never rejected."""
        session = await self.get_review(session_id)

        for question_id in {*(scores or {}), *(question_feedback or {})}:
            if not session.has_question(question_id):
                raise QuestionNotFoundError(question_id)

        for question_id, value in (scores or {}).items():
            stored = session.set_score(question_id, value)
            if stored != value:
                logger.debug(
                    "Clamped score for question=%s from %d to %d",
                    question_id,
                    value,
                    stored,
                )
        for question_id, text in (question_feedback or {}).items():
            session.set_question_feedback(question_id, text)
        if feedback is not None:
            session.set_overall_feedback(feedback)

        await self._sessions.save(session)
        return session

    async def commit_review(self, session_id: UUID, grader_id: str) -> QuizAttempt:
        session = await self.get_review(session_id)
        attempt = await self.get_attempt(session.attempt_id)
        quiz = await self._repos.quizzes.get_by_id(attempt.quiz_id)
        if quiz is None:
            raise QuizNotFoundError(str(attempt.quiz_id))
        questions = await self._repos.questions.list_by_quiz(attempt.quiz_id)

        # The aggregate is computed from exactly the override map being
        # written, and both go out in one save_grading() call.
        regrade = attempt.is_graded
        graded = replace(
            attempt,
            question_scores=dict(session.question_scores),
            question_feedback=dict(session.question_feedback),
            feedback=session.feedback or None,
        )
        summary = aggregate(quiz, questions, graded)
        graded = replace(
            graded,
            score=summary.score,
            percentage=summary.percentage,
            passed=summary.passed,
            is_graded=True,
            graded_by=grader_id,
            graded_at=_now(),
        )
        await self._repos.attempts.save_grading(graded)
        # Discard the session only once the grade is durable
        await self._repos.commit()
        await self._sessions.delete(session_id)

        REVIEW_SESSIONS.labels(outcome="committed").inc()
        REVIEW_COMMITS.labels(regrade=str(regrade).lower()).inc()
        REVIEW_DURATION.observe(max(0, graded.graded_at - session.opened_at))
        logger.info(
            "Review committed session=%s score=%d/%d (%d%%) passed=%s regrade=%s",
            session_id,
            summary.score,
            summary.total_possible,
            summary.percentage,
            summary.passed,
            regrade,
            extra={
                "attempt_id": str(attempt.id),
                "quiz_id": str(attempt.quiz_id),
                "session_id": str(session_id),
                "grader_id": grader_id,
            },
        )
        return graded

    async def cancel_review(self, session_id: UUID) -> bool:
        """Discard a session.  Safe to call twice; returns False the second time."""
        removed = await self._sessions.delete(session_id)
        if removed:
            REVIEW_SESSIONS.labels(outcome="cancelled").inc()
            logger.info(
                "Review cancelled session=%s",
                session_id,
                extra={"session_id": str(session_id)},
            )
        return removed
