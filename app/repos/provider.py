"""Repository selection.

Without DATABASE_URL every request shares the module-level in-memory
repositories.  With it, each request gets Pg repositories bound to one
AsyncSession: committed when the handler returns, rolled back (and the
error re-raised) when it fails.  A service that must not act on a write
until it is durable calls `Repos.commit` itself; the final commit then
has nothing left to do.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass

from app.db import engine as db_engine
from app.repos.attempt_repo import AttemptRepo, InMemoryAttemptRepo
from app.repos.pg_attempt_repo import PgAttemptRepo
from app.repos.pg_question_repo import PgQuestionRepo
from app.repos.pg_quiz_repo import PgQuizRepo
from app.repos.question_repo import InMemoryQuestionRepo, QuestionRepo
from app.repos.quiz_repo import InMemoryQuizRepo, QuizRepo


async def _nothing_to_commit() -> None:
    return None


@dataclass(frozen=True, slots=True)
class Repos:
    quizzes: QuizRepo
    questions: QuestionRepo
    attempts: AttemptRepo
    # Makes the writes so far durable; a no-op for the in-memory repos
    commit: Callable[[], Awaitable[None]] = _nothing_to_commit


# --- In-memory singletons (dev/test) ---

quiz_repo = InMemoryQuizRepo()
question_repo = InMemoryQuestionRepo()
attempt_repo = InMemoryAttemptRepo()

IN_MEMORY_REPOS = Repos(quizzes=quiz_repo, questions=question_repo, attempts=attempt_repo)


def reset_in_memory_repos() -> None:
    quiz_repo.clear()
    question_repo.clear()
    attempt_repo.clear()


async def get_repos() -> AsyncGenerator[Repos, None]:
    """FastAPI dependency yielding the repositories for one request."""
    factory = db_engine.async_session_factory
    if factory is None:
        yield IN_MEMORY_REPOS
        return

    async with factory() as session:
        try:
            yield Repos(
                quizzes=PgQuizRepo(session),
                questions=PgQuestionRepo(session),
                attempts=PgAttemptRepo(session),
                commit=session.commit,
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise
