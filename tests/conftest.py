from __future__ import annotations

import sys
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.repos.provider import IN_MEMORY_REPOS, Repos, reset_in_memory_repos
from app.services import token_service
from app.services.review_store import review_store

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Clear quizzes, questions and attempts between tests."""
    reset_in_memory_repos()


@pytest.fixture(autouse=True)
def reset_review_sessions() -> None:
    """Clear open review sessions between tests."""
    if hasattr(review_store, "_store"):
        review_store._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def repos() -> Repos:
    return IN_MEMORY_REPOS


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token with default role (user)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def create_quiz(client: TestClient, admin_token: str, **overrides) -> dict:
    body = {"title": "Capitals", "passing_score": 70, **overrides}
    r = client.post("/v1/quizzes", json=body, headers=auth(admin_token))
    assert r.status_code == 201, r.text
    return r.json()


def create_question(
    client: TestClient, admin_token: str, quiz_id: str, **fields
) -> dict:
    body = {
        "question_text": "Capital of Italy?",
        "question_type": "short_answer",
        "points": 5,
        "correct_answer": "Rome",
        **fields,
    }
    r = client.post(
        f"/v1/quizzes/{quiz_id}/questions", json=body, headers=auth(admin_token)
    )
    assert r.status_code == 201, r.text
    return r.json()


def mc_fields(points: int = 5, correct: str = "B") -> dict:
    return {
        "question_text": f"Pick {correct}",
        "question_type": "multiple_choice",
        "points": points,
        "options": [
            {"text": t, "correct": t == correct} for t in ("A", "B", "C")
        ],
    }


def submit(
    client: TestClient, token: str, quiz_id: str, answers: dict[str, str]
) -> dict:
    r = client.post(
        f"/v1/quizzes/{quiz_id}/attempts",
        json={"answers": answers, "started_at": int(time.time()) - 60},
        headers=auth(token),
    )
    assert r.status_code == 201, r.text
    return r.json()
