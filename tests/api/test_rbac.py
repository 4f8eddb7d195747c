"""Table-driven RBAC tests.

Each row describes: endpoint, method, role, expected HTTP status.
Paths use {quiz}, {question}, {attempt} and {review} placeholders that
are filled from resources seeded fresh for every row.
"""

from __future__ import annotations

import time
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth, create_question, create_quiz, mint_token, submit

_RBAC_CASES = [
    # (endpoint, method, role, expected_status)
    # quizzes: create is admin only, reads for any authenticated user
    ("/v1/quizzes", "POST", "admin", 201),
    ("/v1/quizzes", "POST", "user", 403),
    ("/v1/quizzes", "POST", None, 401),
    ("/v1/quizzes/{quiz}", "GET", "user", 200),
    ("/v1/quizzes/{quiz}", "GET", None, 401),
    ("/v1/quizzes/{quiz}/questions", "GET", "user", 200),
    ("/v1/quizzes/{quiz}/questions", "GET", "admin", 200),
    ("/v1/quizzes/{quiz}/questions", "GET", None, 401),
    # question bank: admin only
    ("/v1/quizzes/{quiz}/questions", "POST", "admin", 201),
    ("/v1/quizzes/{quiz}/questions", "POST", "user", 403),
    ("/v1/questions/{question}", "PATCH", "admin", 200),
    ("/v1/questions/{question}", "PATCH", "user", 403),
    ("/v1/questions/{question}", "DELETE", "admin", 204),
    ("/v1/questions/{question}", "DELETE", "user", 403),
    ("/v1/questions/{question}/move", "POST", "admin", 200),
    ("/v1/questions/{question}/move", "POST", "user", 403),
    # attempts
    ("/v1/quizzes/{quiz}/attempts", "POST", "user", 201),
    ("/v1/quizzes/{quiz}/attempts", "POST", None, 401),
    ("/v1/quizzes/{quiz}/attempts", "GET", "admin", 200),
    ("/v1/quizzes/{quiz}/attempts", "GET", "user", 403),
    ("/v1/quizzes/{quiz}/attempts/latest", "GET", "user", 200),
    ("/v1/quizzes/{quiz}/attempts/latest", "GET", None, 401),
    ("/v1/attempts/{attempt}", "GET", "user", 200),
    ("/v1/attempts/{attempt}", "GET", "admin", 200),
    ("/v1/attempts/{attempt}", "GET", None, 401),
    # review sessions: admin only
    ("/v1/attempts/{attempt}/reviews", "POST", "admin", 201),
    ("/v1/attempts/{attempt}/reviews", "POST", "user", 403),
    ("/v1/attempts/{attempt}/reviews", "POST", None, 401),
    ("/v1/reviews/{review}", "GET", "admin", 200),
    ("/v1/reviews/{review}", "GET", "user", 403),
    ("/v1/reviews/{review}", "PATCH", "admin", 200),
    ("/v1/reviews/{review}", "PATCH", "user", 403),
    ("/v1/reviews/{review}/commit", "POST", "admin", 200),
    ("/v1/reviews/{review}/commit", "POST", "user", 403),
    ("/v1/reviews/{review}", "DELETE", "admin", 204),
    ("/v1/reviews/{review}", "DELETE", "user", 403),
    ("/v1/reviews/{review}", "DELETE", None, 401),
]

_BODIES: dict[tuple[str, str], dict] = {
    ("POST", "/v1/quizzes"): {"title": "RBAC quiz"},
    ("POST", "/v1/quizzes/{quiz}/questions"): {
        "question_text": "Capital of France?",
        "question_type": "short_answer",
        "points": 1,
        "correct_answer": "Paris",
    },
    ("PATCH", "/v1/questions/{question}"): {"points": 2},
    ("POST", "/v1/questions/{question}/move"): {"direction": "up"},
    ("POST", "/v1/quizzes/{quiz}/attempts"): {"answers": {}, "started_at": 0},
    ("PATCH", "/v1/reviews/{review}"): {"feedback": "ok"},
}


def _case_id(case: tuple) -> str:
    endpoint, method, role, expected = case
    role_label = role or "anon"
    return f"{method} {endpoint} [{role_label}] -> {expected}"


@pytest.fixture
def seeded(client: TestClient, admin_token: str, token: str) -> dict[str, str]:
    """A quiz with one question, an attempt by test-user and an open review."""
    quiz = create_quiz(client, admin_token, max_attempts=10)
    question = create_question(client, admin_token, quiz["id"])
    attempt = submit(client, token, quiz["id"], {question["id"]: "Rome"})
    r = client.post(f"/v1/attempts/{attempt['id']}/reviews", headers=auth(admin_token))
    assert r.status_code == 201, r.text
    return {
        "quiz": quiz["id"],
        "question": question["id"],
        "attempt": attempt["id"],
        "review": r.json()["id"],
    }


@pytest.mark.parametrize(
    "endpoint,method,role,expected",
    _RBAC_CASES,
    ids=[_case_id(c) for c in _RBAC_CASES],
)
def test_rbac(
    client: TestClient,
    seeded: dict[str, str],
    endpoint: str,
    method: str,
    role: str | None,
    expected: int,
) -> None:
    headers = auth(mint_token(roles=[role])) if role else {}
    body = dict(_BODIES.get((method, endpoint), {}))
    if "started_at" in body:
        body["started_at"] = int(time.time()) - 30

    resp = client.request(
        method, endpoint.format(**seeded), json=body or None, headers=headers
    )

    assert resp.status_code == expected, (
        f"{method} {endpoint} role={role}: expected {expected}, got {resp.status_code}"
    )


def test_invalid_token_rejected(client: TestClient) -> None:
    resp = client.get(f"/v1/quizzes/{uuid4()}", headers=auth("not-a-jwt"))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"
