"""Quiz and question-bank endpoint tests.

Covers:
1. Quiz creation defaults and validation
2. Answer keys visible to admins, hidden from learners
3. Question edit, delete and move through HTTP
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth, create_question, create_quiz, mc_fields


def _orders(client: TestClient, admin_token: str, quiz_id: str) -> dict[str, int]:
    r = client.get(f"/v1/quizzes/{quiz_id}/questions", headers=auth(admin_token))
    assert r.status_code == 200
    return {q["question_text"]: q["order_index"] for q in r.json()}


# ---- quizzes ----


def test_create_quiz(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token, time_limit=600)
    assert quiz["title"] == "Capitals"
    assert quiz["passing_score"] == 70
    assert quiz["max_attempts"] == 1
    assert quiz["time_limit"] == 600
    assert quiz["is_active"] is True

    r = client.get(f"/v1/quizzes/{quiz['id']}", headers=auth(admin_token))
    assert r.status_code == 200
    assert r.json() == quiz


@pytest.mark.parametrize(
    "body",
    [
        {"title": "  "},
        {"title": "t", "passing_score": 120},
        {"title": "t", "max_attempts": 0},
    ],
    ids=["blank-title", "passing-above-100", "no-attempts"],
)
def test_create_quiz_invalid(client: TestClient, admin_token: str, body: dict) -> None:
    r = client.post("/v1/quizzes", json=body, headers=auth(admin_token))
    assert r.status_code == 422


def test_get_unknown_quiz(client: TestClient, token: str) -> None:
    r = client.get(f"/v1/quizzes/{uuid4()}", headers=auth(token))
    assert r.status_code == 404
    assert r.json()["detail"] == "quiz not found"


# ---- answer keys ----


def test_admin_sees_answer_key(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    create_question(client, admin_token, quiz["id"], **mc_fields())
    create_question(client, admin_token, quiz["id"])

    r = client.get(f"/v1/quizzes/{quiz['id']}/questions", headers=auth(admin_token))
    mc, sa = r.json()
    assert [o["correct"] for o in mc["options"]] == [False, True, False]
    assert sa["correct_answer"] == "Rome"


def test_learner_does_not_see_answer_key(
    client: TestClient, admin_token: str, token: str
) -> None:
    quiz = create_quiz(client, admin_token)
    create_question(client, admin_token, quiz["id"], **mc_fields())
    create_question(client, admin_token, quiz["id"])

    r = client.get(f"/v1/quizzes/{quiz['id']}/questions", headers=auth(token))
    assert r.status_code == 200
    mc, sa = r.json()
    assert [o["text"] for o in mc["options"]] == ["A", "B", "C"]
    assert all(o["correct"] is None for o in mc["options"])
    assert sa["correct_answer"] is None


# ---- questions ----


def test_add_question_assigns_next_order(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    first = create_question(client, admin_token, quiz["id"])
    second = create_question(client, admin_token, quiz["id"], question_text="Second")
    assert (first["order_index"], second["order_index"]) == (0, 1)


def test_add_question_order_conflict(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    create_question(client, admin_token, quiz["id"], order_index=2)
    r = client.post(
        f"/v1/quizzes/{quiz['id']}/questions",
        json={
            "question_text": "Clash",
            "question_type": "short_answer",
            "correct_answer": "x",
            "order_index": 2,
        },
        headers=auth(admin_token),
    )
    assert r.status_code == 409


@pytest.mark.parametrize(
    "fields",
    [
        {"question_type": "essay"},
        {"question_type": "true_false", "correct_answer": "yes"},
        {
            "question_type": "multiple_choice",
            "options": [{"text": "A"}, {"text": "B"}],
        },
    ],
    ids=["unknown-type", "tf-bad-key", "mc-no-correct"],
)
def test_add_question_invalid(
    client: TestClient, admin_token: str, fields: dict
) -> None:
    quiz = create_quiz(client, admin_token)
    body = {"question_text": "q", "points": 1, **fields}
    r = client.post(
        f"/v1/quizzes/{quiz['id']}/questions", json=body, headers=auth(admin_token)
    )
    assert r.status_code == 422


def test_add_question_to_unknown_quiz(client: TestClient, admin_token: str) -> None:
    r = client.post(
        f"/v1/quizzes/{uuid4()}/questions",
        json={"question_text": "q", "question_type": "long_answer"},
        headers=auth(admin_token),
    )
    assert r.status_code == 404


def test_patch_question(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    q = create_question(client, admin_token, quiz["id"])

    r = client.patch(
        f"/v1/questions/{q['id']}",
        json={"points": 8, "correct_answer": "Roma"},
        headers=auth(admin_token),
    )
    assert r.status_code == 200
    assert r.json()["points"] == 8
    assert r.json()["correct_answer"] == "Roma"
    assert r.json()["question_text"] == q["question_text"]


def test_patch_question_order_conflict(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    create_question(client, admin_token, quiz["id"], question_text="a")
    b = create_question(client, admin_token, quiz["id"], question_text="b")

    r = client.patch(
        f"/v1/questions/{b['id']}", json={"order_index": 0}, headers=auth(admin_token)
    )
    assert r.status_code == 409
    assert _orders(client, admin_token, quiz["id"]) == {"a": 0, "b": 1}


@pytest.mark.parametrize(
    "field", ["order_index", "points", "question_text", "question_type"]
)
def test_patch_question_rejects_null_required_field(
    client: TestClient, admin_token: str, field: str
) -> None:
    quiz = create_quiz(client, admin_token)
    q = create_question(client, admin_token, quiz["id"], question_text="a")

    r = client.patch(
        f"/v1/questions/{q['id']}", json={field: None}, headers=auth(admin_token)
    )
    assert r.status_code == 422
    # The quiz stays listable and the question keeps its place
    assert _orders(client, admin_token, quiz["id"]) == {"a": 0}


def test_delete_question(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    q = create_question(client, admin_token, quiz["id"])

    r = client.delete(f"/v1/questions/{q['id']}", headers=auth(admin_token))
    assert r.status_code == 204
    r = client.delete(f"/v1/questions/{q['id']}", headers=auth(admin_token))
    assert r.status_code == 404


def test_move_question(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    for name in ("a", "b", "c"):
        create_question(client, admin_token, quiz["id"], question_text=name)
    b_id = next(
        q["id"]
        for q in client.get(
            f"/v1/quizzes/{quiz['id']}/questions", headers=auth(admin_token)
        ).json()
        if q["question_text"] == "b"
    )

    r = client.post(
        f"/v1/questions/{b_id}/move", json={"direction": "up"}, headers=auth(admin_token)
    )
    assert r.status_code == 200
    assert r.json()["moved"] is True
    assert r.json()["question"]["order_index"] == 0
    assert _orders(client, admin_token, quiz["id"]) == {"b": 0, "a": 1, "c": 2}


def test_move_at_boundary_is_noop(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    first = create_question(client, admin_token, quiz["id"], question_text="a")
    create_question(client, admin_token, quiz["id"], question_text="b")

    r = client.post(
        f"/v1/questions/{first['id']}/move",
        json={"direction": "up"},
        headers=auth(admin_token),
    )
    assert r.status_code == 200
    assert r.json()["moved"] is False
    assert _orders(client, admin_token, quiz["id"]) == {"a": 0, "b": 1}


def test_move_rejects_unknown_direction(client: TestClient, admin_token: str) -> None:
    quiz = create_quiz(client, admin_token)
    q = create_question(client, admin_token, quiz["id"])
    r = client.post(
        f"/v1/questions/{q['id']}/move",
        json={"direction": "left"},
        headers=auth(admin_token),
    )
    assert r.status_code == 422
