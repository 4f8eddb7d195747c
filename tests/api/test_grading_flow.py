"""End-to-end grading flow through the HTTP API.

1. Admin builds a quiz: multiple choice (5 pts) + short answer (5 pts)
2. Learner submits and gets an auto score of 10/10
3. Admin overrides the short answer to 0 with feedback and commits
4. Learner reads the graded result: 5/10, 50%, failed
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth, create_question, create_quiz, mc_fields, submit


def test_override_flips_pass_to_fail(
    client: TestClient, admin_token: str, token: str
) -> None:
    quiz = create_quiz(client, admin_token, passing_score=70)
    q1 = create_question(client, admin_token, quiz["id"], **mc_fields())
    q2 = create_question(client, admin_token, quiz["id"])

    attempt = submit(client, token, quiz["id"], {q1["id"]: "B", q2["id"]: "rome"})
    assert (attempt["score"], attempt["percentage"], attempt["passed"]) == (10, 100, True)
    assert attempt["is_graded"] is False

    session = client.post(
        f"/v1/attempts/{attempt['id']}/reviews", headers=auth(admin_token)
    ).json()
    r = client.patch(
        f"/v1/reviews/{session['id']}",
        json={
            "scores": {q2["id"]: 0},
            "question_feedback": {q2["id"]: "Ambiguous spelling"},
        },
        headers=auth(admin_token),
    )
    assert r.status_code == 200
    r = client.post(f"/v1/reviews/{session['id']}/commit", headers=auth(admin_token))
    assert r.status_code == 200

    r = client.get(f"/v1/attempts/{attempt['id']}", headers=auth(token))
    assert r.status_code == 200
    result = r.json()
    graded = result["attempt"]
    assert (graded["score"], graded["percentage"], graded["passed"]) == (5, 50, False)
    assert graded["is_graded"] is True
    assert graded["status"] == "graded"

    mc_row, sa_row = result["questions"]
    assert (mc_row["awarded"], mc_row["overridden"]) == (5, False)
    assert (sa_row["auto_score"], sa_row["awarded"], sa_row["overridden"]) == (5, 0, True)
    assert sa_row["feedback"] == "Ambiguous spelling"


def test_regrade_keeps_previous_overrides(
    client: TestClient, admin_token: str, token: str
) -> None:
    quiz = create_quiz(client, admin_token)
    q1 = create_question(client, admin_token, quiz["id"], **mc_fields())
    q2 = create_question(
        client, admin_token, quiz["id"], question_type="long_answer", correct_answer=None
    )
    attempt = submit(client, token, quiz["id"], {q1["id"]: "B", q2["id"]: "An essay"})
    assert attempt["score"] == 5

    def _review(scores: dict[str, int]) -> dict:
        session = client.post(
            f"/v1/attempts/{attempt['id']}/reviews", headers=auth(admin_token)
        ).json()
        client.patch(
            f"/v1/reviews/{session['id']}",
            json={"scores": scores},
            headers=auth(admin_token),
        )
        r = client.post(
            f"/v1/reviews/{session['id']}/commit", headers=auth(admin_token)
        )
        assert r.status_code == 200
        return r.json()

    first = _review({q2["id"]: 4})
    assert (first["score"], first["percentage"], first["passed"]) == (9, 90, True)

    second = _review({q1["id"]: 1})
    assert second["question_scores"] == {q1["id"]: 1, q2["id"]: 4}
    assert (second["score"], second["percentage"], second["passed"]) == (5, 50, False)
