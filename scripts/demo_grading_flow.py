"""Demo: walk submit -> auto-score -> review -> commit using FastAPI TestClient.

Run with (needs the test extra for httpx):
    python scripts/demo_grading_flow.py
"""

from __future__ import annotations

import time

from fastapi.testclient import TestClient

from app.main import app
from app.services import token_service


def _auth(sub: str, roles: list[str]) -> dict[str, str]:
    token = token_service.create_access_token(sub=sub, roles=roles)
    return {"Authorization": f"Bearer {token}"}


def main() -> None:
    client = TestClient(app)
    admin = _auth("demo-admin", ["admin"])
    learner = _auth("demo-learner", ["user"])

    # ── Step 1: quiz with two questions ─────────────────────────────
    r = client.post(
        "/v1/quizzes", json={"title": "Capitals", "passing_score": 70}, headers=admin
    )
    quiz_id = r.json()["id"]
    print(f"1. POST /v1/quizzes                     → {r.status_code}  quiz={quiz_id}")

    q1 = client.post(
        f"/v1/quizzes/{quiz_id}/questions",
        json={
            "question_text": "Pick B",
            "question_type": "multiple_choice",
            "points": 5,
            "options": [
                {"text": "A"},
                {"text": "B", "correct": True},
                {"text": "C"},
            ],
        },
        headers=admin,
    ).json()
    q2 = client.post(
        f"/v1/quizzes/{quiz_id}/questions",
        json={
            "question_text": "Capital of Italy?",
            "question_type": "short_answer",
            "points": 5,
            "correct_answer": "Rome",
        },
        headers=admin,
    ).json()
    print(f"2. POST questions                       → order {q1['order_index']}, {q2['order_index']}")

    # ── Step 2: learner submits ─────────────────────────────────────
    r = client.post(
        f"/v1/quizzes/{quiz_id}/attempts",
        json={
            "answers": {q1["id"]: "B", q2["id"]: "rome"},
            "started_at": int(time.time()) - 90,
        },
        headers=learner,
    )
    attempt = r.json()
    print(
        f"3. POST attempts                        → {r.status_code}  "
        f"score={attempt['score']} pct={attempt['percentage']} "
        f"passed={attempt['passed']} status={attempt['status']}"
    )

    # ── Step 3: admin reviews and overrides q2 ──────────────────────
    r = client.post(f"/v1/attempts/{attempt['id']}/reviews", headers=admin)
    session_id = r.json()["id"]
    print(f"4. POST reviews                         → {r.status_code}  session={session_id}")

    r = client.patch(
        f"/v1/reviews/{session_id}",
        json={
            "scores": {q2["id"]: 0},
            "question_feedback": {q2["id"]: "Ambiguous spelling"},
        },
        headers=admin,
    )
    print(f"5. PATCH review                         → {r.status_code}")

    r = client.post(f"/v1/reviews/{session_id}/commit", headers=admin)
    graded = r.json()
    print(
        f"6. POST commit                          → {r.status_code}  "
        f"score={graded['score']} pct={graded['percentage']} "
        f"passed={graded['passed']} status={graded['status']}"
    )

    # ── Step 4: learner reads the result ────────────────────────────
    r = client.get(f"/v1/attempts/{attempt['id']}", headers=learner)
    rows = r.json()["questions"]
    for row in rows:
        print(
            f"   {row['question_type']:<16} awarded={row['awarded']}/{row['points']} "
            f"overridden={row['overridden']} feedback={row['feedback']!r}"
        )


if __name__ == "__main__":
    main()
