# tests/test_server.py

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from bizboard.api.server import GENERATE_TASKS_PATH, create_app


@pytest.fixture()
def client(state) -> TestClient:
    return TestClient(create_app(state))


def test_missing_business_id_is_400(client: TestClient) -> None:
    for body in ({}, {"businessId": ""}, {"userId": "usr_1"}):
        resp = client.post(GENERATE_TASKS_PATH, json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Business ID is required"}


def test_malformed_body_is_400(client: TestClient) -> None:
    resp = client.post(GENERATE_TASKS_PATH, content="not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400


def test_unknown_business_is_404(client: TestClient) -> None:
    resp = client.post(GENERATE_TASKS_PATH, json={"businessId": "biz_404", "userId": "usr_1"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Business not found"}


def test_llm_failure_is_500_without_canned_tasks(client: TestClient, llm, mock) -> None:
    llm.error = RuntimeError("All LLM models failed.")
    resp = client.post(GENERATE_TASKS_PATH, json={"businessId": "biz_1"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "All LLM models failed."}
    assert not mock.has_task_title("biz_1", "Create seasonal menu specials")


def test_success_returns_created_rows(client: TestClient, llm) -> None:
    llm.next_text = "```json\n" + json.dumps(
        [
            {"title": "Launch a loyalty program", "priority": "high", "due_date": "2030-01-15"},
            {"title": "Renew business license"},  # already exists
            {"title": "Host a latte art night", "tags": ["events"]},
        ]
    ) + "\n```"

    resp = client.post(GENERATE_TASKS_PATH, json={"businessId": "biz_1", "userId": "usr_1"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Generated 2 tasks"
    rows = body["tasks"]
    assert [r["title"] for r in rows] == ["Launch a loyalty program", "Host a latte art night"]
    assert all(r["status"] == "pending" and r["business_id"] == "biz_1" for r in rows)
    assert rows[0]["priority"] == "high"
    assert rows[0]["due_date"].startswith("2030-01-15")
    assert rows[1]["tags"] == ["events"]


def test_cors_preflight(client: TestClient) -> None:
    resp = client.options(
        GENERATE_TASKS_PATH,
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, x-client-info, apikey, content-type",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
    allowed = resp.headers["access-control-allow-headers"].lower()
    for h in ("authorization", "x-client-info", "apikey", "content-type"):
        assert h in allowed


def test_unconfigured_llm_gets_a_readable_500(client: TestClient, llm) -> None:
    llm.error = RuntimeError("LLM API key is not set. Set BIZBOARD_OPENROUTER_API_KEY in your .env.")
    resp = client.post(GENERATE_TASKS_PATH, json={"businessId": "biz_2"})
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("LLM is not configured (missing API key)")
