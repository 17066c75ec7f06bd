"""Tests for the task CRUD API routes."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient


def _create(client: TestClient, **payload) -> dict:
    payload.setdefault("title", "Buy milk")
    resp = client.post("/api/todos", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestListAndFetch:
    def test_empty_list(self, client: TestClient) -> None:
        resp = client.get("/api/todos")

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "data": []}

    def test_lists_newest_first(self, client: TestClient) -> None:
        first = _create(client, title="first")
        second = _create(client, title="second")

        data = client.get("/api/todos").json()["data"]

        assert [t["id"] for t in data] == [second["id"], first["id"]]

    def test_fetch_by_id(self, client: TestClient) -> None:
        created = _create(client, title="Write report", description="Q3 numbers")

        resp = client.get(f"/api/todos/{created['id']}")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["title"] == "Write report"
        assert data["description"] == "Q3 numbers"
        assert data["is_done"] is False

    def test_fetch_missing_returns_404(self, client: TestClient) -> None:
        resp = client.get("/api/todos/999")

        assert resp.status_code == 404
        error = resp.json()["error"]
        assert error["code"] == "task_not_found"
        assert "request_id" in error

    @pytest.mark.parametrize("bad_id", ["0", "-3", "abc"])
    def test_invalid_id_returns_422(self, client: TestClient, bad_id: str) -> None:
        resp = client.get(f"/api/todos/{bad_id}")

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "request_validation_error"


class TestCreate:
    def test_create_returns_task_with_timestamps(self, client: TestClient) -> None:
        resp = client.post("/api/todos", json={"title": "  Call mom  "})

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Task created"
        assert body["data"]["id"] > 0
        assert body["data"]["title"] == "Call mom"
        assert body["data"]["description"] is None
        assert body["data"]["created_at"]
        assert body["data"]["updated_at"]

    def test_create_done_task(self, client: TestClient) -> None:
        assert _create(client, is_done=True)["is_done"] is True

    @pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}, {"title": "x" * 256}])
    def test_create_rejects_bad_title(self, client: TestClient, payload: dict) -> None:
        resp = client.post("/api/todos", json=payload)

        assert resp.status_code == 422


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, client: TestClient) -> None:
        created = _create(client, title="Old", description="keep me")

        resp = client.put(f"/api/todos/{created['id']}", json={"title": "New"})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["title"] == "New"
        assert data["description"] == "keep me"
        assert resp.json()["message"] == "Task updated"

    def test_explicit_null_clears_description(self, client: TestClient) -> None:
        created = _create(client, description="temporary")

        resp = client.put(f"/api/todos/{created['id']}", json={"description": None})

        assert resp.status_code == 200
        assert resp.json()["data"]["description"] is None

    def test_update_is_done(self, client: TestClient) -> None:
        created = _create(client)

        resp = client.put(f"/api/todos/{created['id']}", json={"is_done": True})

        assert resp.json()["data"]["is_done"] is True

    def test_empty_update_returns_400(self, client: TestClient) -> None:
        created = _create(client)

        resp = client.put(f"/api/todos/{created['id']}", json={})

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "no_fields_to_update"

    def test_null_title_returns_400(self, client: TestClient) -> None:
        created = _create(client)

        resp = client.put(f"/api/todos/{created['id']}", json={"title": None})

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "title_required"

    def test_update_missing_returns_404(self, client: TestClient) -> None:
        resp = client.put("/api/todos/4242", json={"title": "ghost"})

        assert resp.status_code == 404


class TestDeleteAndToggle:
    def test_delete(self, client: TestClient) -> None:
        created = _create(client)

        resp = client.delete(f"/api/todos/{created['id']}")

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Task deleted"}
        assert client.get(f"/api/todos/{created['id']}").status_code == 404

    def test_delete_missing_returns_404(self, client: TestClient) -> None:
        assert client.delete("/api/todos/31337").status_code == 404

    def test_toggle_flips_back_and_forth(self, client: TestClient) -> None:
        created = _create(client)

        first = client.patch(f"/api/todos/{created['id']}/toggle")
        second = client.patch(f"/api/todos/{created['id']}/toggle")

        assert first.status_code == 200
        assert first.json()["data"]["is_done"] is True
        assert second.json()["data"]["is_done"] is False

    def test_toggle_missing_returns_404(self, client: TestClient) -> None:
        assert client.patch("/api/todos/77/toggle").status_code == 404


def test_root_banner(client: TestClient) -> None:
    resp = client.get("/")

    assert resp.status_code == 200
    assert "message" in resp.json()


def test_openapi_documents_rate_limit_response(make_client) -> None:
    client = make_client()

    schema = client.get("/openapi.json").json()

    assert "RateLimitExceeded" in schema["components"]["responses"]
    list_op = schema["paths"]["/api/todos"]["get"]
    assert list_op["responses"]["429"]["$ref"].endswith("/RateLimitExceeded")
    assert "429" not in schema["paths"]["/health"]["get"]["responses"]
