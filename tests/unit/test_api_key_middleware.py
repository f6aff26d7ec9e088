"""Tests for API key validation middleware."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from book_weaver.api.middleware import ApiKeyMiddleware


def _make_app(secret: str | None) -> FastAPI:
    app = FastAPI()

    @app.get("/api/v1/workspaces/{workspace_id}/export")
    async def export(workspace_id: str):
        return {"workspace": workspace_id}

    @app.post("/api/v1/workspaces")
    async def create():
        return {"ok": True}

    @app.get("/api/v1/health")
    async def health():
        return {"status": "ok"}

    app.add_middleware(
        ApiKeyMiddleware,
        api_key=secret,
        exempt_paths={"/api/v1/health", "/"},
        exempt_prefixes=("/docs",),
    )
    return app


@pytest.fixture
def client():
    return TestClient(_make_app("my-secret"))


class TestApiKeyMiddleware:
    def test_rejects_missing_key(self, client):
        response = client.post("/api/v1/workspaces")
        assert response.status_code == 403
        assert response.json()["detail"] == "Invalid or missing API key"

    def test_rejects_wrong_key(self, client):
        response = client.post("/api/v1/workspaces", headers={"X-Api-Key": "wrong"})
        assert response.status_code == 403

    def test_accepts_header_key(self, client):
        response = client.post("/api/v1/workspaces", headers={"X-Api-Key": "my-secret"})
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_query_key_for_downloads(self, client):
        response = client.get("/api/v1/workspaces/abc/export", params={"api_key": "my-secret"})
        assert response.status_code == 200
        assert response.json() == {"workspace": "abc"}

    def test_query_key_ignored_for_post(self, client):
        response = client.post("/api/v1/workspaces", params={"api_key": "my-secret"})
        assert response.status_code == 403

    def test_exempt_paths_skip_validation(self, client):
        assert client.get("/api/v1/health").status_code == 200

    def test_exempt_prefix(self, client):
        assert client.get("/docs").status_code != 403

    def test_disabled_when_no_secret(self):
        client = TestClient(_make_app(None))
        assert client.post("/api/v1/workspaces").status_code == 200

    def test_options_requests_pass_through(self, client):
        response = client.options("/api/v1/workspaces")
        assert response.status_code != 403
