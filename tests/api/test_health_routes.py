"""Tests for health check endpoint."""

from book_weaver.core.config import DEFAULT_OUTLINE_MODEL, DEFAULT_TEXT_MODEL


class TestHealthEndpoint:
    async def test_health_check(self, async_client):
        response = await async_client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["openrouter_configured"] is False
        assert data["text_model"] == DEFAULT_TEXT_MODEL
        assert data["outline_model"] == DEFAULT_OUTLINE_MODEL
        assert data["image_model"]
        assert data["workspaces"] == 0

    async def test_counts_workspaces(self, async_client, workspace_id):
        response = await async_client.get("/api/v1/health")
        assert response.json()["workspaces"] == 1

    async def test_health_reports_key(self, async_client, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
        response = await async_client.get("/api/v1/health")
        assert response.json()["openrouter_configured"] is True


class TestRootEndpoint:
    async def test_root(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "docs" in data
        assert "message" in data
