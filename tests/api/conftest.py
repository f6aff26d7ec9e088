"""API-specific test fixtures."""

import pytest

from httpx import AsyncClient, ASGITransport

from book_weaver.api.app import app
from book_weaver.api.deps import get_workspace_service, get_workspace_store
from book_weaver.api.rate_limit import limiter
from book_weaver.services.workspace_service import WorkspaceService
from book_weaver.services.workspace_store import WorkspaceStore


@pytest.fixture
def store():
    return WorkspaceStore()


@pytest.fixture
async def async_client(store, fake_writer, fake_cover_artist):
    """Async test client with a fresh store and fake AI services."""
    service = WorkspaceService(fake_writer, fake_cover_artist)
    app.dependency_overrides[get_workspace_store] = lambda: store
    app.dependency_overrides[get_workspace_service] = lambda: service
    limiter.enabled = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    limiter.enabled = True
    app.dependency_overrides.clear()


_VALID_FORM = {
    "title": "The Quiet Garden",
    "author_name": "Jane Doe",
    "category": "Self-Help",
    "genre": "Non-Fiction",
    "word_count": "10,000-25,000 words",
    "tone": "Warm",
    "target_audience": "Busy professionals",
    "language": "English",
    "dedication": "For my mother.",
}


@pytest.fixture
async def workspace_id(async_client):
    """A workspace with a valid form and no book yet."""
    response = await async_client.post("/api/v1/workspaces", json=_VALID_FORM)
    return response.json()["workspace_id"]


@pytest.fixture
async def ready_workspace_id(async_client, workspace_id):
    """A workspace whose book has been generated."""
    response = await async_client.post(f"/api/v1/workspaces/{workspace_id}/generate")
    assert response.status_code == 202
    return workspace_id


@pytest.fixture
def valid_form():
    return dict(_VALID_FORM)
