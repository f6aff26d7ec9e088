"""
FastAPI dependencies: workspace store and the AI-backed service.
"""

import logging
from functools import lru_cache

from fastapi import Depends

from book_weaver.core.image_generator import CoverGenerator
from book_weaver.core.llm_connector import OpenRouterClient
from book_weaver.services.workspace_service import WorkspaceService
from book_weaver.services.workspace_store import Workspace, WorkspaceStore, get_store

logger = logging.getLogger(__name__)


def get_workspace_store() -> WorkspaceStore:
    """Process-wide in-memory store. Overridden in tests."""
    return get_store()


@lru_cache(maxsize=1)
def _default_service() -> WorkspaceService:
    return WorkspaceService(OpenRouterClient(), CoverGenerator())


def get_workspace_service() -> WorkspaceService:
    """Service wired to OpenRouter. Overridden in tests with fakes."""
    return _default_service()


def get_workspace(
    workspace_id: str,
    store: WorkspaceStore = Depends(get_workspace_store),
) -> Workspace:
    """Resolve the path's workspace; 404 via WorkspaceNotFoundError."""
    return store.get(workspace_id)
