"""
In-memory workspace store.

A workspace is one user's editable form plus the single current run, cover,
title suggestions and publishing details. Nothing outlives the process.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from book_weaver.api.schemas import BookForm
from book_weaver.core.exceptions import WorkspaceNotFoundError
from book_weaver.core.models import CoverImage, GenerationConfig, PublishingDetails
from book_weaver.core.run_state import GenerationRun

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    id: str
    form: BookForm = field(default_factory=BookForm)
    run: GenerationRun = field(default_factory=GenerationRun)
    config: Optional[GenerationConfig] = None  # snapshot of the last started run
    cover: Optional[CoverImage] = None
    title_suggestions: List[str] = field(default_factory=list)
    publishing_details: Optional[PublishingDetails] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class WorkspaceStore:
    """Keeps workspaces by id for the lifetime of the process."""

    def __init__(self):
        self._workspaces: Dict[str, Workspace] = {}

    def create(self, form: Optional[BookForm] = None) -> Workspace:
        workspace = Workspace(id=uuid.uuid4().hex, form=form or BookForm())
        self._workspaces[workspace.id] = workspace
        logger.info(f"[{workspace.id}] Workspace created")
        return workspace

    def get(self, workspace_id: str) -> Workspace:
        """
        Raises:
            WorkspaceNotFoundError: if no workspace has this id
        """
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(f"Workspace {workspace_id} not found")
        return workspace

    def delete(self, workspace_id: str) -> None:
        self.get(workspace_id)
        del self._workspaces[workspace_id]
        logger.info(f"[{workspace_id}] Workspace deleted")

    def __len__(self) -> int:
        return len(self._workspaces)


# Global singleton, replaced in tests through the FastAPI dependency
_store_instance: Optional[WorkspaceStore] = None


def get_store() -> WorkspaceStore:
    """Get or create the process-wide WorkspaceStore."""
    global _store_instance
    if _store_instance is None:
        _store_instance = WorkspaceStore()
    return _store_instance
