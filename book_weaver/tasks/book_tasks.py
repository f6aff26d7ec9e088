"""
Background tasks for book generation.

Kept out of the route handlers so they stay thin.
"""

import logging

from book_weaver.core.exceptions import BookWeaverError
from book_weaver.core.models import GenerationConfig
from book_weaver.services.workspace_service import WorkspaceService
from book_weaver.services.workspace_store import Workspace


logger = logging.getLogger(__name__)


async def generate_book_task(
    service: WorkspaceService, workspace: Workspace, config: GenerationConfig,
) -> None:
    """
    Background task to generate the book of a workspace.

    The run was already started by the route; this drives it to READY or
    FAILED and never raises.
    """
    job_id = workspace.id
    logger.info(f"[{job_id}] Starting book generation task: '{config.title}'")

    try:
        book = await service.run_generation(workspace, config)
        logger.info(f"[{job_id}] Book generation completed: {len(book.chapters)} chapters")
    except BookWeaverError as e:
        # Already recorded on the run by the pipeline
        logger.warning(f"[{job_id}] Book generation failed: {e.message}")
    except Exception as e:
        logger.error(f"[{job_id}] Book generation crashed: {e}", exc_info=True)
        if workspace.run.is_busy:
            workspace.run.fail(f"An error occurred: {e}")
