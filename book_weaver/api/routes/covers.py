"""
Cover and publishing-details endpoints.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from starlette.requests import Request

from book_weaver.api.deps import get_workspace, get_workspace_service
from book_weaver.api.rate_limit import GENERATION_RATE_LIMIT, limiter
from book_weaver.api.schemas import (
    CoverRequest,
    CoverResponse,
    ErrorResponse,
    PublishingDetailsResponse,
)
from book_weaver.services.workspace_service import WorkspaceService
from book_weaver.services.workspace_store import Workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces", tags=["Covers"])


@router.post(
    "/{workspace_id}/cover",
    response_model=CoverResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_cover(
    request: Request,
    body: CoverRequest | None = None,
    workspace: Workspace = Depends(get_workspace),
    service: WorkspaceService = Depends(get_workspace_service),
) -> CoverResponse:
    """
    Generate a cover for the finished book.

    Pass `feedback` to ask for changes; the new image replaces the old one.
    """
    feedback = body.feedback if body else None
    cover = await service.generate_cover(workspace, feedback)
    return CoverResponse(
        workspace_id=workspace.id,
        prompt=cover.prompt,
        feedback=cover.feedback,
        mime_type=cover.mime_type,
        size_bytes=len(cover.data),
        created_at=cover.created_at,
        download_url=f"/api/v1/workspaces/{workspace.id}/cover",
    )


@router.get(
    "/{workspace_id}/cover",
    responses={
        200: {"content": {"image/jpeg": {}}},
        404: {"model": ErrorResponse},
    },
)
async def download_cover(
    workspace: Workspace = Depends(get_workspace),
    service: WorkspaceService = Depends(get_workspace_service),
) -> Response:
    """Download the current cover as JPEG."""
    filename, data = service.cover_download(workspace)
    return Response(
        content=data,
        media_type="image/jpeg",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/{workspace_id}/publishing-details",
    response_model=PublishingDetailsResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_publishing_details(
    request: Request,
    workspace: Workspace = Depends(get_workspace),
    service: WorkspaceService = Depends(get_workspace_service),
) -> PublishingDetailsResponse:
    """Store description, seven keywords and a category for the finished book."""
    details = await service.publishing_details(workspace)
    return PublishingDetailsResponse(
        description=details.description,
        keywords=details.keywords,
        category=details.category,
    )
