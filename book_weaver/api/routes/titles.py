"""
Title suggestion and author bio endpoints.

Both are advisory: nothing here touches the running generation.
"""

import logging

from fastapi import APIRouter, Depends
from starlette.requests import Request

from book_weaver.api.deps import get_workspace, get_workspace_service
from book_weaver.api.rate_limit import GENERATION_RATE_LIMIT, limiter
from book_weaver.api.schemas import (
    AcceptTitleRequest,
    AcceptTitleResponse,
    BioResponse,
    ErrorResponse,
    TitleSuggestionsResponse,
)
from book_weaver.services.workspace_service import WorkspaceService
from book_weaver.services.workspace_store import Workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces", tags=["Titles & Bio"])


@router.post(
    "/{workspace_id}/titles/suggest",
    response_model=TitleSuggestionsResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def suggest_titles(
    request: Request,
    workspace: Workspace = Depends(get_workspace),
    service: WorkspaceService = Depends(get_workspace_service),
) -> TitleSuggestionsResponse:
    """
    Suggest three alternative titles for the form's current title.

    The working title does not change until one is accepted.
    """
    suggestions = await service.suggest_titles(workspace)
    return TitleSuggestionsResponse(suggestions=suggestions)


@router.post(
    "/{workspace_id}/titles/accept",
    response_model=AcceptTitleResponse,
    responses={400: {"model": ErrorResponse}},
)
async def accept_title(
    body: AcceptTitleRequest,
    workspace: Workspace = Depends(get_workspace),
    service: WorkspaceService = Depends(get_workspace_service),
) -> AcceptTitleResponse:
    """Use one of the suggestions as the working title."""
    return AcceptTitleResponse(title=service.accept_title(workspace, body.index))


@router.post(
    "/{workspace_id}/bio",
    response_model=BioResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_bio(
    request: Request,
    workspace: Workspace = Depends(get_workspace),
    service: WorkspaceService = Depends(get_workspace_service),
) -> BioResponse:
    """Write an author bio into the form (and into the finished book, if any)."""
    bio = await service.generate_bio(workspace)
    return BioResponse(author_bio=bio)
