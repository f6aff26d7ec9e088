"""
Workspace endpoints: lifecycle, form and book generation.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from starlette.requests import Request

from book_weaver.api.deps import get_workspace, get_workspace_service, get_workspace_store
from book_weaver.api.rate_limit import GENERATION_RATE_LIMIT, limiter
from book_weaver.api.schemas import (
    BookForm,
    BookResponse,
    BookSummary,
    ChapterResponse,
    ErrorResponse,
    GenerateResponse,
    PublishingDetailsResponse,
    WorkspaceCreateResponse,
    WorkspaceStatus,
)
from book_weaver.core.models import Chapter
from book_weaver.services.workspace_service import WorkspaceService
from book_weaver.services.workspace_store import Workspace, WorkspaceStore
from book_weaver.tasks.book_tasks import generate_book_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces", tags=["Workspaces"])


def _workspace_status(workspace: Workspace) -> WorkspaceStatus:
    run = workspace.run
    book = run.book
    details = workspace.publishing_details
    return WorkspaceStatus(
        workspace_id=workspace.id,
        state=run.state.value,
        is_loading=run.is_busy,
        progress=run.progress,
        error=run.error,
        form=workspace.form,
        book=BookSummary(
            title=book.title,
            subtitle=book.subtitle,
            author_name=book.author_name,
            chapter_count=len(book.chapters),
            chapter_titles=[c.title for c in book.chapters],
        ) if book else None,
        title_suggestions=workspace.title_suggestions,
        has_cover=workspace.cover is not None,
        publishing_details=PublishingDetailsResponse(
            description=details.description,
            keywords=details.keywords,
            category=details.category,
        ) if details else None,
        created_at=workspace.created_at,
    )


def _chapter(chapter: Chapter) -> ChapterResponse:
    return ChapterResponse(title=chapter.title, content=chapter.content)


@router.post("", response_model=WorkspaceCreateResponse, status_code=201)
async def create_workspace(
    form: BookForm | None = None,
    store: WorkspaceStore = Depends(get_workspace_store),
) -> WorkspaceCreateResponse:
    """Create a workspace, optionally with an initial form."""
    workspace = store.create(form)
    return WorkspaceCreateResponse(
        workspace_id=workspace.id,
        message="Workspace created. Fill the form and POST /workspaces/{id}/generate.",
    )


@router.get(
    "/{workspace_id}",
    response_model=WorkspaceStatus,
    responses={404: {"model": ErrorResponse}},
)
async def get_workspace_status(
    workspace: Workspace = Depends(get_workspace),
) -> WorkspaceStatus:
    """
    Get the form, run state, progress message and current error.

    Poll this while `is_loading` is true.
    """
    return _workspace_status(workspace)


@router.delete("/{workspace_id}", responses={404: {"model": ErrorResponse}})
async def delete_workspace(
    workspace_id: str,
    store: WorkspaceStore = Depends(get_workspace_store),
) -> dict:
    """Forget a workspace and everything generated in it."""
    store.delete(workspace_id)
    return {"message": f"Workspace {workspace_id} deleted"}


@router.put(
    "/{workspace_id}/form",
    response_model=WorkspaceStatus,
    responses={404: {"model": ErrorResponse}},
)
async def update_form(
    form: BookForm,
    workspace: Workspace = Depends(get_workspace),
) -> WorkspaceStatus:
    """Replace the editable form. A running generation keeps its own snapshot."""
    workspace.form = form
    return _workspace_status(workspace)


@router.post(
    "/{workspace_id}/generate",
    response_model=GenerateResponse,
    status_code=202,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_book(
    request: Request,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
    service: WorkspaceService = Depends(get_workspace_service),
) -> GenerateResponse:
    """
    Generate a book from the workspace form.

    The previous book and cover are discarded. Use `GET /workspaces/{id}`
    to follow progress and `GET /workspaces/{id}/export` to download.
    """
    config = service.start_generation(workspace)
    background_tasks.add_task(generate_book_task, service, workspace, config)

    return GenerateResponse(
        workspace_id=workspace.id,
        state=workspace.run.state.value,
        message="Book generation started. Use /workspaces/{id} to track progress.",
    )


@router.get(
    "/{workspace_id}/book",
    response_model=BookResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_book(
    workspace: Workspace = Depends(get_workspace),
) -> BookResponse:
    """Get the full assembled book."""
    book = workspace.run.book
    if book is None:
        raise HTTPException(status_code=404, detail="Book is not ready yet")

    return BookResponse(
        title=book.title,
        subtitle=book.subtitle,
        author_name=book.author_name,
        copyright=book.copyright,
        dedication=book.dedication,
        acknowledgements=book.acknowledgements,
        author_bio=book.author_bio,
        synopsis=book.synopsis,
        introduction=_chapter(book.introduction),
        chapters=[_chapter(c) for c in book.chapters],
        conclusion=_chapter(book.conclusion),
        language=book.language,
    )
