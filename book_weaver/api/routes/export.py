"""
Book download endpoint.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from book_weaver.api.deps import get_workspace, get_workspace_service
from book_weaver.api.schemas import ErrorResponse
from book_weaver.core.config import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINE_SPACING,
    LINE_SPACING_CHOICES,
)
from book_weaver.core.exceptions import ValidationError
from book_weaver.core.models import ExportFormat, ExportOptions
from book_weaver.services.workspace_service import WorkspaceService
from book_weaver.services.workspace_store import Workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces", tags=["Export"])


@router.get(
    "/{workspace_id}/export",
    responses={
        200: {
            "content": {
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document": {},
                "application/pdf": {},
            }
        },
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def export_book(
    format: Literal["docx", "pdf"] = Query("docx", description="File format"),
    font_size: int = Query(DEFAULT_FONT_SIZE, ge=10, le=14, description="Body font size in points"),
    line_spacing: float = Query(DEFAULT_LINE_SPACING, description="1.15 or 1.5"),
    font_family: str = Query(DEFAULT_FONT_FAMILY, max_length=100),
    include_toc: bool = Query(False, description="Add a table of contents page"),
    workspace: Workspace = Depends(get_workspace),
    service: WorkspaceService = Depends(get_workspace_service),
) -> Response:
    """
    Download the finished book.

    Font size and line spacing apply to every body paragraph.
    """
    if line_spacing not in LINE_SPACING_CHOICES:
        raise ValidationError(
            f"line_spacing must be one of {', '.join(str(s) for s in LINE_SPACING_CHOICES)}"
        )

    options = ExportOptions(
        format=ExportFormat(format),
        font_family=font_family,
        font_size=font_size,
        line_spacing=line_spacing,
        include_toc=include_toc,
    )
    filename, data = await service.export(workspace, options)
    return Response(
        content=data,
        media_type=options.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
