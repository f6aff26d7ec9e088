"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends

from book_weaver.api.deps import get_workspace_store
from book_weaver.api.schemas import HealthResponse
from book_weaver.core.config import ImageConfig, LLMConfig
from book_weaver.services.workspace_store import WorkspaceStore

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: WorkspaceStore = Depends(get_workspace_store),
) -> HealthResponse:
    """Report whether OpenRouter is configured, which models are used and how many workspaces are open."""
    llm_config = LLMConfig()
    return HealthResponse(
        openrouter_configured=llm_config.validate(),
        text_model=llm_config.model,
        outline_model=llm_config.outline_model,
        image_model=ImageConfig().model,
        workspaces=len(store),
    )
