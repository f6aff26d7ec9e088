"""
Configuration endpoints.

Public endpoints that expose the choices offered by the form.
"""

from fastapi import APIRouter

from book_weaver.api.schemas import ConfigOptionsResponse
from book_weaver.core.config import DEFAULT_FONT_FAMILY, FONT_SIZE_CHOICES, LINE_SPACING_CHOICES
from book_weaver.core.models import SUPPORTED_LANGUAGES, ExportFormat, Genre, WordCountBand

router = APIRouter(prefix="/config", tags=["Configuration"])


@router.get("/options", response_model=ConfigOptionsResponse)
async def get_config_options() -> ConfigOptionsResponse:
    """
    Get the values accepted by the book form and the export dialog.

    The frontend uses these to fill its dropdowns so both sides agree on
    genres, word-count bands, languages, font sizes and line spacings.
    """
    return ConfigOptionsResponse(
        genres=[g.value for g in Genre],
        word_counts=[w.value for w in WordCountBand],
        languages=list(SUPPORTED_LANGUAGES),
        font_sizes=list(FONT_SIZE_CHOICES),
        line_spacings=list(LINE_SPACING_CHOICES),
        export_formats=[f.value for f in ExportFormat],
        default_font_family=DEFAULT_FONT_FAMILY,
    )
