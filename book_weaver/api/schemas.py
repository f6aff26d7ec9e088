"""
Pydantic schemas for API request/response models.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from book_weaver.core.exceptions import ValidationError
from book_weaver.core.models import (
    SUPPORTED_LANGUAGES,
    GenerationConfig,
    Genre,
    WordCountBand,
)


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# =============================================================================
# FORM
# =============================================================================


class BookForm(BaseModel):
    """Editable configuration of a workspace. Snapshotted when a run starts."""

    title: str = Field("", max_length=300, description="Working title of the book")
    subtitle: Optional[str] = Field(None, max_length=300, description="Optional subtitle")
    author_name: str = Field("", max_length=200, description="Author name for the title page")
    category: str = Field("", max_length=200, description="Store category, e.g. 'Self-Help'")
    genre: Genre = Field(Genre.NON_FICTION, description="Fiction or Non-Fiction")
    word_count: WordCountBand = Field(WordCountBand.MEDIUM, description="Target length of the book")
    tone: str = Field("Informative", max_length=100, description="Writing tone")
    target_audience: str = Field("General readers", max_length=200, description="Intended readers")
    language: str = Field("English", description="Language the book is written in")
    dedication: Optional[str] = Field(None, max_length=2000)
    acknowledgements: Optional[str] = Field(None, max_length=5000)
    author_bio: Optional[str] = Field(None, max_length=5000)
    auto_bio: bool = Field(False, description="Generate the author bio before the outline")

    @field_validator("language")
    @classmethod
    def validate_language(cls, value: str) -> str:
        if value not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Unsupported language '{value}'. Supported: {', '.join(SUPPORTED_LANGUAGES)}"
            )
        return value

    def to_generation_config(self) -> GenerationConfig:
        """
        Snapshot the form into an immutable GenerationConfig.

        Raises:
            ValidationError: title or author name is blank
        """
        if not self.title.strip() or not self.author_name.strip():
            raise ValidationError("Please fill in the book title and author name.")

        return GenerationConfig(
            title=self.title.strip(),
            subtitle=_optional_text(self.subtitle),
            author_name=self.author_name.strip(),
            category=self.category.strip(),
            genre=self.genre,
            word_count=self.word_count,
            tone=self.tone.strip() or "Informative",
            target_audience=self.target_audience.strip() or "General readers",
            language=self.language,
            dedication=_optional_text(self.dedication),
            acknowledgements=_optional_text(self.acknowledgements),
            author_bio=_optional_text(self.author_bio),
        )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "The Quiet Garden",
                    "author_name": "Jane Doe",
                    "category": "Self-Help",
                    "genre": "Non-Fiction",
                    "word_count": "10,000-25,000 words",
                    "tone": "Warm",
                    "target_audience": "Busy professionals",
                    "language": "English",
                    "auto_bio": False,
                }
            ]
        }
    }


# =============================================================================
# WORKSPACE STATUS
# =============================================================================


class BookSummary(BaseModel):
    """Short view of the assembled book."""

    title: str
    subtitle: Optional[str] = None
    author_name: str
    chapter_count: int
    chapter_titles: List[str]


class PublishingDetailsResponse(BaseModel):
    description: str
    keywords: List[str]
    category: str


class WorkspaceStatus(BaseModel):
    """Everything the form needs to render a workspace."""

    workspace_id: str
    state: str
    is_loading: bool
    progress: Optional[str] = None
    error: Optional[str] = None
    form: BookForm
    book: Optional[BookSummary] = None
    title_suggestions: List[str] = Field(default_factory=list)
    has_cover: bool = False
    publishing_details: Optional[PublishingDetailsResponse] = None
    created_at: datetime


class WorkspaceCreateResponse(BaseModel):
    workspace_id: str
    message: str


class GenerateResponse(BaseModel):
    workspace_id: str
    state: str
    message: str


# =============================================================================
# BOOK
# =============================================================================


class ChapterResponse(BaseModel):
    title: str
    content: str


class BookResponse(BaseModel):
    """The full assembled book."""

    title: str
    subtitle: Optional[str] = None
    author_name: str
    copyright: str
    dedication: Optional[str] = None
    acknowledgements: Optional[str] = None
    author_bio: Optional[str] = None
    synopsis: str
    introduction: ChapterResponse
    chapters: List[ChapterResponse]
    conclusion: ChapterResponse
    language: str


# =============================================================================
# SIDE ACTIONS
# =============================================================================


class TitleSuggestionsResponse(BaseModel):
    suggestions: List[str]


class AcceptTitleRequest(BaseModel):
    index: int = Field(..., ge=0, description="Position of the suggestion to use")


class AcceptTitleResponse(BaseModel):
    title: str


class BioResponse(BaseModel):
    author_bio: str


class CoverRequest(BaseModel):
    feedback: Optional[str] = Field(
        None, max_length=1000, description="What to change compared to the previous cover"
    )


class CoverResponse(BaseModel):
    workspace_id: str
    prompt: str
    feedback: Optional[str] = None
    mime_type: str
    size_bytes: int
    created_at: datetime
    download_url: str


# =============================================================================
# MISC
# =============================================================================


class ConfigOptionsResponse(BaseModel):
    """Choices offered by the form and the export dialog."""

    genres: List[str]
    word_counts: List[str]
    languages: List[str]
    font_sizes: List[int]
    line_spacings: List[float]
    export_formats: List[str]
    default_font_family: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    error_code: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str = "1.0.0"
    openrouter_configured: bool
    text_model: str
    outline_model: str
    image_model: str
    workspaces: int = Field(0, description="Workspaces held in memory")
