"""
Domain records for book generation.

This module holds the immutable generation snapshot, the outline returned by
the planning call, and the assembled book that gets exported.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


class Genre(str, Enum):
    """Book genre."""
    FICTION = "Fiction"
    NON_FICTION = "Non-Fiction"


class WordCountBand(str, Enum):
    """Target length of the whole book."""
    SHORT = "5,000-10,000 words"
    MEDIUM = "10,000-25,000 words"
    LONG = "25,000-50,000 words"
    EPIC = "50,000+ words"


SUPPORTED_LANGUAGES = [
    "English",
    "Portuguese",
    "Spanish",
    "French",
    "German",
    "Italian",
]

END_TEXT_BY_LANGUAGE = {
    "English": "The End",
    "Portuguese": "Fim",
    "Spanish": "Fin",
    "French": "Fin",
    "German": "Ende",
    "Italian": "Fine",
}


@dataclass(frozen=True)
class GenerationConfig:
    """Snapshot of the form at submission time. Never mutated afterwards."""
    title: str
    author_name: str
    subtitle: Optional[str] = None
    category: str = ""
    genre: Genre = Genre.NON_FICTION
    word_count: WordCountBand = WordCountBand.MEDIUM
    tone: str = "Informative"
    target_audience: str = "General readers"
    language: str = "English"
    dedication: Optional[str] = None
    acknowledgements: Optional[str] = None
    author_bio: Optional[str] = None


@dataclass
class BookOutline:
    """Structural skeleton produced before any prose."""
    synopsis: str
    introduction_title: str
    chapter_titles: List[str]
    conclusion_title: str

    def section_titles(self) -> List[str]:
        """Introduction, chapters and conclusion in reading order."""
        return [self.introduction_title, *self.chapter_titles, self.conclusion_title]


@dataclass(frozen=True)
class Chapter:
    """A (title, content) section. Introduction and conclusion use it too."""
    title: str
    content: str


@dataclass(frozen=True)
class Book:
    """The assembled book, ready for export."""
    title: str
    author_name: str
    copyright: str
    synopsis: str
    introduction: Chapter
    chapters: List[Chapter]
    conclusion: Chapter
    subtitle: Optional[str] = None
    dedication: Optional[str] = None
    acknowledgements: Optional[str] = None
    author_bio: Optional[str] = None
    language: str = "English"

    def with_author_bio(self, author_bio: str) -> "Book":
        """Return a copy with a replaced bio; the only field updated after assembly."""
        return replace(self, author_bio=author_bio)


@dataclass(frozen=True)
class CoverImage:
    """The single current cover for a workspace."""
    data: bytes
    prompt: str
    feedback: Optional[str] = None
    mime_type: str = "image/jpeg"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class PublishingDetails:
    """Marketing metadata for online stores."""
    description: str
    keywords: List[str]
    category: str


class ExportFormat(str, Enum):
    DOCX = "docx"
    PDF = "pdf"


@dataclass(frozen=True)
class ExportOptions:
    """Paragraph formatting chosen at download time."""
    format: ExportFormat = ExportFormat.DOCX
    font_family: str = "Times New Roman"
    font_size: int = 12
    line_spacing: float = 1.5
    include_toc: bool = False

    @property
    def extension(self) -> str:
        return f".{self.format.value}"

    @property
    def media_type(self) -> str:
        if self.format == ExportFormat.PDF:
            return "application/pdf"
        return "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def safe_filename(title: str, suffix: str) -> str:
    """Build a download name from a title, e.g. 'My_Book.docx'."""
    cleaned = "".join(c if c.isalnum() or c in " -_" else "_" for c in title)
    cleaned = cleaned.strip().replace(" ", "_")[:80] or "book"
    return f"{cleaned}{suffix}"
