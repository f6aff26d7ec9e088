"""Root-level test fixtures."""

import asyncio
from typing import Dict, List, Optional, Set

import pytest

from book_weaver.core.assembly import assemble_book
from book_weaver.core.config import ImageConfig, LLMConfig
from book_weaver.core.exceptions import (
    BioGenerationError,
    ContentGenerationError,
    CoverGenerationError,
    OutlineGenerationError,
    PublishingDetailsError,
    TitleSuggestionError,
)
from book_weaver.core.models import (
    BookOutline,
    Chapter,
    CoverImage,
    GenerationConfig,
    Genre,
    PublishingDetails,
    WordCountBand,
)


# Ensure no real API keys leak into tests
@pytest.fixture(autouse=True)
def _clear_env_keys(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("BOOK_WEAVER_API_KEY", raising=False)
    monkeypatch.delenv("CLOUDWATCH_ENABLED", raising=False)


@pytest.fixture
def llm_config():
    return LLMConfig(api_key="test-key-123")


@pytest.fixture
def image_config():
    return ImageConfig(api_key="test-key-123")


@pytest.fixture
def generation_config():
    return GenerationConfig(
        title="The Quiet Garden",
        author_name="Jane Doe",
        category="Self-Help",
        genre=Genre.NON_FICTION,
        word_count=WordCountBand.MEDIUM,
        tone="Warm",
        target_audience="Busy professionals",
        language="English",
        dedication="For my mother,\nwho grew roses.",
        acknowledgements="Thanks to my editor.",
        author_bio="Jane Doe has tended gardens for thirty years.",
    )


@pytest.fixture
def sample_outline():
    return BookOutline(
        synopsis="A calm guide to building a garden that restores you.",
        introduction_title="Introduction: Why Gardens Matter",
        chapter_titles=[f"Chapter {i}: Lesson {i}" for i in range(1, 11)],
        conclusion_title="Conclusion: Growing On",
    )


def section_text(title: str) -> str:
    """Prose the fake writer returns; contains blank lines on purpose."""
    return f"{title} opens here.\n\n\n{title} continues here.\n   \n"


@pytest.fixture
def sample_book(generation_config, sample_outline):
    sections = [Chapter(title=t, content=section_text(t)) for t in sample_outline.section_titles()]
    return assemble_book(generation_config, sample_outline, sections, year=2024)


class FakeWriter:
    """In-memory BookWriter with switchable failures and per-section delays."""

    def __init__(self, outline: BookOutline):
        self.outline = outline
        self.delays: Dict[str, float] = {}
        self.fail_sections: Set[str] = set()
        self.fail_outline = False
        self.fail_bio = False
        self.fail_titles = False
        self.fail_publishing = False
        self.bio = "Jane Doe writes about gardens and patience."
        self.titles = ["Roots of Calm", "The Patient Garden", "Soil and Stillness"]
        self.outline_calls = 0
        self.bio_calls = 0
        self.section_calls: List[str] = []
        self.completed: List[str] = []
        self.cancelled: List[str] = []

    async def generate_author_bio(self, author_name, book_title, category, language="English"):
        self.bio_calls += 1
        if self.fail_bio:
            raise BioGenerationError("Failed to generate author bio.")
        return self.bio

    async def generate_outline(self, config):
        self.outline_calls += 1
        if self.fail_outline:
            raise OutlineGenerationError("Failed to generate book outline.")
        return self.outline

    async def generate_section(self, config, section_title, synopsis):
        self.section_calls.append(section_title)
        try:
            await asyncio.sleep(self.delays.get(section_title, 0))
        except asyncio.CancelledError:
            self.cancelled.append(section_title)
            raise
        if section_title in self.fail_sections:
            raise ContentGenerationError(
                f'Failed to generate content for chapter: "{section_title}".',
                section_title=section_title,
            )
        self.completed.append(section_title)
        return section_text(section_title)

    async def suggest_titles(self, title, language="English"):
        if self.fail_titles:
            raise TitleSuggestionError("Failed to generate alternative titles.")
        return list(self.titles)

    async def generate_publishing_details(self, config, synopsis):
        if self.fail_publishing:
            raise PublishingDetailsError("Failed to generate publishing details.")
        return PublishingDetails(
            description="<p>A calm guide.</p>",
            keywords=["garden", "calm", "mindfulness", "roses", "soil", "patience", "home"],
            category="Home & Garden > Gardening",
        )


class FakeCoverArtist:
    """CoverArtist returning distinct bytes on every call."""

    def __init__(self):
        self.calls: List[Optional[str]] = []
        self.fail = False

    async def generate_cover(self, config, synopsis, feedback=None):
        self.calls.append(feedback)
        if self.fail:
            raise CoverGenerationError("Failed to generate cover image.")
        data = b"\xff\xd8\xff\xe0" + f"cover-{len(self.calls)}".encode()
        feedback = feedback.strip() if feedback and feedback.strip() else None
        return CoverImage(data=data, prompt=f"cover for {config.title}", feedback=feedback)


@pytest.fixture
def fake_writer(sample_outline):
    return FakeWriter(sample_outline)


@pytest.fixture
def fake_cover_artist():
    return FakeCoverArtist()
