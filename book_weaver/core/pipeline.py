"""
Book generation pipeline.

Runs the dependent calls of one generation in order:

1. Author bio (only when the run was started with automatic bio)
2. Outline - must finish first, every section needs its titles and synopsis
3. Content expansion - introduction, every chapter and the conclusion are
   requested concurrently; the first failure cancels the rest
4. Assembly - sections are put back in outline order, never arrival order
"""

import asyncio
import logging
from functools import partial
from typing import Awaitable, Callable, List, Optional, Protocol, TypeVar, runtime_checkable

from book_weaver.core.assembly import assemble_book
from book_weaver.core.exceptions import (
    BioGenerationError,
    BookWeaverError,
    ContentGenerationError,
    GenerationError,
    InvalidTransitionError,
    OutlineGenerationError,
)
from book_weaver.core.models import Book, BookOutline, Chapter, CoverImage, GenerationConfig
from book_weaver.core.run_state import GenerationRun, RunState

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class BookWriter(Protocol):
    """What the pipeline needs from the text-generation service."""

    async def generate_author_bio(
        self, author_name: str, book_title: str, category: str, language: str = "English"
    ) -> str:
        ...

    async def generate_outline(self, config: GenerationConfig) -> BookOutline:
        ...

    async def generate_section(
        self, config: GenerationConfig, section_title: str, synopsis: str
    ) -> str:
        ...


@runtime_checkable
class CoverArtist(Protocol):
    """What the workspace needs from the image-generation service."""

    async def generate_cover(
        self, config: GenerationConfig, synopsis: str, feedback: Optional[str] = None
    ) -> CoverImage:
        ...


async def _call_stage(
    call: Awaitable[T],
    make_error: Callable[[str], GenerationError],
    message: str,
) -> T:
    """Await an external call, wrapping unexpected failures into the stage error."""
    try:
        return await call
    except GenerationError:
        raise
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error(f"{message} ({type(e).__name__}: {e})")
        raise make_error(message) from e


class BookPipeline:
    """Orchestrates one generation run against a BookWriter."""

    def __init__(self, writer: BookWriter, job_id: str = ""):
        self.writer = writer
        self.job_id = job_id

    async def run(
        self,
        config: GenerationConfig,
        run: GenerationRun,
        on_bio: Optional[Callable[[str], None]] = None,
    ) -> Book:
        """
        Drive a run that has already been started with ``run.begin()``.

        Args:
            config: Immutable generation snapshot
            run: The workspace's run state; moved through every step
            on_bio: Called with the generated bio so the form can be updated

        Returns:
            The assembled Book (also stored on ``run.book``)

        Raises:
            BookWeaverError: the stage error that aborted the run
        """
        if run.state not in (RunState.AWAITING_BIO, RunState.AWAITING_OUTLINE):
            raise InvalidTransitionError("Generation run was not started")

        try:
            author_bio = None
            if run.state == RunState.AWAITING_BIO:
                logger.info(f"[{self.job_id}] Generating author bio for {config.author_name}")
                author_bio = await _call_stage(
                    self.writer.generate_author_bio(
                        config.author_name, config.title, config.category, config.language
                    ),
                    BioGenerationError,
                    "Failed to generate author bio.",
                )
                if on_bio:
                    on_bio(author_bio)
                run.advance(RunState.AWAITING_OUTLINE)

            logger.info(f"[{self.job_id}] Generating outline for '{config.title}'")
            outline = await _call_stage(
                self.writer.generate_outline(config),
                OutlineGenerationError,
                "Failed to generate book outline.",
            )
            run.advance(RunState.AWAITING_CONTENT)

            sections = await self.expand_sections(config, outline)
            run.advance(RunState.ASSEMBLING)

            book = assemble_book(config, outline, sections, author_bio=author_bio)
            run.complete(book)
            logger.info(
                f"[{self.job_id}] Book '{book.title}' assembled: {len(book.chapters)} chapters"
            )
            return book

        except BookWeaverError as e:
            logger.error(f"[{self.job_id}] Generation failed in state {run.state.value}: {e.message}")
            if run.is_busy:
                run.fail(f"An error occurred: {e.message}")
            raise

    async def expand_sections(
        self,
        config: GenerationConfig,
        outline: BookOutline,
    ) -> List[Chapter]:
        """
        Expand introduction, chapters and conclusion concurrently.

        Returns:
            Chapters in outline order

        Raises:
            ContentGenerationError: from the first section that fails; all
                other pending sections are cancelled
        """
        titles = outline.section_titles()
        logger.info(f"[{self.job_id}] Expanding {len(titles)} sections concurrently")

        async def _expand_one(index: int, title: str) -> str:
            content = await _call_stage(
                self.writer.generate_section(config, title, outline.synopsis),
                partial(ContentGenerationError, section_title=title),
                f'Failed to generate content for chapter: "{title}".',
            )
            logger.info(f"[{self.job_id}] Section {index + 1}/{len(titles)} done: '{title}'")
            return content

        tasks = [
            asyncio.create_task(_expand_one(index, title))
            for index, title in enumerate(titles)
        ]
        try:
            contents = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return [Chapter(title=title, content=content) for title, content in zip(titles, contents)]
