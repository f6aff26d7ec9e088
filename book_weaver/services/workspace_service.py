"""
Workspace actions.

Everything a user can do with a workspace besides editing the form: start a
generation, ask for titles or a bio, make covers, get publishing details and
download the book. Side actions record their error on the run without
touching its state or the book.
"""

import asyncio
import logging
from typing import List, Optional, Protocol, Tuple

from book_weaver.core.exceptions import (
    BookNotReadyError,
    CoverNotFoundError,
    GenerationError,
    StaleResultError,
    ValidationError,
)
from book_weaver.core.exporter import export_book
from book_weaver.core.models import (
    Book,
    CoverImage,
    ExportOptions,
    GenerationConfig,
    PublishingDetails,
    safe_filename,
)
from book_weaver.core.pipeline import BookPipeline, BookWriter, CoverArtist
from book_weaver.core.run_state import RunState
from book_weaver.services.workspace_store import Workspace

logger = logging.getLogger(__name__)


class WorkspaceWriter(BookWriter, Protocol):
    """BookWriter plus the advisory calls made outside the main run."""

    async def suggest_titles(self, title: str, language: str = "English") -> List[str]:
        ...

    async def generate_publishing_details(
        self, config: GenerationConfig, synopsis: str
    ) -> PublishingDetails:
        ...


class WorkspaceService:
    """Runs workspace actions against a writer and a cover artist."""

    def __init__(self, writer: WorkspaceWriter, cover_artist: CoverArtist):
        self.writer = writer
        self.cover_artist = cover_artist

    # =========================================================================
    # GENERATION
    # =========================================================================

    def start_generation(self, workspace: Workspace) -> GenerationConfig:
        """
        Validate the form, snapshot it and start the run.

        Runs synchronously so a second request sees the run as busy at once.

        Raises:
            ValidationError: title or author missing; no call is made
            RunInProgressError: another run is in flight
        """
        try:
            config = workspace.form.to_generation_config()
        except ValidationError as e:
            if not workspace.run.is_busy:
                workspace.run.note_error(e.message)
            raise

        workspace.run.begin(with_bio=workspace.form.auto_bio)
        workspace.config = config
        workspace.cover = None
        workspace.publishing_details = None
        logger.info(
            f"[{workspace.id}] Generation started: '{config.title}' "
            f"({config.genre.value}, {config.word_count.value}, {config.language})"
        )
        return config

    async def run_generation(self, workspace: Workspace, config: GenerationConfig) -> Book:
        """Drive a started run to READY or FAILED."""

        def _write_back_bio(bio: str) -> None:
            workspace.form = workspace.form.model_copy(update={"author_bio": bio})

        pipeline = BookPipeline(self.writer, job_id=workspace.id)
        return await pipeline.run(config, workspace.run, on_bio=_write_back_bio)

    async def generate(self, workspace: Workspace) -> Book:
        """Start and finish a generation in one call."""
        config = self.start_generation(workspace)
        return await self.run_generation(workspace, config)

    def _require_book(self, workspace: Workspace) -> Book:
        if workspace.run.book is None or workspace.config is None:
            raise BookNotReadyError("Generate the book first.")
        return workspace.run.book

    @staticmethod
    def _is_same_run(workspace: Workspace, run_number: int) -> bool:
        run = workspace.run
        return run.number == run_number and run.state == RunState.READY

    def _drop_stale(self, workspace: Workspace, run_number: int, what: str) -> None:
        logger.warning(
            f"[{workspace.id}] Dropping {what} from run {run_number}; "
            f"run {workspace.run.number} is now {workspace.run.state.value}"
        )
        raise StaleResultError(
            f"The book was regenerated before the {what} arrived. Please try again."
        )

    # =========================================================================
    # TITLES AND BIO
    # =========================================================================

    async def suggest_titles(self, workspace: Workspace) -> List[str]:
        """
        Ask for three alternative titles. The working title is left alone.

        Raises:
            ValidationError: no title to start from
            TitleSuggestionError: the call failed
        """
        title = workspace.form.title.strip()
        if not title:
            raise ValidationError("Please enter a title first.")

        try:
            suggestions = await self.writer.suggest_titles(title, workspace.form.language)
        except GenerationError as e:
            logger.error(f"[{workspace.id}] Title suggestions failed: {e.message}")
            workspace.run.note_error(f"Could not generate suggestions: {e.message}")
            raise

        workspace.title_suggestions = suggestions
        logger.info(f"[{workspace.id}] {len(suggestions)} title suggestions ready")
        return suggestions

    def accept_title(self, workspace: Workspace, index: int) -> str:
        """
        Replace the form's title with a suggestion and clear the suggestions.

        Raises:
            ValidationError: no suggestion at this index
        """
        if not 0 <= index < len(workspace.title_suggestions):
            raise ValidationError(f"No title suggestion at position {index}.")
        title = workspace.title_suggestions[index]
        workspace.form = workspace.form.model_copy(update={"title": title})
        workspace.title_suggestions = []
        logger.info(f"[{workspace.id}] Title changed to '{title}'")
        return title

    async def generate_bio(self, workspace: Workspace) -> str:
        """
        Write an author bio into the form, and into the current book if any.

        Raises:
            ValidationError: no author name
            BioGenerationError: the call failed
        """
        form = workspace.form
        if not form.author_name.strip():
            raise ValidationError("Please enter the author name first.")

        try:
            bio = await self.writer.generate_author_bio(
                form.author_name.strip(), form.title.strip(), form.category, form.language
            )
        except GenerationError as e:
            logger.error(f"[{workspace.id}] Author bio failed: {e.message}")
            workspace.run.note_error(f"An error occurred: {e.message}")
            raise

        workspace.form = form.model_copy(update={"author_bio": bio})
        if workspace.run.book is not None:
            workspace.run.attach_book(workspace.run.book.with_author_bio(bio))
        return bio

    # =========================================================================
    # COVER AND PUBLISHING DETAILS
    # =========================================================================

    async def generate_cover(
        self, workspace: Workspace, feedback: Optional[str] = None
    ) -> CoverImage:
        """
        Generate a cover, replacing the previous one.

        Raises:
            BookNotReadyError: no assembled book yet
            CoverGenerationError: the call failed; the old cover is kept
            StaleResultError: the book was regenerated meanwhile; the image is dropped
        """
        book = self._require_book(workspace)
        run_number = workspace.run.number
        workspace.run.clear_error()
        try:
            cover = await self.cover_artist.generate_cover(workspace.config, book.synopsis, feedback)
        except GenerationError as e:
            logger.error(f"[{workspace.id}] Cover generation failed: {e.message}")
            if self._is_same_run(workspace, run_number):
                workspace.run.note_error(f"Failed to generate cover: {e.message}")
            raise

        if not self._is_same_run(workspace, run_number):
            self._drop_stale(workspace, run_number, "cover")
        workspace.cover = cover
        logger.info(
            f"[{workspace.id}] Cover ready ({len(cover.data)} bytes, "
            f"feedback: {'yes' if cover.feedback else 'no'})"
        )
        return cover

    def cover_download(self, workspace: Workspace) -> Tuple[str, bytes]:
        """
        Raises:
            CoverNotFoundError: no cover generated yet
        """
        if workspace.cover is None:
            raise CoverNotFoundError("No cover has been generated yet.")
        title = workspace.config.title if workspace.config else workspace.form.title
        return safe_filename(title, "_cover.jpg"), workspace.cover.data

    async def publishing_details(self, workspace: Workspace) -> PublishingDetails:
        """
        Raises:
            BookNotReadyError: no assembled book yet
            PublishingDetailsError: the call failed
            StaleResultError: the book was regenerated meanwhile; the details are dropped
        """
        book = self._require_book(workspace)
        run_number = workspace.run.number
        try:
            details = await self.writer.generate_publishing_details(workspace.config, book.synopsis)
        except GenerationError as e:
            logger.error(f"[{workspace.id}] Publishing details failed: {e.message}")
            if self._is_same_run(workspace, run_number):
                workspace.run.note_error(f"An error occurred: {e.message}")
            raise

        if not self._is_same_run(workspace, run_number):
            self._drop_stale(workspace, run_number, "publishing details")
        workspace.publishing_details = details
        return details

    # =========================================================================
    # EXPORT
    # =========================================================================

    async def export(
        self, workspace: Workspace, options: Optional[ExportOptions] = None
    ) -> Tuple[str, bytes]:
        """
        Render the current book in a worker thread.

        Raises:
            BookNotReadyError: no assembled book yet
        """
        book = self._require_book(workspace)
        options = options or ExportOptions()
        filename, data = await asyncio.to_thread(export_book, book, options)
        logger.info(f"[{workspace.id}] Export ready: {filename}")
        return filename, data
