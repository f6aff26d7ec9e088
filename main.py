#!/usr/bin/env python3
"""
AI Book Weaver - Main Entry Point

Generate a complete book (outline, chapters, optional cover) from the command
line, or start the HTTP API.

Usage:
    python main.py generate --title "The Quiet Garden" --author "Jane Doe"
    python main.py generate --title "Night Train" --author "A. Writer" --genre Fiction --cover
    python main.py serve --reload
"""

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from book_weaver.api.schemas import BookForm
from book_weaver.core.config import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINE_SPACING,
    FONT_SIZE_CHOICES,
    LINE_SPACING_CHOICES,
    ImageConfig,
    LLMConfig,
)
from book_weaver.core.exceptions import BookWeaverError
from book_weaver.core.image_generator import CoverGenerator
from book_weaver.core.llm_connector import OpenRouterClient
from book_weaver.core.models import SUPPORTED_LANGUAGES, ExportFormat, ExportOptions, Genre, WordCountBand
from book_weaver.services.workspace_service import WorkspaceService
from book_weaver.services.workspace_store import WorkspaceStore


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        description="Generate complete books with AI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate --title "The Quiet Garden" --author "Jane Doe"
  %(prog)s generate --title "Night Train" --author "A. Writer" --genre Fiction --format pdf
  %(prog)s generate --title "Deep Work Habits" --author "Sam Lee" --auto-bio --cover --publishing-details
  %(prog)s serve --port 8000 --reload
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate a book and write it to disk")

    # Book metadata
    gen.add_argument("--title", "-t", type=str, required=True, help="Book title")
    gen.add_argument("--subtitle", type=str, help="Optional subtitle")
    gen.add_argument("--author", "-a", type=str, required=True, help="Author name")
    gen.add_argument("--category", type=str, default="", help="Store category, e.g. 'Self-Help'")
    gen.add_argument(
        "--genre",
        choices=[g.value for g in Genre],
        default=Genre.NON_FICTION.value,
        help="Genre (default: Non-Fiction)"
    )
    gen.add_argument(
        "--word-count",
        choices=[w.value for w in WordCountBand],
        default=WordCountBand.MEDIUM.value,
        help=f"Target length (default: {WordCountBand.MEDIUM.value})"
    )
    gen.add_argument("--tone", type=str, default="Informative", help="Writing tone")
    gen.add_argument("--audience", type=str, default="General readers", help="Target audience")
    gen.add_argument(
        "--language", "-l",
        choices=SUPPORTED_LANGUAGES,
        default="English",
        help="Book language (default: English)"
    )
    gen.add_argument("--dedication", type=str, help="Dedication text")
    gen.add_argument("--acknowledgements", type=str, help="Acknowledgements text")
    gen.add_argument("--bio", type=str, help="Author bio text")
    gen.add_argument(
        "--auto-bio",
        action="store_true",
        help="Generate the author bio before the outline"
    )

    # Output options
    gen.add_argument(
        "--output-dir",
        type=str,
        default="output",
        help="Output directory (default: output)"
    )
    gen.add_argument(
        "--format",
        choices=[f.value for f in ExportFormat],
        default=ExportFormat.DOCX.value,
        help="Document format (default: docx)"
    )
    gen.add_argument(
        "--font-family",
        type=str,
        default=DEFAULT_FONT_FAMILY,
        help=f"Body font (default: {DEFAULT_FONT_FAMILY})"
    )
    gen.add_argument(
        "--font-size",
        type=int,
        choices=FONT_SIZE_CHOICES,
        default=DEFAULT_FONT_SIZE,
        help=f"Body font size in points (default: {DEFAULT_FONT_SIZE})"
    )
    gen.add_argument(
        "--line-spacing",
        type=float,
        choices=LINE_SPACING_CHOICES,
        default=DEFAULT_LINE_SPACING,
        help=f"Line spacing (default: {DEFAULT_LINE_SPACING})"
    )
    gen.add_argument("--toc", action="store_true", help="Add a table of contents page")

    # Extras
    gen.add_argument("--cover", action="store_true", help="Also generate a cover image")
    gen.add_argument("--cover-feedback", type=str, help="Instructions for the cover")
    gen.add_argument(
        "--publishing-details",
        action="store_true",
        help="Print store description, keywords and category"
    )
    gen.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    return parser


def _form_from_args(args: argparse.Namespace) -> BookForm:
    return BookForm(
        title=args.title,
        subtitle=args.subtitle,
        author_name=args.author,
        category=args.category,
        genre=Genre(args.genre),
        word_count=WordCountBand(args.word_count),
        tone=args.tone,
        target_audience=args.audience,
        language=args.language,
        dedication=args.dedication,
        acknowledgements=args.acknowledgements,
        author_bio=args.bio,
        auto_bio=args.auto_bio,
    )


async def run_generate(args: argparse.Namespace) -> int:
    """Generate a book (and optional extras) and write the files."""
    try:
        form = _form_from_args(args)
    except PydanticValidationError as e:
        print(f"Error: invalid arguments\n{e}", file=sys.stderr)
        return 1

    llm_config = LLMConfig()
    if not llm_config.validate():
        print("Error: OpenRouter API key not configured.", file=sys.stderr)
        print("Set OPENROUTER_API_KEY in .env file", file=sys.stderr)
        return 1

    service = WorkspaceService(OpenRouterClient(llm_config), CoverGenerator(ImageConfig()))
    workspace = WorkspaceStore().create(form)

    if args.verbose:
        print(f"Generating '{args.title}' ({args.genre}, {args.word_count}, {args.language})...")

    try:
        book = await service.generate(workspace)
    except BookWeaverError as e:
        print(workspace.run.error or f"Error: {e.message}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Book: '{book.title}', {len(book.chapters)} chapters")

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    options = ExportOptions(
        format=ExportFormat(args.format),
        font_family=args.font_family,
        font_size=args.font_size,
        line_spacing=args.line_spacing,
        include_toc=args.toc,
    )
    filename, data = await service.export(workspace, options)
    (output_dir / filename).write_bytes(data)
    print(f"✓ Book: {output_dir / filename}")

    if args.cover or args.cover_feedback:
        try:
            await service.generate_cover(workspace, args.cover_feedback)
            cover_name, cover_data = service.cover_download(workspace)
            (output_dir / cover_name).write_bytes(cover_data)
            print(f"✓ Cover: {output_dir / cover_name}")
        except BookWeaverError:
            print(workspace.run.error, file=sys.stderr)

    if args.publishing_details:
        try:
            details = await service.publishing_details(workspace)
            print(f"\nDescription:\n{details.description}\n")
            print(f"Keywords: {', '.join(details.keywords)}")
            print(f"Category: {details.category}")
        except BookWeaverError:
            print(workspace.run.error, file=sys.stderr)

    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("book_weaver.api.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main():
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args()

    if args.command == "serve":
        return run_serve(args)
    return asyncio.run(run_generate(args))


if __name__ == "__main__":
    sys.exit(main())
