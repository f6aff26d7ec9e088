"""
Core business logic modules.
"""

from book_weaver.core.config import LLMConfig, ImageConfig, ExportDefaults, AppSettings
from book_weaver.core.models import (
    Book,
    BookOutline,
    Chapter,
    CoverImage,
    ExportFormat,
    ExportOptions,
    GenerationConfig,
    Genre,
    PublishingDetails,
    WordCountBand,
)
from book_weaver.core.llm_connector import OpenRouterClient
from book_weaver.core.image_generator import CoverGenerator
from book_weaver.core.pipeline import BookPipeline, BookWriter, CoverArtist
from book_weaver.core.run_state import GenerationRun, RunState
from book_weaver.core.assembly import assemble_book
from book_weaver.core.exporter import export_book

__all__ = [
    "LLMConfig",
    "ImageConfig",
    "ExportDefaults",
    "AppSettings",
    "Book",
    "BookOutline",
    "Chapter",
    "CoverImage",
    "ExportFormat",
    "ExportOptions",
    "GenerationConfig",
    "Genre",
    "PublishingDetails",
    "WordCountBand",
    "OpenRouterClient",
    "CoverGenerator",
    "BookPipeline",
    "BookWriter",
    "CoverArtist",
    "GenerationRun",
    "RunState",
    "assemble_book",
    "export_book",
]
