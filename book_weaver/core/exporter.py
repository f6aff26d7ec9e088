"""
Export dispatch.

Picks the DOCX or PDF generator for the requested format. Both render the
same layout, so the choice only affects the file container.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from book_weaver.core.config import ExportDefaults
from book_weaver.core.docx_generator import generate_docx
from book_weaver.core.models import Book, ExportFormat, ExportOptions, safe_filename
from book_weaver.core.pdf_generator import generate_pdf

logger = logging.getLogger(__name__)

_RENDERERS: Dict[ExportFormat, Callable[..., bytes]] = {
    ExportFormat.DOCX: generate_docx,
    ExportFormat.PDF: generate_pdf,
}


def export_book(
    book: Book,
    options: Optional[ExportOptions] = None,
    defaults: Optional[ExportDefaults] = None,
) -> Tuple[str, bytes]:
    """
    Render a book to a downloadable file.

    Returns:
        (file name, file bytes); the name is the title with spaces
        replaced by underscores plus the format extension
    """
    options = options or ExportOptions()
    renderer = _RENDERERS[options.format]
    data = renderer(book, options, defaults)
    filename = safe_filename(book.title, options.extension)
    logger.info(f"Exported '{book.title}' as {filename} ({len(data)} bytes)")
    return filename, data
