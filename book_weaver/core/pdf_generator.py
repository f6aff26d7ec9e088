"""
PDF Generator for print-on-demand books.

This module creates PDFs with the same layout as the DOCX export:
- 6x9 inch pages with inside/outside margins
- Every section starts on a new page
- Body paragraphs use the chosen font size and line spacing
- Page number in the footer
"""

import io
import logging
import os
from typing import Dict, List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from book_weaver.core.config import ExportDefaults
from book_weaver.core.layout import LayoutSection, SectionKind, build_layout
from book_weaver.core.models import Book, ExportOptions

logger = logging.getLogger(__name__)


# Global singleton for FontManager to avoid repeated font searches
_font_manager_instance: Optional["FontManager"] = None


def get_font_manager() -> "FontManager":
    """Get or create the singleton FontManager instance."""
    global _font_manager_instance
    if _font_manager_instance is None:
        _font_manager_instance = FontManager()
    return _font_manager_instance


class FontManager:
    """Map font families to PDF fonts, registering Unicode TTFs when present."""

    FONT_SEARCH_PATHS = [
        # macOS
        "/System/Library/Fonts",
        "/Library/Fonts",
        "~/Library/Fonts",
        # Linux
        "/usr/share/fonts/truetype",
        "/usr/share/fonts/TTF",
        "/usr/local/share/fonts",
        "~/.fonts",
        # Windows
        "C:/Windows/Fonts",
        # Project local
        "./fonts",
    ]

    # (regular name, regular file, bold name, bold file)
    UNICODE_FONTS = [
        ("DejaVuSerif", "DejaVuSerif.ttf", "DejaVuSerif-Bold", "DejaVuSerif-Bold.ttf"),
        ("DejaVuSans", "DejaVuSans.ttf", "DejaVuSans-Bold", "DejaVuSans-Bold.ttf"),
        ("NotoSerif", "NotoSerif-Regular.ttf", "NotoSerif-Bold", "NotoSerif-Bold.ttf"),
    ]

    # Standard Type 1 fonts, always available but Latin-1 only
    BUILTIN_FAMILIES: Dict[str, Tuple[str, str]] = {
        "Times New Roman": ("Times-Roman", "Times-Bold"),
        "Georgia": ("Times-Roman", "Times-Bold"),
        "Garamond": ("Times-Roman", "Times-Bold"),
        "Arial": ("Helvetica", "Helvetica-Bold"),
        "Helvetica": ("Helvetica", "Helvetica-Bold"),
        "Courier New": ("Courier", "Courier-Bold"),
    }

    def __init__(self):
        self.registered_fonts: Dict[str, Tuple[str, str]] = {}
        self._register_system_fonts()

    def _register_system_fonts(self):
        """Find and register Unicode-compatible fonts."""
        for name, font_file, bold_name, bold_file in self.UNICODE_FONTS:
            font_path = self._find_font(font_file)
            if not font_path:
                continue
            try:
                pdfmetrics.registerFont(TTFont(name, font_path))
            except Exception as e:
                logger.debug(f"Skipping font {font_file}: {e}")
                continue
            bold = name
            bold_path = self._find_font(bold_file)
            if bold_path:
                try:
                    pdfmetrics.registerFont(TTFont(bold_name, bold_path))
                    bold = bold_name
                except Exception as e:
                    logger.debug(f"Skipping font {bold_file}: {e}")
            self.registered_fonts[name] = (name, bold)

    def _find_font(self, font_file: str) -> Optional[str]:
        """Search for a font file in common locations."""
        for search_path in self.FONT_SEARCH_PATHS:
            expanded_path = os.path.expanduser(search_path)
            if os.path.isdir(expanded_path):
                for root, _, files in os.walk(expanded_path):
                    if font_file in files:
                        return os.path.join(root, font_file)
        return None

    def get_fonts(self, family: str, needs_unicode: bool = False) -> Tuple[str, str]:
        """
        Get (regular, bold) font names for a family.

        Falls back to Times-Roman, which is always available but does not
        cover characters outside Latin-1.
        """
        builtin = self.BUILTIN_FAMILIES.get(family, ("Times-Roman", "Times-Bold"))
        if needs_unicode:
            for fonts in self.registered_fonts.values():
                return fonts
            logger.warning("No Unicode font found; some characters may not render")
        return builtin


def _needs_unicode(book: Book) -> bool:
    parts = [book.title, book.author_name, book.synopsis, book.introduction.content,
             book.conclusion.content, book.subtitle or "", book.dedication or "",
             book.acknowledgements or "", book.author_bio or ""]
    parts.extend(chapter.title + chapter.content for chapter in book.chapters)
    try:
        "".join(parts).encode("latin-1")
    except UnicodeEncodeError:
        return True
    return False


class PDFBookGenerator:
    """Render a Book into a PDF with reportlab platypus."""

    def __init__(
        self,
        options: Optional[ExportOptions] = None,
        defaults: Optional[ExportDefaults] = None,
        font_manager: Optional[FontManager] = None,
    ):
        self.options = options or ExportOptions()
        self.defaults = defaults or ExportDefaults()
        self.font_manager = font_manager or get_font_manager()
        self.font_name = "Times-Roman"
        self.bold_font_name = "Times-Bold"

    def _build_styles(self) -> Dict[str, ParagraphStyle]:
        size = self.options.font_size
        return {
            "body": ParagraphStyle(
                "BookBody",
                fontName=self.font_name,
                fontSize=size,
                leading=size * self.options.line_spacing,
                alignment=TA_JUSTIFY,
                spaceAfter=6,
            ),
            "heading": ParagraphStyle(
                "BookHeading",
                fontName=self.bold_font_name,
                fontSize=self.defaults.heading_font_size,
                leading=self.defaults.heading_font_size * 1.2,
                alignment=TA_LEFT,
                spaceAfter=18,
            ),
            "title": ParagraphStyle(
                "BookTitle",
                fontName=self.bold_font_name,
                fontSize=self.defaults.title_font_size,
                leading=self.defaults.title_font_size * 1.2,
                alignment=TA_CENTER,
                spaceAfter=24,
            ),
            "centered": ParagraphStyle(
                "BookCentered",
                fontName=self.font_name,
                fontSize=size + 2,
                leading=(size + 2) * 1.2,
                alignment=TA_CENTER,
                spaceAfter=12,
            ),
            "small": ParagraphStyle(
                "BookSmall",
                fontName=self.font_name,
                fontSize=max(size - 2, 8),
                leading=max(size - 2, 8) * 1.2,
                alignment=TA_CENTER,
            ),
            "toc": ParagraphStyle(
                "BookToc",
                fontName=self.font_name,
                fontSize=size,
                leading=size * 1.5,
            ),
            "closing": ParagraphStyle(
                "BookClosing",
                fontName=self.bold_font_name,
                fontSize=self.defaults.heading_font_size,
                leading=self.defaults.heading_font_size * 1.2,
                alignment=TA_CENTER,
            ),
        }

    def _section_flowables(self, section: LayoutSection, styles: Dict[str, ParagraphStyle]) -> List:
        flowables: List = []
        if section.kind == SectionKind.TITLE_PAGE:
            flowables.append(Spacer(1, 2 * inch))
            flowables.append(Paragraph(escape(section.heading or ""), styles["title"]))
            for line in section.paragraphs:
                flowables.append(Paragraph(escape(line), styles["centered"]))
        elif section.kind == SectionKind.COPYRIGHT:
            flowables.append(Spacer(1, 5 * inch))
            for line in section.paragraphs:
                flowables.append(Paragraph(escape(line), styles["small"]))
        elif section.kind == SectionKind.CLOSING:
            flowables.append(Spacer(1, 2.5 * inch))
            flowables.append(Paragraph(escape(section.paragraphs[0]), styles["closing"]))
        else:
            flowables.append(Paragraph(escape(section.heading or ""), styles["heading"]))
            style = styles["toc"] if section.kind == SectionKind.TABLE_OF_CONTENTS else styles["body"]
            for text in section.paragraphs:
                flowables.append(Paragraph(escape(text), style))
        return flowables

    def _draw_page_number(self, canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont(self.font_name, self.defaults.header_font_size)
        canvas.drawCentredString(
            doc.pagesize[0] / 2,
            self.defaults.margin_bottom * inch / 2,
            str(canvas.getPageNumber()),
        )
        canvas.restoreState()

    def generate(self, book: Book) -> bytes:
        """
        Generate the PDF.

        Args:
            book: Assembled book

        Returns:
            The PDF file as bytes
        """
        self.font_name, self.bold_font_name = self.font_manager.get_fonts(
            self.options.font_family, needs_unicode=_needs_unicode(book)
        )
        styles = self._build_styles()

        out = io.BytesIO()
        doc = SimpleDocTemplate(
            out,
            pagesize=(self.defaults.page_width * inch, self.defaults.page_height * inch),
            topMargin=self.defaults.margin_top * inch,
            bottomMargin=self.defaults.margin_bottom * inch,
            leftMargin=self.defaults.margin_inside * inch,
            rightMargin=self.defaults.margin_outside * inch,
            title=book.title,
            author=book.author_name,
            subject=book.subtitle or "",
            creator=self.defaults.creator,
        )

        layout = build_layout(book, include_toc=self.options.include_toc)
        story: List = []
        for index, section in enumerate(layout):
            if index > 0:
                story.append(PageBreak())
            story.extend(self._section_flowables(section, styles))

        doc.build(story, onFirstPage=self._draw_page_number, onLaterPages=self._draw_page_number)
        logger.info(f"PDF generated for '{book.title}': {len(layout)} sections, font {self.font_name}")
        return out.getvalue()


def generate_pdf(
    book: Book,
    options: Optional[ExportOptions] = None,
    defaults: Optional[ExportDefaults] = None,
    font_manager: Optional[FontManager] = None,
) -> bytes:
    """
    Convenience function to render a book as PDF.

    Args:
        book: Assembled book
        options: Font, size and line spacing (uses defaults if not provided)
        defaults: Page geometry
        font_manager: Optional shared FontManager

    Returns:
        The PDF file as bytes
    """
    return PDFBookGenerator(options, defaults, font_manager).generate(book)
