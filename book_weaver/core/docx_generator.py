"""
DOCX Generator for print-on-demand books.

This module creates Word documents laid out for a 6x9 inch trim:
- Title, copyright, optional dedication and table of contents
- Synopsis, introduction, chapters and conclusion, each on a new page
- Optional acknowledgements and author bio, then a closing page
- Page number in the header of every page
"""

import io
import logging
from typing import Optional

from docx import Document
from docx.document import Document as DocumentObject
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt
from docx.text.paragraph import Paragraph

from book_weaver.core.config import ExportDefaults
from book_weaver.core.layout import LayoutSection, SectionKind, build_layout
from book_weaver.core.models import Book, ExportOptions

logger = logging.getLogger(__name__)

BODY_STYLE_NAME = "Book Body"


class DocxBookGenerator:
    """Render a Book into a .docx file."""

    def __init__(
        self,
        options: Optional[ExportOptions] = None,
        defaults: Optional[ExportDefaults] = None,
    ):
        self.options = options or ExportOptions()
        self.defaults = defaults or ExportDefaults()

    def _setup_page(self, doc: DocumentObject) -> None:
        """Apply trim size, margins and the page-number header."""
        section = doc.sections[0]
        section.page_width = Inches(self.defaults.page_width)
        section.page_height = Inches(self.defaults.page_height)
        section.top_margin = Inches(self.defaults.margin_top)
        section.bottom_margin = Inches(self.defaults.margin_bottom)
        section.left_margin = Inches(self.defaults.margin_inside)
        section.right_margin = Inches(self.defaults.margin_outside)

        header = section.header.paragraphs[0]
        header.alignment = WD_ALIGN_PARAGRAPH.RIGHT
        self._add_page_number_field(header)

    def _add_page_number_field(self, paragraph: Paragraph) -> None:
        run = paragraph.add_run()
        run.font.name = self.options.font_family
        run.font.size = Pt(self.defaults.header_font_size)

        begin = OxmlElement("w:fldChar")
        begin.set(qn("w:fldCharType"), "begin")
        instr = OxmlElement("w:instrText")
        instr.set(qn("xml:space"), "preserve")
        instr.text = "PAGE"
        end = OxmlElement("w:fldChar")
        end.set(qn("w:fldCharType"), "end")

        run._r.append(begin)
        run._r.append(instr)
        run._r.append(end)

    def _add_body_style(self, doc: DocumentObject) -> None:
        """Create the paragraph style used by every body paragraph."""
        style = doc.styles.add_style(BODY_STYLE_NAME, WD_STYLE_TYPE.PARAGRAPH)
        style.base_style = doc.styles["Normal"]
        style.font.name = self.options.font_family
        style.font.size = Pt(self.options.font_size)
        style.paragraph_format.line_spacing = self.options.line_spacing
        style.paragraph_format.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
        style.paragraph_format.space_after = Pt(6)

    def _add_body_paragraph(self, doc: DocumentObject, text: str) -> Paragraph:
        paragraph = doc.add_paragraph(style=BODY_STYLE_NAME)
        paragraph.paragraph_format.line_spacing = self.options.line_spacing
        paragraph.paragraph_format.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
        run = paragraph.add_run(text)
        run.font.name = self.options.font_family
        run.font.size = Pt(self.options.font_size)
        return paragraph

    def _add_centered(
        self,
        doc: DocumentObject,
        text: str,
        size: int,
        bold: bool = False,
        italic: bool = False,
    ) -> Paragraph:
        paragraph = doc.add_paragraph()
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = paragraph.add_run(text)
        run.font.name = self.options.font_family
        run.font.size = Pt(size)
        run.bold = bold
        run.italic = italic
        return paragraph

    def _render_section(self, doc: DocumentObject, section: LayoutSection) -> Paragraph:
        """Render one layout section and return its first paragraph."""
        if section.kind == SectionKind.TITLE_PAGE:
            first = doc.add_heading(section.heading or "", level=0)
            first.alignment = WD_ALIGN_PARAGRAPH.CENTER
            first.paragraph_format.space_before = Pt(144)
            for line in section.paragraphs:
                self._add_centered(doc, line, self.options.font_size + 2, italic=True)
            return first

        if section.kind == SectionKind.COPYRIGHT:
            first = None
            for line in section.paragraphs:
                paragraph = self._add_centered(doc, line, max(self.options.font_size - 2, 8))
                first = first or paragraph
            return first

        if section.kind == SectionKind.CLOSING:
            first = self._add_centered(
                doc, section.paragraphs[0], self.defaults.heading_font_size, bold=True
            )
            first.paragraph_format.space_before = Pt(144)
            return first

        first = doc.add_heading(section.heading or "", level=1)
        if section.kind == SectionKind.TABLE_OF_CONTENTS:
            for entry in section.paragraphs:
                doc.add_paragraph(entry)
        else:
            for text in section.paragraphs:
                self._add_body_paragraph(doc, text)
        return first

    def generate(self, book: Book) -> bytes:
        """
        Generate the document.

        Args:
            book: Assembled book

        Returns:
            The .docx file as bytes
        """
        doc = Document()
        doc.core_properties.title = book.title
        doc.core_properties.author = book.author_name
        doc.core_properties.subject = book.subtitle or ""
        doc.core_properties.comments = book.synopsis[:255]
        doc.core_properties.last_modified_by = self.defaults.creator
        doc.core_properties.language = book.language

        self._setup_page(doc)
        self._add_body_style(doc)

        layout = build_layout(book, include_toc=self.options.include_toc)
        for index, section in enumerate(layout):
            first = self._render_section(doc, section)
            if index > 0:
                first.paragraph_format.page_break_before = True

        out = io.BytesIO()
        doc.save(out)
        logger.info(f"DOCX generated for '{book.title}': {len(layout)} sections")
        return out.getvalue()


def generate_docx(
    book: Book,
    options: Optional[ExportOptions] = None,
    defaults: Optional[ExportDefaults] = None,
) -> bytes:
    """
    Convenience function to render a book as DOCX.

    Args:
        book: Assembled book
        options: Font, size and line spacing (uses defaults if not provided)
        defaults: Page geometry

    Returns:
        The .docx file as bytes
    """
    return DocxBookGenerator(options, defaults).generate(book)
