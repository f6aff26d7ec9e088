"""Unit tests for book_weaver/core/exporter.py."""

from book_weaver.core.exporter import export_book
from book_weaver.core.models import ExportFormat, ExportOptions, safe_filename


class TestExportBook:
    def test_docx_by_default(self, sample_book):
        filename, data = export_book(sample_book)
        assert filename == "The_Quiet_Garden.docx"
        assert data[:2] == b"PK"

    def test_pdf(self, sample_book):
        filename, data = export_book(sample_book, ExportOptions(format=ExportFormat.PDF))
        assert filename == "The_Quiet_Garden.pdf"
        assert data.startswith(b"%PDF")


class TestSafeFilename:
    def test_spaces_become_underscores(self):
        assert safe_filename("My Great Book", ".docx") == "My_Great_Book.docx"

    def test_punctuation_replaced(self):
        assert safe_filename("What? Why!", "_cover.jpg") == "What__Why__cover.jpg"

    def test_empty_title(self):
        assert safe_filename("   ", ".pdf") == "book.pdf"
