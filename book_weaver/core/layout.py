"""
Export layout shared by the DOCX and PDF generators.

Turns a Book into the ordered list of sections that make up the exported
document. Both generators render exactly this list, so the ordering and the
optional-section rules live in one place.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from book_weaver.core.models import END_TEXT_BY_LANGUAGE, Book


class SectionKind(Enum):
    """Kinds of sections in the exported document."""
    TITLE_PAGE = "title_page"
    COPYRIGHT = "copyright"
    DEDICATION = "dedication"
    TABLE_OF_CONTENTS = "table_of_contents"
    SYNOPSIS = "synopsis"
    INTRODUCTION = "introduction"
    CHAPTER = "chapter"
    CONCLUSION = "conclusion"
    ACKNOWLEDGEMENTS = "acknowledgements"
    AUTHOR_BIO = "author_bio"
    CLOSING = "closing"


# Sections whose text is prose and gets the body paragraph formatting
BODY_KINDS = frozenset({
    SectionKind.DEDICATION,
    SectionKind.SYNOPSIS,
    SectionKind.INTRODUCTION,
    SectionKind.CHAPTER,
    SectionKind.CONCLUSION,
    SectionKind.ACKNOWLEDGEMENTS,
    SectionKind.AUTHOR_BIO,
})


@dataclass
class LayoutSection:
    """One section of the exported document. Every section starts on a new page."""
    kind: SectionKind
    heading: Optional[str] = None
    paragraphs: List[str] = field(default_factory=list)

    @property
    def is_body(self) -> bool:
        return self.kind in BODY_KINDS

    @property
    def in_table_of_contents(self) -> bool:
        return self.kind in (SectionKind.INTRODUCTION, SectionKind.CHAPTER, SectionKind.CONCLUSION)


def split_paragraphs(text: Optional[str]) -> List[str]:
    """Split prose on line breaks, dropping blank lines."""
    if not text:
        return []
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [line.strip() for line in normalized.split("\n") if line.strip()]


def get_closing_text(language: str) -> str:
    """Localized text of the closing page."""
    return END_TEXT_BY_LANGUAGE.get(language, END_TEXT_BY_LANGUAGE["English"])


def build_layout(book: Book, include_toc: bool = False) -> List[LayoutSection]:
    """
    Build the document sections in their fixed order.

    Dedication, acknowledgements and author bio are included only when their
    text is non-empty; the table of contents only when requested.
    """
    title_lines = [book.subtitle] if book.subtitle else []
    title_lines.append(book.author_name)

    sections = [
        LayoutSection(SectionKind.TITLE_PAGE, heading=book.title, paragraphs=title_lines),
        LayoutSection(SectionKind.COPYRIGHT, paragraphs=[book.copyright]),
    ]

    dedication = split_paragraphs(book.dedication)
    if dedication:
        sections.append(LayoutSection(SectionKind.DEDICATION, heading="Dedication", paragraphs=dedication))

    if include_toc:
        entries = [book.introduction.title]
        entries.extend(chapter.title for chapter in book.chapters)
        entries.append(book.conclusion.title)
        sections.append(
            LayoutSection(SectionKind.TABLE_OF_CONTENTS, heading="Table of Contents", paragraphs=entries)
        )

    sections.append(
        LayoutSection(SectionKind.SYNOPSIS, heading="Synopsis", paragraphs=split_paragraphs(book.synopsis))
    )
    sections.append(
        LayoutSection(
            SectionKind.INTRODUCTION,
            heading=book.introduction.title,
            paragraphs=split_paragraphs(book.introduction.content),
        )
    )
    for chapter in book.chapters:
        sections.append(
            LayoutSection(
                SectionKind.CHAPTER,
                heading=chapter.title,
                paragraphs=split_paragraphs(chapter.content),
            )
        )
    sections.append(
        LayoutSection(
            SectionKind.CONCLUSION,
            heading=book.conclusion.title,
            paragraphs=split_paragraphs(book.conclusion.content),
        )
    )

    acknowledgements = split_paragraphs(book.acknowledgements)
    if acknowledgements:
        sections.append(
            LayoutSection(SectionKind.ACKNOWLEDGEMENTS, heading="Acknowledgements", paragraphs=acknowledgements)
        )

    bio = split_paragraphs(book.author_bio)
    if bio:
        sections.append(LayoutSection(SectionKind.AUTHOR_BIO, heading="About the Author", paragraphs=bio))

    sections.append(LayoutSection(SectionKind.CLOSING, paragraphs=[get_closing_text(book.language)]))
    return sections
