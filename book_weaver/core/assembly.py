"""
Book assembly.

Pure merge of the generation snapshot, the outline and the expanded sections
into one Book. Nothing here talks to the network.
"""

from datetime import date
from typing import List, Optional, Sequence

from book_weaver.core.exceptions import AssemblyError
from book_weaver.core.models import Book, BookOutline, Chapter, GenerationConfig


def build_copyright_line(author_name: str, year: Optional[int] = None) -> str:
    """Derive the copyright line from the author and the current year."""
    if year is None:
        year = date.today().year
    return f"Copyright © {year} {author_name}. All rights reserved."


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


def assemble_book(
    config: GenerationConfig,
    outline: BookOutline,
    sections: Sequence[Chapter],
    author_bio: Optional[str] = None,
    year: Optional[int] = None,
) -> Book:
    """
    Merge everything into the final Book.

    Args:
        config: Generation snapshot
        outline: Outline the sections were expanded from
        sections: Introduction, chapters, conclusion, in outline order
        author_bio: Generated bio; falls back to the one typed into the form
        year: Copyright year (defaults to the current year)

    Raises:
        AssemblyError: if the sections do not line up with the outline
    """
    expected = outline.section_titles()
    if len(sections) != len(expected):
        raise AssemblyError(
            f"Expected {len(expected)} sections, got {len(sections)}"
        )
    for index, (section, title) in enumerate(zip(sections, expected)):
        if section.title != title:
            raise AssemblyError(
                f"Section {index} is '{section.title}', expected '{title}'"
            )

    chapters: List[Chapter] = list(sections[1:-1])

    return Book(
        title=config.title,
        subtitle=_clean(config.subtitle),
        author_name=config.author_name,
        copyright=build_copyright_line(config.author_name, year),
        dedication=_clean(config.dedication),
        acknowledgements=_clean(config.acknowledgements),
        author_bio=_clean(author_bio) or _clean(config.author_bio),
        synopsis=outline.synopsis,
        introduction=sections[0],
        chapters=chapters,
        conclusion=sections[-1],
        language=config.language,
    )
