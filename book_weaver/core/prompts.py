"""
Prompts for LLM and Image Generation.

This module centralizes all prompts sent to OpenRouter for book planning,
chapter writing, author bios, title ideas, publishing metadata and covers,
together with the JSON schemas used for structured outputs and the parsers
that turn the replies into domain records.
"""

import json
import re
from typing import Any, List, Optional

from book_weaver.core.models import BookOutline, GenerationConfig, PublishingDetails


PUBLISHING_KEYWORD_COUNT = 7
ALTERNATIVE_TITLE_COUNT = 3


def _load_json_payload(response_text: str) -> Any:
    """
    Decode a JSON reply, tolerating a markdown fence around it.

    Raises:
        ValueError: if no JSON object can be decoded
    """
    text = response_text.strip()
    text = re.sub(r"^```(?:json)?\s*", "", text)
    text = re.sub(r"\s*```$", "", text)

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        json_match = re.search(r"\{[\s\S]*\}", text)
        if not json_match:
            raise ValueError("Response is not valid JSON")
        try:
            return json.loads(json_match.group())
        except json.JSONDecodeError as e:
            raise ValueError(f"Response is not valid JSON: {e}") from e


def _required_string(data: dict, *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    raise ValueError(f"Missing required field: {keys[0]}")


def _string_list(data: dict, key: str, strict: bool = False) -> List[str]:
    """
    Read a list of non-blank strings.

    With strict=True an entry that is not a non-blank string is an error;
    otherwise such entries are skipped.
    """
    value = data.get(key)
    if not isinstance(value, list):
        raise ValueError(f"Field '{key}' must be a list")
    items = []
    for position, item in enumerate(value):
        if isinstance(item, str) and item.strip():
            items.append(item.strip())
        elif strict:
            raise ValueError(f"Field '{key}' has an invalid entry at position {position}: {item!r}")
    return items


# =============================================================================
# BOOK OUTLINE
# =============================================================================

BOOK_OUTLINE_PROMPT_TEMPLATE = """You are a master book planner. Generate a detailed book outline based on the following specifications.

- Title: "{title}"
- Subtitle: "{subtitle}"
- Genre: {genre}
- Category: {category}
- Tone: {tone}
- Target Audience: {target_audience}
- Desired Length: {word_count}

Your task is to create an outline that includes:
1. A compelling synopsis (150-200 words).
2. An engaging title for the Introduction.
3. A list of 10 to 15 sequential and descriptive chapter titles.
4. An impactful title for the Conclusion.

IMPORTANT: Generate all content (synopsis, titles) in {language}.
The structure must be logical and flow naturally from one topic to the next, keeping the target audience and tone in mind."""


BOOK_OUTLINE_JSON_SCHEMA = {
    "name": "book_outline",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "synopsis": {
                "type": "string",
                "description": "A compelling and brief synopsis of the book, around 150-200 words, that explains the central theme."
            },
            "introductionTitle": {
                "type": "string",
                "description": "A suitable title for the introduction chapter."
            },
            "chapterTitles": {
                "type": "array",
                "description": "An array of 10 to 15 engaging and sequential chapter titles.",
                "items": {"type": "string"}
            },
            "conclusionTitle": {
                "type": "string",
                "description": "A suitable title for the concluding chapter."
            }
        },
        "required": ["synopsis", "introductionTitle", "chapterTitles", "conclusionTitle"],
        "additionalProperties": False
    }
}


def build_outline_prompt(config: GenerationConfig) -> str:
    """Build the planning prompt for a generation snapshot."""
    return BOOK_OUTLINE_PROMPT_TEMPLATE.format(
        title=config.title,
        subtitle=config.subtitle or "N/A",
        genre=config.genre.value,
        category=config.category or "General",
        tone=config.tone,
        target_audience=config.target_audience,
        word_count=config.word_count.value,
        language=config.language,
    )


def get_outline_response_format() -> dict:
    """Get the response_format parameter for the outline call."""
    return {
        "type": "json_schema",
        "json_schema": BOOK_OUTLINE_JSON_SCHEMA
    }


def parse_outline_response(response_text: str) -> BookOutline:
    """
    Parse the LLM response into a BookOutline.

    Accepts both the camelCase keys of the schema and snake_case keys.

    Raises:
        ValueError: if the reply is not JSON or a field is missing/empty
    """
    data = _load_json_payload(response_text)
    if not isinstance(data, dict):
        raise ValueError("Outline response must be a JSON object")

    chapter_key = "chapterTitles" if "chapterTitles" in data else "chapter_titles"
    chapter_titles = _string_list(data, chapter_key, strict=True)
    if not chapter_titles:
        raise ValueError("Outline has no chapter titles")

    return BookOutline(
        synopsis=_required_string(data, "synopsis"),
        introduction_title=_required_string(data, "introductionTitle", "introduction_title"),
        chapter_titles=chapter_titles,
        conclusion_title=_required_string(data, "conclusionTitle", "conclusion_title"),
    )


# =============================================================================
# CHAPTER CONTENT
# =============================================================================

SECTION_CONTENT_PROMPT_TEMPLATE = """You are an expert author writing in a {tone} style for {target_audience}.
Your current project is a {genre} book titled "{title}".
The overall book synopsis is: "{synopsis}".

You are now writing the chapter titled: "{section_title}".

Please write the full content for this chapter in {language}.
- The content should be approximately 1,500 to 3,000 words.
- The writing must be clear, engaging, and consistent with the book's overall tone and genre.
- If non-fiction, use explanations, examples, and storytelling.
- If fiction, develop characters, plot, and dialogue.
- Do not repeat the chapter title in the content. Begin directly with the chapter text."""


def build_section_prompt(config: GenerationConfig, section_title: str, synopsis: str) -> str:
    """Build the prose prompt for one section (introduction, chapter or conclusion)."""
    return SECTION_CONTENT_PROMPT_TEMPLATE.format(
        tone=config.tone,
        target_audience=config.target_audience,
        genre=config.genre.value,
        title=config.title,
        synopsis=synopsis,
        section_title=section_title,
        language=config.language,
    )


# =============================================================================
# AUTHOR BIO
# =============================================================================

AUTHOR_BIO_PROMPT_TEMPLATE = """Write a short, professional author biography in {language} for an author named {author_name}.
They have just written a book titled "{book_title}" in the "{category}" category.
The biography should be about 100-150 words.
The tone should be engaging, establish credibility in the category's subject matter, and mention their motivation for writing the book.
Do not include contact information."""


def build_author_bio_prompt(author_name: str, book_title: str, category: str, language: str) -> str:
    return AUTHOR_BIO_PROMPT_TEMPLATE.format(
        language=language,
        author_name=author_name,
        book_title=book_title,
        category=category or "General",
    )


# =============================================================================
# ALTERNATIVE TITLES
# =============================================================================

ALTERNATIVE_TITLES_PROMPT_TEMPLATE = """Based on the book title "{title}", suggest 3 alternative, more captivating titles. The new titles should explore different angles or aspects of the core theme implied by the original title.
IMPORTANT: Generate the titles in {language}.
Return the response as a JSON object with a single key "titles" which is an array of 3 strings."""


ALTERNATIVE_TITLES_JSON_SCHEMA = {
    "name": "alternative_titles",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "titles": {
                "type": "array",
                "description": "An array of exactly 3 alternative, captivating book titles.",
                "items": {"type": "string"}
            }
        },
        "required": ["titles"],
        "additionalProperties": False
    }
}


def build_alternative_titles_prompt(title: str, language: str) -> str:
    return ALTERNATIVE_TITLES_PROMPT_TEMPLATE.format(title=title, language=language)


def get_alternative_titles_response_format() -> dict:
    return {
        "type": "json_schema",
        "json_schema": ALTERNATIVE_TITLES_JSON_SCHEMA
    }


def parse_alternative_titles_response(response_text: str) -> List[str]:
    """
    Parse the title suggestions, keeping the first three.

    Raises:
        ValueError: if fewer than three usable titles come back
    """
    data = _load_json_payload(response_text)
    if not isinstance(data, dict):
        raise ValueError("Titles response must be a JSON object")
    titles = _string_list(data, "titles")
    if len(titles) < ALTERNATIVE_TITLE_COUNT:
        raise ValueError(f"Expected {ALTERNATIVE_TITLE_COUNT} titles, got {len(titles)}")
    return titles[:ALTERNATIVE_TITLE_COUNT]


# =============================================================================
# PUBLISHING DETAILS
# =============================================================================

PUBLISHING_DETAILS_PROMPT_TEMPLATE = """You are an expert in book marketing for Amazon KDP.
Based on the following book details, generate the necessary metadata for publishing.
- Title: "{title}"
- Synopsis: "{synopsis}"
- Genre: {genre}
- Category: {category}
- Target Audience: {target_audience}

Your task is to create:
1. A compelling book description (150-200 words) that hooks the reader.
2. Exactly 7 specific keywords that potential readers would use to find this book.
3. The most fitting and specific KDP category path.

IMPORTANT: Generate all content in {language}.
Return a valid JSON object matching the provided schema."""


PUBLISHING_DETAILS_JSON_SCHEMA = {
    "name": "publishing_details",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "description": {
                "type": "string",
                "description": "A compelling book description, optimized for online stores like Amazon KDP, around 150-200 words."
            },
            "keywords": {
                "type": "array",
                "description": "An array of exactly 7 relevant keywords for search discoverability on KDP.",
                "items": {"type": "string"}
            },
            "category": {
                "type": "string",
                "description": "The most specific and appropriate Amazon KDP category path for the book (e.g., 'Books > Science Fiction & Fantasy > Fantasy > Epic')."
            }
        },
        "required": ["description", "keywords", "category"],
        "additionalProperties": False
    }
}


def build_publishing_details_prompt(config: GenerationConfig, synopsis: str) -> str:
    return PUBLISHING_DETAILS_PROMPT_TEMPLATE.format(
        title=config.title,
        synopsis=synopsis,
        genre=config.genre.value,
        category=config.category or "General",
        target_audience=config.target_audience,
        language=config.language,
    )


def get_publishing_details_response_format() -> dict:
    return {
        "type": "json_schema",
        "json_schema": PUBLISHING_DETAILS_JSON_SCHEMA
    }


def parse_publishing_details_response(response_text: str) -> PublishingDetails:
    """
    Parse publishing metadata.

    Raises:
        ValueError: on malformed JSON or when there are not exactly seven distinct keywords
    """
    data = _load_json_payload(response_text)
    if not isinstance(data, dict):
        raise ValueError("Publishing details response must be a JSON object")

    keywords: List[str] = []
    for keyword in _string_list(data, "keywords"):
        if keyword.lower() not in (k.lower() for k in keywords):
            keywords.append(keyword)
    if len(keywords) != PUBLISHING_KEYWORD_COUNT:
        raise ValueError(
            f"Expected {PUBLISHING_KEYWORD_COUNT} keywords, got {len(keywords)}"
        )

    return PublishingDetails(
        description=_required_string(data, "description"),
        keywords=keywords,
        category=_required_string(data, "category"),
    )


# =============================================================================
# COVER IMAGE
# =============================================================================

COVER_IMAGE_PROMPT_TEMPLATE = """Create a stunning, high-quality book cover for a book with the following details:
- Title: "{title}"
- Author: "{author_name}"
- Synopsis: "{synopsis}"
- Genre: {genre}
- Category: {category}
- Tone: {tone}
- Target Audience: {target_audience}

The cover style should be modern, artistic, and eye-catching, suitable for a bestseller.

CRITICAL INSTRUCTION: The cover MUST include the exact book title "{title}" and the author's name "{author_name}".
The text must be clear, professional, and elegantly integrated into the design. Use a readable, high-quality font.
The background art should be visually compelling and representative of the book's theme."""

COVER_FEEDBACK_TEMPLATE = (
    "\n\nIMPORTANT CORRECTION INSTRUCTIONS: The user has provided feedback on a previous version. "
    'Please modify the image based on the following instructions: "{feedback}"'
)


def build_cover_prompt(
    config: GenerationConfig,
    synopsis: str,
    feedback: Optional[str] = None,
) -> str:
    """
    Build the cover prompt. Non-blank feedback is appended as a correction.
    """
    prompt = COVER_IMAGE_PROMPT_TEMPLATE.format(
        title=config.title,
        author_name=config.author_name,
        synopsis=synopsis,
        genre=config.genre.value,
        category=config.category or "General",
        tone=config.tone,
        target_audience=config.target_audience,
    )
    if feedback and feedback.strip():
        prompt += COVER_FEEDBACK_TEMPLATE.format(feedback=feedback.strip())
    return prompt
