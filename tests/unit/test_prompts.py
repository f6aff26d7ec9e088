"""Unit tests for book_weaver/core/prompts.py."""

import json

import pytest

from book_weaver.core.models import GenerationConfig, Genre
from book_weaver.core.prompts import (
    build_cover_prompt,
    build_outline_prompt,
    build_section_prompt,
    get_outline_response_format,
    parse_alternative_titles_response,
    parse_outline_response,
    parse_publishing_details_response,
)


OUTLINE_JSON = {
    "synopsis": "A calm guide.",
    "introductionTitle": "Introduction",
    "chapterTitles": ["One", "Two", "Three"],
    "conclusionTitle": "Conclusion",
}


class TestOutlinePrompt:
    def test_prompt_mentions_settings(self, generation_config):
        prompt = build_outline_prompt(generation_config)
        assert "The Quiet Garden" in prompt
        assert "Non-Fiction" in prompt
        assert "10,000-25,000 words" in prompt
        assert "English" in prompt

    def test_response_format_is_json_schema(self):
        fmt = get_outline_response_format()
        assert fmt["type"] == "json_schema"
        assert "schema" in fmt["json_schema"]


class TestParseOutline:
    def test_camel_case(self):
        outline = parse_outline_response(json.dumps(OUTLINE_JSON))
        assert outline.synopsis == "A calm guide."
        assert outline.chapter_titles == ["One", "Two", "Three"]
        assert outline.section_titles() == ["Introduction", "One", "Two", "Three", "Conclusion"]

    def test_snake_case(self):
        data = {
            "synopsis": "S",
            "introduction_title": "Intro",
            "chapter_titles": ["A"],
            "conclusion_title": "End",
        }
        outline = parse_outline_response(json.dumps(data))
        assert outline.introduction_title == "Intro"
        assert outline.conclusion_title == "End"

    def test_fenced_json(self):
        text = "```json\n" + json.dumps(OUTLINE_JSON) + "\n```"
        assert parse_outline_response(text).conclusion_title == "Conclusion"

    def test_json_with_surrounding_text(self):
        text = "Here is the outline:\n" + json.dumps(OUTLINE_JSON) + "\nEnjoy!"
        assert len(parse_outline_response(text).chapter_titles) == 3

    def test_not_json(self):
        with pytest.raises(ValueError):
            parse_outline_response("I cannot help with that.")

    def test_empty_chapters(self):
        data = dict(OUTLINE_JSON, chapterTitles=[])
        with pytest.raises(ValueError):
            parse_outline_response(json.dumps(data))

    @pytest.mark.parametrize("bad_entry", [42, None, "", "   ", ["nested"]])
    def test_malformed_chapter_entry(self, bad_entry):
        data = dict(OUTLINE_JSON, chapterTitles=["One", bad_entry, "Two"])
        with pytest.raises(ValueError):
            parse_outline_response(json.dumps(data))

    def test_missing_synopsis(self):
        data = dict(OUTLINE_JSON)
        del data["synopsis"]
        with pytest.raises(ValueError):
            parse_outline_response(json.dumps(data))


class TestSectionPrompt:
    def test_contains_section_and_synopsis(self, generation_config):
        prompt = build_section_prompt(generation_config, "Chapter 3: Soil", "A calm guide.")
        assert '"Chapter 3: Soil"' in prompt
        assert "A calm guide." in prompt
        assert "Warm" in prompt


class TestParseTitles:
    def test_keeps_first_three(self):
        text = json.dumps({"titles": ["A", "B", "C", "D"]})
        assert parse_alternative_titles_response(text) == ["A", "B", "C"]

    def test_too_few(self):
        with pytest.raises(ValueError):
            parse_alternative_titles_response(json.dumps({"titles": ["A", " "]}))


class TestParsePublishingDetails:
    def _payload(self, keywords):
        return json.dumps({
            "description": "<p>Great book.</p>",
            "keywords": keywords,
            "category": "Nonfiction > Self-Help",
        })

    def test_seven_keywords(self):
        details = parse_publishing_details_response(self._payload([f"k{i}" for i in range(7)]))
        assert details.keywords == [f"k{i}" for i in range(7)]
        assert details.category == "Nonfiction > Self-Help"

    def test_duplicates_do_not_count(self):
        keywords = ["garden", "Garden", "a", "b", "c", "d", "e"]
        with pytest.raises(ValueError):
            parse_publishing_details_response(self._payload(keywords))

    def test_wrong_count(self):
        with pytest.raises(ValueError):
            parse_publishing_details_response(self._payload(["a", "b"]))


class TestCoverPrompt:
    def test_without_feedback(self, generation_config):
        prompt = build_cover_prompt(generation_config, "A calm guide.")
        assert "The Quiet Garden" in prompt
        assert "Jane Doe" in prompt
        assert "CORRECTION" not in prompt

    def test_blank_feedback_ignored(self, generation_config):
        prompt = build_cover_prompt(generation_config, "A calm guide.", feedback="   ")
        assert "CORRECTION" not in prompt

    def test_feedback_appended(self, generation_config):
        prompt = build_cover_prompt(generation_config, "A calm guide.", feedback=" make it blue ")
        assert prompt.endswith('"make it blue"')
        assert "CORRECTION" in prompt

    def test_fiction_genre(self):
        config = GenerationConfig(title="Night Train", author_name="A. Writer", genre=Genre.FICTION)
        assert "Fiction" in build_cover_prompt(config, "A mystery.")
