"""Integration tests for book_weaver/core/llm_connector.py (mocked HTTP)."""

import json
import pytest
from unittest.mock import AsyncMock, patch, MagicMock

import httpx

from book_weaver.core.config import LLMConfig
from book_weaver.core.exceptions import (
    BioGenerationError,
    ContentGenerationError,
    OutlineGenerationError,
    PublishingDetailsError,
    TitleSuggestionError,
)
from book_weaver.core.llm_connector import OpenRouterClient


@pytest.fixture
def client(llm_config):
    return OpenRouterClient(llm_config)


def _mock_httpx_response(data: dict, status_code: int = 200):
    """Create a mock httpx.Response."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.json.return_value = data
    response.text = json.dumps(data)
    response.raise_for_status = MagicMock()
    if status_code >= 400:
        http_error = httpx.HTTPStatusError(
            "error", request=MagicMock(), response=response
        )
        response.raise_for_status.side_effect = http_error
    return response


def _completion(content: str, tokens: int = 10) -> dict:
    return {
        "choices": [{"message": {"content": content}}],
        "usage": {"total_tokens": tokens},
    }


def _patch_client(response=None, side_effect=None):
    """Patch httpx.AsyncClient inside the connector; returns (patcher, instance)."""
    patcher = patch("book_weaver.core.llm_connector.httpx.AsyncClient")
    mock_client_cls = patcher.start()
    mock_instance = AsyncMock()
    if side_effect is not None:
        mock_instance.post.side_effect = side_effect
    else:
        mock_instance.post.return_value = response
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_instance
    return patcher, mock_instance


@pytest.fixture
def mock_post():
    """Yields a function that installs a mocked AsyncClient for one test."""
    patchers = []

    def _install(response=None, side_effect=None):
        patcher, instance = _patch_client(response, side_effect)
        patchers.append(patcher)
        return instance

    yield _install
    for patcher in patchers:
        patcher.stop()


class TestOpenRouterClientCallLLM:
    async def test_successful_call(self, client, mock_post):
        mock_post(_mock_httpx_response(_completion("  Hello world  ", 42)))
        result = await client._call_llm("test prompt")
        assert result.success is True
        assert result.content == "Hello world"
        assert result.tokens_used == 42

    async def test_no_api_key(self):
        client = OpenRouterClient(LLMConfig(api_key=""))
        result = await client._call_llm("test")
        assert result.success is False
        assert "not configured" in result.error.lower()

    async def test_http_error(self, client, mock_post):
        mock_post(_mock_httpx_response({"error": "bad"}, status_code=500))
        result = await client._call_llm("test")
        assert result.success is False
        assert "API error" in result.error

    async def test_request_error(self, client, mock_post):
        mock_post(side_effect=httpx.RequestError("connection failed"))
        result = await client._call_llm("test")
        assert result.success is False
        assert "Request failed" in result.error

    async def test_malformed_body(self, client, mock_post):
        mock_post(_mock_httpx_response({"choices": []}))
        result = await client._call_llm("test")
        assert result.success is False
        assert "Invalid response format" in result.error

    async def test_payload(self, client, mock_post):
        instance = mock_post(_mock_httpx_response(_completion("{}")))
        fmt = {"type": "json_schema", "json_schema": {"name": "x"}}
        await client._call_llm("prompt", response_format=fmt, model_override="other/model")
        payload = instance.post.call_args.kwargs["json"]
        assert payload["response_format"] == fmt
        assert payload["model"] == "other/model"
        assert payload["messages"][0]["content"] == "prompt"


class TestGenerateOutline:
    async def test_parses_outline(self, client, generation_config, mock_post):
        body = json.dumps({
            "synopsis": "A calm guide.",
            "introductionTitle": "Intro",
            "chapterTitles": ["One", "Two"],
            "conclusionTitle": "End",
        })
        instance = mock_post(_mock_httpx_response(_completion(body)))
        outline = await client.generate_outline(generation_config)
        assert outline.chapter_titles == ["One", "Two"]
        payload = instance.post.call_args.kwargs["json"]
        assert payload["model"] == client.config.outline_model
        assert payload["response_format"]["type"] == "json_schema"

    async def test_malformed_outline(self, client, generation_config, mock_post):
        mock_post(_mock_httpx_response(_completion("not json at all")))
        with pytest.raises(OutlineGenerationError) as exc_info:
            await client.generate_outline(generation_config)
        assert exc_info.value.message == "Failed to generate book outline."

    async def test_non_string_chapter_title(self, client, generation_config, mock_post):
        body = json.dumps({
            "synopsis": "A calm guide.",
            "introductionTitle": "Intro",
            "chapterTitles": ["One", 42, "", None, "Two"],
            "conclusionTitle": "End",
        })
        mock_post(_mock_httpx_response(_completion(body)))
        with pytest.raises(OutlineGenerationError):
            await client.generate_outline(generation_config)

    async def test_api_failure(self, client, generation_config, mock_post):
        mock_post(side_effect=httpx.RequestError("down"))
        with pytest.raises(OutlineGenerationError):
            await client.generate_outline(generation_config)


class TestGenerateSection:
    async def test_returns_prose(self, client, generation_config, mock_post):
        mock_post(_mock_httpx_response(_completion("Once there was soil.")))
        text = await client.generate_section(generation_config, "Chapter 1", "Synopsis")
        assert text == "Once there was soil."

    async def test_empty_reply_is_failure(self, client, generation_config, mock_post):
        mock_post(_mock_httpx_response(_completion("   ")))
        with pytest.raises(ContentGenerationError) as exc_info:
            await client.generate_section(generation_config, "Chapter 1", "Synopsis")
        assert exc_info.value.section_title == "Chapter 1"
        assert exc_info.value.message == 'Failed to generate content for chapter: "Chapter 1".'


class TestSideCalls:
    async def test_author_bio(self, client, mock_post):
        mock_post(_mock_httpx_response(_completion("Jane writes.")))
        assert await client.generate_author_bio("Jane", "Book", "Self-Help") == "Jane writes."

    async def test_author_bio_failure(self, client, mock_post):
        mock_post(_mock_httpx_response({}, status_code=429))
        with pytest.raises(BioGenerationError):
            await client.generate_author_bio("Jane", "Book", "Self-Help")

    async def test_suggest_titles(self, client, mock_post):
        mock_post(_mock_httpx_response(_completion(json.dumps({"titles": ["A", "B", "C"]}))))
        assert await client.suggest_titles("Book") == ["A", "B", "C"]

    async def test_suggest_titles_malformed(self, client, mock_post):
        mock_post(_mock_httpx_response(_completion(json.dumps({"titles": ["A"]}))))
        with pytest.raises(TitleSuggestionError):
            await client.suggest_titles("Book")

    async def test_publishing_details(self, client, generation_config, mock_post):
        body = json.dumps({
            "description": "<p>Great.</p>",
            "keywords": ["a", "b", "c", "d", "e", "f", "g"],
            "category": "Nonfiction > Self-Help",
        })
        mock_post(_mock_httpx_response(_completion(body)))
        details = await client.generate_publishing_details(generation_config, "Synopsis")
        assert details.keywords == ["a", "b", "c", "d", "e", "f", "g"]

    async def test_publishing_details_failure(self, client, generation_config, mock_post):
        mock_post(side_effect=httpx.RequestError("down"))
        with pytest.raises(PublishingDetailsError):
            await client.generate_publishing_details(generation_config, "Synopsis")
