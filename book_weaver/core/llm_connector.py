"""
OpenRouter LLM Connector.

This module handles communication with OpenRouter API for every text call
of the pipeline: outline, section prose, author bio, title suggestions and
publishing metadata.
"""

import httpx
import json
import logging
from typing import List, Optional
from dataclasses import dataclass

from book_weaver.core.config import LLMConfig
from book_weaver.core.exceptions import (
    BioGenerationError,
    ContentGenerationError,
    OutlineGenerationError,
    PublishingDetailsError,
    TitleSuggestionError,
)
from book_weaver.core.models import BookOutline, GenerationConfig, PublishingDetails
from book_weaver.core.prompts import (
    build_alternative_titles_prompt,
    build_author_bio_prompt,
    build_outline_prompt,
    build_publishing_details_prompt,
    build_section_prompt,
    get_alternative_titles_response_format,
    get_outline_response_format,
    get_publishing_details_response_format,
    parse_alternative_titles_response,
    parse_outline_response,
    parse_publishing_details_response,
)


logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM API."""
    content: str
    tokens_used: int
    success: bool
    error: Optional[str] = None


class OpenRouterClient:
    """Client for OpenRouter API for book planning and writing."""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self.headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/book-weaver",
            "X-Title": "AI Book Weaver"
        }

    async def _call_llm(
        self,
        prompt: str,
        response_format: Optional[dict] = None,
        model_override: Optional[str] = None
    ) -> LLMResponse:
        """
        Make a call to the LLM API.

        Args:
            prompt: The prompt to send
            response_format: Optional response format for structured outputs
                            (e.g., {"type": "json_schema", "json_schema": {...}})
            model_override: Optional model to use instead of config.model

        Returns:
            LLMResponse with the result
        """
        if not self.config.validate():
            return LLMResponse(
                content="",
                tokens_used=0,
                success=False,
                error="OpenRouter API key not configured. Set OPENROUTER_API_KEY in .env file."
            )

        payload = {
            "model": model_override or self.config.model,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature
        }

        if response_format:
            payload["response_format"] = response_format

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.post(
                    f"{self.config.base_url}/chat/completions",
                    headers=self.headers,
                    json=payload
                )
                response.raise_for_status()

                data = response.json()
                content = data["choices"][0]["message"]["content"] or ""
                tokens = data.get("usage", {}).get("total_tokens", 0)

                return LLMResponse(
                    content=content.strip(),
                    tokens_used=tokens,
                    success=True
                )

        except httpx.HTTPStatusError as e:
            return LLMResponse(
                content="",
                tokens_used=0,
                success=False,
                error=f"API error: {e.response.status_code} - {e.response.text}"
            )
        except httpx.RequestError as e:
            return LLMResponse(
                content="",
                tokens_used=0,
                success=False,
                error=f"Request failed: {str(e)}"
            )
        except (KeyError, IndexError, TypeError, json.JSONDecodeError) as e:
            return LLMResponse(
                content="",
                tokens_used=0,
                success=False,
                error=f"Invalid response format: {str(e)}"
            )

    async def generate_outline(self, config: GenerationConfig) -> BookOutline:
        """
        Plan the book: synopsis, introduction title, chapter titles, conclusion title.
        Uses the outline model with structured outputs.

        Raises:
            OutlineGenerationError: on any API failure or malformed reply
        """
        response = await self._call_llm(
            build_outline_prompt(config),
            response_format=get_outline_response_format(),
            model_override=self.config.outline_model,
        )
        if not response.success:
            logger.error(f"Outline call failed: {response.error}")
            raise OutlineGenerationError("Failed to generate book outline.")

        try:
            outline = parse_outline_response(response.content)
        except ValueError as e:
            logger.error(f"Could not parse outline response: {e}")
            raise OutlineGenerationError("Failed to generate book outline.") from e

        logger.info(
            f"Outline ready for '{config.title}': {len(outline.chapter_titles)} chapters, "
            f"{response.tokens_used} tokens"
        )
        return outline

    async def generate_section(
        self,
        config: GenerationConfig,
        section_title: str,
        synopsis: str,
    ) -> str:
        """
        Write the prose of one section. Independent of every other section.

        Raises:
            ContentGenerationError: on API failure or an empty reply
        """
        response = await self._call_llm(build_section_prompt(config, section_title, synopsis))
        if not response.success or not response.content:
            logger.error(f"Content call failed for '{section_title}': {response.error or 'empty response'}")
            raise ContentGenerationError(
                f'Failed to generate content for chapter: "{section_title}".',
                section_title=section_title,
            )
        return response.content

    async def generate_author_bio(
        self,
        author_name: str,
        book_title: str,
        category: str,
        language: str = "English",
    ) -> str:
        """
        Write a short author biography.

        Raises:
            BioGenerationError: on API failure or an empty reply
        """
        response = await self._call_llm(
            build_author_bio_prompt(author_name, book_title, category, language)
        )
        if not response.success or not response.content:
            logger.error(f"Author bio call failed: {response.error or 'empty response'}")
            raise BioGenerationError("Failed to generate author bio.")
        return response.content

    async def suggest_titles(self, title: str, language: str = "English") -> List[str]:
        """
        Suggest three alternative titles. Purely advisory.

        Raises:
            TitleSuggestionError: on API failure or malformed reply
        """
        response = await self._call_llm(
            build_alternative_titles_prompt(title, language),
            response_format=get_alternative_titles_response_format(),
        )
        if not response.success:
            logger.error(f"Title suggestion call failed: {response.error}")
            raise TitleSuggestionError("Failed to generate alternative titles.")
        try:
            return parse_alternative_titles_response(response.content)
        except ValueError as e:
            logger.error(f"Could not parse title suggestions: {e}")
            raise TitleSuggestionError("Failed to generate alternative titles.") from e

    async def generate_publishing_details(
        self,
        config: GenerationConfig,
        synopsis: str,
    ) -> PublishingDetails:
        """
        Generate store description, seven keywords and a category path.

        Raises:
            PublishingDetailsError: on API failure or malformed reply
        """
        response = await self._call_llm(
            build_publishing_details_prompt(config, synopsis),
            response_format=get_publishing_details_response_format(),
        )
        if not response.success:
            logger.error(f"Publishing details call failed: {response.error}")
            raise PublishingDetailsError("Failed to generate publishing details.")
        try:
            return parse_publishing_details_response(response.content)
        except ValueError as e:
            logger.error(f"Could not parse publishing details: {e}")
            raise PublishingDetailsError("Failed to generate publishing details.") from e
