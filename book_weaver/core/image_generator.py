"""
Image Generator for Book Covers.

This module handles AI cover generation using the OpenRouter API.
Each call is a fresh generation; a revision is requested by carrying
feedback text in the prompt, never by editing the previous image.
"""

from __future__ import annotations

import io
import base64
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from PIL import Image

from book_weaver.core.config import ImageConfig
from book_weaver.core.exceptions import CoverGenerationError
from book_weaver.core.models import CoverImage, GenerationConfig
from book_weaver.core.prompts import build_cover_prompt

logger = logging.getLogger(__name__)


@dataclass
class GeneratedImage:
    """Result of image generation."""
    success: bool
    image_data: Optional[bytes] = None
    error: Optional[str] = None
    prompt_used: Optional[str] = None


def _normalize_image_bytes(raw: bytes, quality: int = 90) -> bytes:
    """Validate image bytes with PIL and re-encode as JPEG.

    AI models may return WebP, PNG, or other formats regardless of what the
    data-URL header claims. Covers are always delivered as JPEG.
    """
    img = Image.open(io.BytesIO(raw))
    img.load()  # force full decode, raises early on corrupt data
    if img.mode != "RGB":
        img = img.convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def _first_image_url(data: dict) -> Optional[str]:
    """Pull choices[0].message.images[0].image_url.url out of a completion."""
    choices = data.get("choices") or []
    if not choices:
        return None
    images = choices[0].get("message", {}).get("images") or []
    if not images:
        return None
    return images[0].get("image_url", {}).get("url") or None


def _decode_data_url(url: str) -> bytes:
    """
    Decode "data:image/png;base64,<payload>".

    Raises:
        ValueError: not a base64 data URL
    """
    header, sep, encoded = url.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise ValueError(f"Unexpected image URL: {url[:100]}")
    return base64.b64decode(encoded)


class OpenRouterImageGenerator:
    """Text-to-image through OpenRouter chat completions with the image modality."""

    def __init__(self, config: ImageConfig):
        self.config = config
        self.headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/book-weaver",
            "X-Title": "AI Book Weaver"
        }

    def _payload(self, prompt: str) -> dict:
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": f"Generate an image: {prompt}"}],
            "modalities": ["image"],
            "image_generation": {"aspect_ratio": self.config.aspect_ratio},
        }

    async def generate(self, prompt: str) -> GeneratedImage:
        """Generate one image. Failures are reported in the result, never raised."""
        if not self.config.validate():
            return GeneratedImage(
                success=False,
                error="OpenRouter API key not configured. Set OPENROUTER_API_KEY in .env file.",
                prompt_used=prompt,
            )

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.post(
                    self.config.base_url, headers=self.headers, json=self._payload(prompt)
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Image API HTTP error: {e.response.status_code} - {e.response.text[:500]}")
            return GeneratedImage(
                success=False,
                error=f"API error: {e.response.status_code} - {e.response.text}",
                prompt_used=prompt,
            )
        except (httpx.RequestError, ValueError) as e:
            logger.error(f"Image request failed: {e}", exc_info=True)
            return GeneratedImage(success=False, error=f"Request failed: {e}", prompt_used=prompt)

        url = _first_image_url(data)
        if not url:
            logger.warning("No image in response")
            return GeneratedImage(success=False, error="No image was generated.", prompt_used=prompt)

        try:
            image_bytes = _normalize_image_bytes(_decode_data_url(url), self.config.jpeg_quality)
        except Exception as e:
            logger.error(f"Image validation failed: {e}")
            return GeneratedImage(
                success=False, error=f"Image validation failed: {e}", prompt_used=prompt
            )

        return GeneratedImage(success=True, image_data=image_bytes, prompt_used=prompt)


class CoverGenerator:
    """Builds the cover prompt and turns a generated image into a CoverImage."""

    def __init__(self, config: Optional[ImageConfig] = None):
        self.config = config or ImageConfig()
        self.generator = OpenRouterImageGenerator(self.config)

    async def generate_cover(
        self,
        config: GenerationConfig,
        synopsis: str,
        feedback: Optional[str] = None,
    ) -> CoverImage:
        """
        Generate one cover image.

        Args:
            config: Generation snapshot of the book (title, author, genre...)
            synopsis: Synopsis from the outline
            feedback: Optional correction instructions for a revision

        Raises:
            CoverGenerationError: when no usable image comes back
        """
        prompt = build_cover_prompt(config, synopsis, feedback)
        result = await self.generator.generate(prompt)
        if not result.success or not result.image_data:
            logger.error(f"Cover generation failed for '{config.title}': {result.error}")
            raise CoverGenerationError("Failed to generate cover image.")

        logger.info(f"Cover generated for '{config.title}' ({len(result.image_data)} bytes)")
        feedback = feedback.strip() if feedback and feedback.strip() else None
        return CoverImage(data=result.image_data, prompt=prompt, feedback=feedback)
