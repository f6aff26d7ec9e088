"""Integration tests for book_weaver/core/image_generator.py (mocked HTTP)."""

import base64
import io
import json
import pytest
from unittest.mock import AsyncMock, patch, MagicMock

import httpx
from PIL import Image

from book_weaver.core.config import ImageConfig
from book_weaver.core.exceptions import CoverGenerationError
from book_weaver.core.image_generator import (
    CoverGenerator,
    OpenRouterImageGenerator,
    _decode_data_url,
    _normalize_image_bytes,
)
from book_weaver.core.pipeline import CoverArtist


# Minimal valid 1x1 PNG for testing
MINIMAL_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)
MINIMAL_PNG_B64 = base64.b64encode(MINIMAL_PNG).decode()


def _mock_httpx_response(data: dict, status_code: int = 200):
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.json.return_value = data
    response.text = json.dumps(data)
    response.raise_for_status = MagicMock()
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "error", request=MagicMock(), response=response
        )
    return response


def _image_reply(b64: str = MINIMAL_PNG_B64) -> dict:
    return {
        "choices": [{
            "message": {
                "images": [{"image_url": {"url": f"data:image/png;base64,{b64}"}}]
            }
        }]
    }


def _patched_client(response=None, side_effect=None):
    mock_instance = AsyncMock()
    if side_effect is not None:
        mock_instance.post.side_effect = side_effect
    else:
        mock_instance.post.return_value = response
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    return mock_instance


# =============================================================================
# _normalize_image_bytes
# =============================================================================


class TestNormalizeImageBytes:
    def test_png_becomes_jpeg(self):
        data = _normalize_image_bytes(MINIMAL_PNG)
        assert data[:2] == b"\xff\xd8"
        assert Image.open(io.BytesIO(data)).format == "JPEG"

    def test_garbage_raises(self):
        with pytest.raises(Exception):
            _normalize_image_bytes(b"not an image")


# =============================================================================
# _decode_data_url
# =============================================================================


class TestDecodeDataUrl:
    def test_decodes_payload(self):
        assert _decode_data_url(f"data:image/png;base64,{MINIMAL_PNG_B64}") == MINIMAL_PNG

    def test_rejects_plain_url(self):
        with pytest.raises(ValueError):
            _decode_data_url("https://example.com/cover.png")


# =============================================================================
# OpenRouterImageGenerator
# =============================================================================


class TestOpenRouterImageGenerator:
    async def test_success(self, image_config):
        generator = OpenRouterImageGenerator(image_config)
        instance = _patched_client(_mock_httpx_response(_image_reply()))
        with patch("book_weaver.core.image_generator.httpx.AsyncClient", return_value=instance):
            result = await generator.generate("a garden")
        assert result.success is True
        assert result.image_data[:2] == b"\xff\xd8"
        payload = instance.post.call_args.kwargs["json"]
        assert payload["modalities"] == ["image"]
        assert payload["image_generation"]["aspect_ratio"] == "3:4"

    async def test_no_api_key(self):
        result = await OpenRouterImageGenerator(ImageConfig(api_key="")).generate("a garden")
        assert result.success is False
        assert "not configured" in result.error

    async def test_no_image_in_reply(self, image_config):
        generator = OpenRouterImageGenerator(image_config)
        reply = {"choices": [{"message": {"content": "sorry"}}]}
        instance = _patched_client(_mock_httpx_response(reply))
        with patch("book_weaver.core.image_generator.httpx.AsyncClient", return_value=instance):
            result = await generator.generate("a garden")
        assert result.success is False
        assert result.error == "No image was generated."

    async def test_http_error(self, image_config):
        generator = OpenRouterImageGenerator(image_config)
        instance = _patched_client(_mock_httpx_response({"error": "x"}, status_code=500))
        with patch("book_weaver.core.image_generator.httpx.AsyncClient", return_value=instance):
            result = await generator.generate("a garden")
        assert result.success is False
        assert "API error" in result.error

    async def test_corrupt_image(self, image_config):
        generator = OpenRouterImageGenerator(image_config)
        bad = base64.b64encode(b"definitely not a png").decode()
        instance = _patched_client(_mock_httpx_response(_image_reply(bad)))
        with patch("book_weaver.core.image_generator.httpx.AsyncClient", return_value=instance):
            result = await generator.generate("a garden")
        assert result.success is False
        assert "validation failed" in result.error


# =============================================================================
# CoverGenerator
# =============================================================================


class TestCoverGenerator:
    def test_satisfies_protocol(self, image_config):
        assert isinstance(CoverGenerator(image_config), CoverArtist)

    async def test_cover_with_feedback(self, image_config, generation_config):
        generator = CoverGenerator(image_config)
        instance = _patched_client(_mock_httpx_response(_image_reply()))
        with patch("book_weaver.core.image_generator.httpx.AsyncClient", return_value=instance):
            cover = await generator.generate_cover(generation_config, "A calm guide.", " brighter ")
        assert cover.mime_type == "image/jpeg"
        assert cover.data[:2] == b"\xff\xd8"
        assert cover.feedback == "brighter"
        assert '"brighter"' in cover.prompt
        assert "The Quiet Garden" in cover.prompt

    async def test_failure_raises(self, image_config, generation_config):
        generator = CoverGenerator(image_config)
        instance = _patched_client(side_effect=httpx.RequestError("down"))
        with patch("book_weaver.core.image_generator.httpx.AsyncClient", return_value=instance):
            with pytest.raises(CoverGenerationError) as exc_info:
                await generator.generate_cover(generation_config, "A calm guide.")
        assert exc_info.value.message == "Failed to generate cover image."
