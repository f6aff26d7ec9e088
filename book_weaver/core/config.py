"""
Configuration settings for the Book Weaver.
"""

from dataclasses import dataclass, field
from typing import Optional
import os

# Default models
DEFAULT_TEXT_MODEL = "google/gemini-2.5-flash"
DEFAULT_OUTLINE_MODEL = "google/gemini-2.5-pro"  # Supports structured outputs
DEFAULT_IMAGE_MODEL = "google/gemini-2.5-flash-image"

# Export defaults (used in routes, CLI and generators)
DEFAULT_FONT_FAMILY = "Times New Roman"
DEFAULT_FONT_SIZE = 12
DEFAULT_LINE_SPACING = 1.5
FONT_SIZE_CHOICES = (10, 11, 12, 13, 14)
LINE_SPACING_CHOICES = (1.15, 1.5)

from dotenv import load_dotenv

load_dotenv()


@dataclass
class LLMConfig:
    """Configuration for OpenRouter LLM API."""

    api_key: str = field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""))
    base_url: str = "https://openrouter.ai/api/v1"
    model: str = DEFAULT_TEXT_MODEL  # Chapter prose, bio, titles, publishing details
    outline_model: str = DEFAULT_OUTLINE_MODEL  # Book planning
    max_tokens: int = 8000  # A chapter runs 1,500-3,000 words
    temperature: float = 0.7
    timeout: float = 180.0

    def validate(self) -> bool:
        """Check if API key is configured."""
        return bool(self.api_key)


@dataclass
class ImageConfig:
    """Configuration for cover generation via OpenRouter."""

    api_key: str = field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""))
    base_url: str = "https://openrouter.ai/api/v1/chat/completions"
    model: str = DEFAULT_IMAGE_MODEL
    aspect_ratio: str = "3:4"
    jpeg_quality: int = 90
    timeout: float = 120.0

    def validate(self) -> bool:
        """Check if API key is configured."""
        return bool(self.api_key)


@dataclass
class ExportDefaults:
    """Page geometry for exported books (6x9 inch trim)."""

    # Sizes in inches
    page_width: float = 6.0
    page_height: float = 9.0
    margin_top: float = 0.75
    margin_bottom: float = 0.75
    margin_inside: float = 0.75
    margin_outside: float = 0.5

    font_family: str = DEFAULT_FONT_FAMILY
    heading_font_size: int = 18
    title_font_size: int = 28
    header_font_size: int = 10
    creator: str = "AI Book Weaver"


def _split_env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class AppSettings:
    """HTTP service settings."""

    api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("BOOK_WEAVER_API_KEY") or None
    )
    allowed_hosts: list[str] = field(
        default_factory=lambda: _split_env_list(
            "BOOK_WEAVER_ALLOWED_HOSTS", "localhost,127.0.0.1,test"
        )
    )
    cors_origins: list[str] = field(
        default_factory=lambda: _split_env_list(
            "BOOK_WEAVER_CORS_ORIGINS", "http://localhost:5173,http://localhost:8080"
        )
    )
    generate_rate_limit: str = field(
        default_factory=lambda: os.getenv("BOOK_WEAVER_GENERATE_RATE_LIMIT", "3/minute")
    )
