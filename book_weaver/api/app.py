"""
FastAPI application for the AI Book Weaver.

Run with: python main.py serve --reload
"""

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from book_weaver.api.middleware import ApiKeyMiddleware
from book_weaver.api.rate_limit import limiter
from book_weaver.api.routes import config, covers, export, health, titles, workspaces
from book_weaver.core.cloudwatch_logging import setup_cloudwatch_logging, flush_cloudwatch_logging
from book_weaver.core.config import AppSettings
from book_weaver.core.exceptions import BookWeaverError


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

settings = AppSettings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Application starting up...")

    # CloudWatch logging (sends pipeline logs only, opt-in via CLOUDWATCH_ENABLED=true)
    setup_cloudwatch_logging()

    if os.getenv("OPENROUTER_API_KEY"):
        logger.info("OpenRouter API key configured")
    else:
        logger.warning("No OpenRouter API key found - generation requests will fail")

    if not settings.api_key:
        logger.warning("BOOK_WEAVER_API_KEY not set - API key check disabled")

    yield

    logger.info("Application shutting down...")
    flush_cloudwatch_logging()


app = FastAPI(
    title="AI Book Weaver API",
    description="""
Generate complete books with AI: outline, chapters, cover and store metadata,
exported as print-ready 6x9 DOCX or PDF.

## Workflow
1. **POST** `/api/v1/workspaces` - Create a workspace
2. **PUT** `/api/v1/workspaces/{id}/form` - Fill in title, author, genre, length...
3. **POST** `/api/v1/workspaces/{id}/generate` - Start generation
4. **GET** `/api/v1/workspaces/{id}` - Follow progress until the state is `ready`
5. **POST** `/api/v1/workspaces/{id}/cover` - Generate a cover (repeat with feedback)
6. **GET** `/api/v1/workspaces/{id}/export?format=docx` - Download the book

Title suggestions, author bio and publishing details are available at any time.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(BookWeaverError)
async def book_weaver_error_handler(request: Request, exc: BookWeaverError) -> JSONResponse:
    """Map domain errors to their HTTP status with a user-facing message."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": type(exc).__name__},
    )


# API key check; health and root stay open for probes
app.add_middleware(
    ApiKeyMiddleware,
    api_key=settings.api_key,
    exempt_paths={"/", "/api/v1/health"},
    exempt_prefixes=("/docs", "/redoc", "/openapi.json"),
)

# Trusted Host middleware: reject requests with unexpected Host headers
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Api-Key"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(config.router, prefix="/api/v1")
app.include_router(workspaces.router, prefix="/api/v1")
app.include_router(titles.router, prefix="/api/v1")
app.include_router(covers.router, prefix="/api/v1")
app.include_router(export.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""
    return {
        "message": "AI Book Weaver API",
        "docs": "/docs",
        "redoc": "/redoc",
    }
