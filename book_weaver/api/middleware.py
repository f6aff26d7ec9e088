"""
API key check for the HTTP service.
"""

import hmac
import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Api-Key"
# Download links (cover, export) are opened by the browser, which cannot set headers
API_KEY_QUERY_PARAM = "api_key"


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """
    Require BOOK_WEAVER_API_KEY on every request except the exempt ones.

    The key is read from the X-Api-Key header, or from the `api_key` query
    parameter for GET requests. With no key configured every request passes.
    """

    def __init__(
        self,
        app,
        api_key: Optional[str] = None,
        exempt_paths: Optional[Iterable[str]] = None,
        exempt_prefixes: Iterable[str] = (),
    ):
        super().__init__(app)
        self._api_key = api_key
        self._exempt_paths = frozenset(exempt_paths or ())
        self._exempt_prefixes = tuple(exempt_prefixes)

    def _is_exempt(self, request: Request) -> bool:
        if request.method == "OPTIONS":
            return True
        path = request.url.path
        return path in self._exempt_paths or path.startswith(self._exempt_prefixes)

    def _provided_key(self, request: Request) -> str:
        key = request.headers.get(API_KEY_HEADER)
        if key is None and request.method == "GET":
            key = request.query_params.get(API_KEY_QUERY_PARAM)
        return key or ""

    async def dispatch(self, request: Request, call_next):
        if not self._api_key or self._is_exempt(request):
            return await call_next(request)

        if not hmac.compare_digest(self._provided_key(request), self._api_key):
            logger.warning(f"Rejected {request.method} {request.url.path}: invalid API key")
            return JSONResponse(
                status_code=403,
                content={"detail": "Invalid or missing API key"},
            )

        return await call_next(request)
