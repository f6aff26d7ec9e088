"""Rate limiter configuration."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from book_weaver.core.config import AppSettings


def _get_rate_limit_key(request):
    """Key by workspace when the path has one, otherwise by IP."""
    workspace_id = request.path_params.get("workspace_id")
    if workspace_id:
        return f"workspace:{workspace_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=_get_rate_limit_key)

# Applied to every endpoint that calls the AI service
GENERATION_RATE_LIMIT = AppSettings().generate_rate_limit
