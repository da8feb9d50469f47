"""Rate limiting configuration for API endpoints.

Uses slowapi with a Redis backend in production and in-memory storage
otherwise.
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from contractsathi.config import get_settings
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)

# Upload and analysis run LLM calls; report rendering is cheaper
RATE_LIMIT_UPLOAD = "10/minute"
RATE_LIMIT_REPORT = "20/minute"
RATE_LIMIT_DEFAULT = "100/minute"


def _get_rate_limit_key(request: Request) -> str:
    """Rate limit per caller id when sent, else per client IP."""
    user_id = request.headers.get("x-user-id")
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


def _storage_uri() -> str:
    settings = get_settings()
    if settings.is_production:
        return str(settings.redis_url)
    return "memory://"


limiter = Limiter(
    key_func=_get_rate_limit_key,
    storage_uri=_storage_uri(),
    strategy="fixed-window",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Answer 429 in the common error body shape."""
    logger.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        method=request.method,
        key=_get_rate_limit_key(request),
        limit=str(exc.detail),
    )
    retry_after = str(getattr(exc, "retry_after", 60))
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Please wait a moment and try again.",
            "code": "rate_limited",
            "details": {"limit": str(exc.detail)},
        },
        headers={"Retry-After": retry_after},
    )
