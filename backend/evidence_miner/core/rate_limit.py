"""
Rate Limiting Middleware

Protects the review endpoints from abuse using slowapi. Every review
fans out into a dozen NCBI requests plus an LLM call, so these are the
endpoints worth limiting.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from evidence_miner.core.config import settings
from evidence_miner.core.logging import get_logger

logger = get_logger(__name__)


def _get_identifier(request: Request) -> str:
    """
    Get a unique identifier for rate limiting.
    Uses IP address by default, honouring X-Forwarded-For behind a proxy.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


limiter = Limiter(
    key_func=_get_identifier,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=["100/minute"],
    strategy="fixed-window",
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    logger.warning(f"Rate limit exceeded for {_get_identifier(request)}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": f"Too many requests. {exc.detail}",
            "retry_after": getattr(exc, 'retry_after', 60)
        },
        headers={
            "Retry-After": str(getattr(exc, 'retry_after', 60)),
        }
    )


ANALYZE_LIMIT = "10/minute"
SEARCH_LIMIT = "20/minute"
REVIEW_LIMIT = "3/minute"
