"""
Rate Limiting
=============
Implements rate limiting using slowapi.

Every route under /api shares one request allowance per client (RATE_LIMIT,
100 requests per 15 minutes by default). The check runs as a dependency of
the /api router, so root and health routes are never counted. Counters live
in RATE_LIMIT_STORAGE_URI: process memory by default, redis when several
workers must share them.
"""

import time

from fastapi import Request
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings
from app.core.exceptions import ComplaintSystemError, RateLimitExceededError
from app.core.logging_config import logger
from app.core.security import decode_token

API_SCOPE = "api"


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key for the caller.

    Priority:
    1. Computer number from a valid bearer token
    2. IP address
    """
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            return f"user:{decode_token(token)['sub']}"
        except (ComplaintSystemError, KeyError):
            pass

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

API_LIMIT = parse(settings.RATE_LIMIT)


async def enforce_rate_limit(request: Request) -> None:
    """
    Router dependency counting the request against the caller's allowance.

    Raises RateLimitExceededError (429, Retry-After) once the window is used up.
    """
    if not limiter.enabled:
        return

    key = get_user_identifier(request)
    if limiter.limiter.hit(API_LIMIT, API_SCOPE, key):
        return

    reset_at, _ = limiter.limiter.get_window_stats(API_LIMIT, API_SCOPE, key)
    retry_after = max(1, int(reset_at - time.time()))

    logger.warning(f"[RateLimit] Exceeded for {key}: {API_LIMIT}")
    raise RateLimitExceededError(str(API_LIMIT), retry_after)
