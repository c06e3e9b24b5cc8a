"""
Rate limiting implementation using Redis.

Fixed window strategy: a counter per (identifier, tier) that expires
at the end of the window. When Redis is unavailable requests are let
through.
"""

import logging
from dataclasses import dataclass

from fastapi import HTTPException, Request, status

from app.config import settings
from app.core.cache import cache_manager

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for a rate limit rule."""

    requests: int     # Max requests
    window: int       # Time window in seconds
    key_prefix: str   # Key prefix for namespacing


# Predefined rate limit tiers
RATE_LIMITS = {
    "default": RateLimitConfig(requests=settings.rate_limit_per_minute, window=60, key_prefix="rl"),
    "auth": RateLimitConfig(requests=10, window=60, key_prefix="rl_auth"),
    "admin_auth": RateLimitConfig(requests=5, window=60, key_prefix="rl_admin_auth"),
    "public_token": RateLimitConfig(requests=30, window=60, key_prefix="rl_token"),
}


async def check_rate_limit(
    identifier: str,
    limit_type: str = "default",
) -> dict:
    """
    Check if identifier has exceeded rate limit.

    Args:
        identifier: Unique identifier (ip, user id, tenant id)
        limit_type: Rate limit tier to apply

    Returns:
        Dict with rate limit info

    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    config = RATE_LIMITS.get(limit_type, RATE_LIMITS["default"])
    key = f"{identifier}:{limit_type}"

    try:
        current_count = await cache_manager.increment(
            namespace=config.key_prefix,
            key=key,
            ttl=config.window,
        )
        ttl = await cache_manager.get_ttl(config.key_prefix, key)
    except Exception as e:
        # Redis down or not configured: fail open
        logger.error(f"Rate limit check error: {e}")
        return {"limit": config.requests, "remaining": config.requests, "reset": 0}

    if current_count > config.requests:
        logger.warning(
            f"Rate limit exceeded: {identifier} ({limit_type}) "
            f"{current_count}/{config.requests}"
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "message": "Too many attempts, please try again later",
                "limit": config.requests,
                "window": config.window,
                "retryAfter": ttl,
            },
            headers={
                "X-RateLimit-Limit": str(config.requests),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(ttl),
                "Retry-After": str(ttl),
            },
        )

    return {
        "limit": config.requests,
        "remaining": max(0, config.requests - current_count),
        "reset": ttl,
        "current": current_count,
    }


def rate_limit(limit_type: str = "default", by: str = "ip"):
    """
    Rate limiting dependency factory.

    Args:
        limit_type: Rate limit tier (default, auth, admin_auth, public_token)
        by: How to identify the requester (ip, user, tenant)

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limit("auth"))])
        async def login(...):
            ...
    """
    async def dependency(request: Request) -> dict | None:
        if not settings.rate_limit_enabled:
            return None

        client_host = request.client.host if request.client else "unknown"

        if by == "user":
            identifier = getattr(request.state, "user_id", None) or client_host
        elif by == "tenant":
            identifier = getattr(request.state, "tenant_id", None) or client_host
        else:
            identifier = client_host

        return await check_rate_limit(identifier, limit_type)

    return dependency
