from __future__ import annotations

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from zolla.core.config import settings


def client_key(request: Request) -> str:
    """Signed-in users share one bucket across addresses; anonymous callers fall back to the IP."""
    user_id = (request.headers.get("X-User-Id") or "").strip()
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=client_key, enabled=settings.rate_limit_enabled)


def rate_limit(limit: str | None = None):
    if settings.rate_limit_enabled:
        return limiter.limit(limit or settings.rate_limit)

    def decorator(func):
        return func

    return decorator


def ai_rate_limit():
    """Tighter budget for routes that may call the LLM provider."""
    return rate_limit(settings.ai_rate_limit)
