# Redis-backed fixed-window rate limiting for the unauthenticated write surfaces
# (login, registration, the contact form) and admin writes.
# Keys: rl:v1:ip:{ip}:{scope}. Fail-open when Redis is disabled or erroring.
import logging
from typing import Callable, Literal

import redis
from fastapi import HTTPException, Request, status

from .config import Settings

logger = logging.getLogger("luxehomes.rate_limit")

Scope = Literal["login", "register", "write"]


def limit_for_scope(settings: Settings, scope: Scope) -> int:
    if scope == "login":
        return settings.RATE_LIMIT_LOGIN_PER_WINDOW
    if scope == "register":
        return settings.RATE_LIMIT_REGISTER_PER_WINDOW
    return settings.RATE_LIMIT_WRITE_PER_WINDOW


def _client_ip(request: Request) -> str:
    # Remote address only; X-Forwarded-For is not trusted
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit(scope: Scope) -> Callable[[Request], None]:
    """
    Build a dependency enforcing the per-IP cap for `scope`.

    The first hit in a window sets the key TTL; later hits share it. Over the cap
    the request gets 429 with a retry hint.
    """

    def _dependency(request: Request) -> None:
        r = getattr(request.app.state, "redis", None)
        if r is None:
            return

        settings: Settings = request.app.state.settings
        window = settings.RATE_LIMIT_WINDOW_SECONDS
        limit = limit_for_scope(settings, scope)
        ip = _client_ip(request)
        key = f"rl:v1:ip:{ip}:{scope}"
        try:
            current = r.incr(key, amount=1)
            if current == 1:
                r.expire(key, window)
            if current <= limit:
                return
            ttl = r.ttl(key)
        except redis.RedisError as exc:
            logger.warning("Rate limit fail-open (scope=%s, ip=%s): %s", scope, ip, exc)
            return

        retry_after = ttl if isinstance(ttl, int) and ttl > 0 else window
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please try again later",
            headers={"Retry-After": str(retry_after)},
        )

    return _dependency
