# Redis connection helper: opt-in and fail-open.
# Built once in the application lifespan from Settings and kept on app.state.redis.
import logging
from typing import Optional

import redis

from .config import Settings

_logger = logging.getLogger("luxehomes.redis")


def connect_redis(settings: Settings) -> Optional[redis.Redis]:
    """
    Return a connected Redis client, or None when disabled or unreachable.

    Behavior:
    - REDIS_ENABLED false: no connection attempt
    - Connection/ping failures are logged and reported as None so rate limiting
      degrades to a no-op instead of failing requests
    """
    if not settings.REDIS_ENABLED:
        return None

    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            socket_timeout=0.25,
            socket_connect_timeout=0.25,
            retry_on_timeout=False,
            health_check_interval=0,
        )
        client.ping()
        _logger.info("Connected to Redis at %s", settings.REDIS_URL)
        return client
    except redis.RedisError as exc:
        _logger.warning("Redis unavailable (fail-open): %s", exc)
        return None
