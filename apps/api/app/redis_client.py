from __future__ import annotations

from functools import lru_cache

from redis import Redis

from app.core.config import settings


@lru_cache(maxsize=1)
def get_redis() -> Redis:
    # Short timeouts so a dead Redis cannot stall registration requests
    return Redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=0.5,
        socket_timeout=0.5,
    )


def count_hit(key: str, ttl_seconds: int) -> int:
    """Increment a fixed-window counter; the key already carries its bucket."""
    pipe = get_redis().pipeline()
    pipe.incr(key)
    pipe.expire(key, ttl_seconds)
    count, _ = pipe.execute()
    return int(count)
