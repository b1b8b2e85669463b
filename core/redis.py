from functools import lru_cache

import redis

from core.config import settings


@lru_cache(maxsize=1)
def get_redis_connection() -> redis.Redis:
    return redis.Redis.from_url(
        settings.REDIS_URL,
        decode_responses=True  # returns strings instead of bytes
    )
