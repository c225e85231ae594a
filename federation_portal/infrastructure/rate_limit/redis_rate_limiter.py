import logging

import redis

from ...application.ports.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RedisRateLimiter(RateLimiter):
    """Fixed-window limiter shared by every worker through Redis."""

    def __init__(self, url: str = None, prefix: str = "fp:rl:", client: "redis.Redis" = None) -> None:
        self.client = client if client is not None else redis.Redis.from_url(url)
        self.prefix = prefix

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        rk = f"{self.prefix}{key}:{window_seconds}"
        pipe = self.client.pipeline()
        pipe.incr(rk, 1)
        # NX keeps the window anchored at the first hit
        pipe.expire(rk, window_seconds, nx=True)
        count, _ = pipe.execute()
        return int(count) <= int(max_requests)
