from typing import Protocol


class RateLimiter(Protocol):
    """Counts hits per key inside a time window."""

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        ...
