import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from ...application.ports.rate_limiter import RateLimiter

SWEEP_INTERVAL_SEC = 60


class InMemoryRateLimiter(RateLimiter):
    """Sliding-window limiter for a single process."""

    def __init__(self, clock: Callable[[], float] = time.time, sweep_interval: float = SWEEP_INTERVAL_SEC) -> None:
        # key -> (window length, hit timestamps)
        self._hits: Dict[str, Tuple[int, Deque[float]]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            rk = f"{key}:{window_seconds}"
            _, hits = self._hits.setdefault(rk, (window_seconds, deque()))
            self._prune(hits, now - window_seconds)
            if len(hits) >= max_requests:
                return False
            hits.append(now)
            return True

    @staticmethod
    def _prune(hits: Deque[float], window_start: float) -> None:
        while hits and hits[0] <= window_start:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        # Drop keys whose every hit has left its window
        for rk in list(self._hits):
            window_seconds, hits = self._hits[rk]
            self._prune(hits, now - window_seconds)
            if not hits:
                del self._hits[rk]
        self._last_sweep = now
