import time
from dataclasses import dataclass


@dataclass
class RateLimitConfig:
    max_requests: int
    window_seconds: int
    message: str


class RateLimiter:
    """In-process sliding-window limiter keyed by an arbitrary string"""

    def __init__(self, config: RateLimitConfig) -> None:
        self.config = config
        self._hits: dict[str, list[float]] = {}

    def allow(self, key: str) -> bool:
        now = time.monotonic()
        window_start = now - self.config.window_seconds
        hits = [t for t in self._hits.get(key, []) if t > window_start]
        if len(hits) >= self.config.max_requests:
            self._hits[key] = hits
            return False
        hits.append(now)
        self._hits[key] = hits
        return True

    def reset(self) -> None:
        self._hits.clear()
