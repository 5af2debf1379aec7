"""Per-key request rate limiting with token buckets."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

_CLEANUP_INTERVAL = 300.0
_IDLE_THRESHOLD = 600.0


@dataclass
class RateLimitConfig:
    """Rate limiter settings."""

    requests_per_second: float = 100.0
    burst: int = 200
    enabled: bool = True


@dataclass
class _Bucket:
    tokens: float
    last_refill: float


class TokenBucket:
    """A token-bucket limiter keeping one bucket per key."""

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        self.config = config if config is not None else RateLimitConfig()
        self._lock = threading.Lock()
        self._buckets: dict[str, _Bucket] = {}
        self._last_cleanup = time.monotonic()

    def allow(self, key: str) -> bool:
        """Return whether one request for ``key`` may proceed."""
        return self.allow_n(key, 1)

    def allow_n(self, key: str, n: int) -> bool:
        """Return whether ``n`` requests for ``key`` may proceed, taking tokens if so."""
        if not self.config.enabled:
            return True
        with self._lock:
            now = time.monotonic()
            if now - self._last_cleanup > _CLEANUP_INTERVAL:
                self._cleanup(now)

            burst = float(self.config.burst)
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = _Bucket(tokens=burst, last_refill=now)
                self._buckets[key] = bucket

            elapsed = now - bucket.last_refill
            bucket.tokens = min(bucket.tokens + elapsed * self.config.requests_per_second, burst)
            bucket.last_refill = now

            if bucket.tokens >= n:
                bucket.tokens -= n
                return True
            return False

    def reset(self, key: str) -> None:
        """Forget the bucket for ``key``."""
        with self._lock:
            self._buckets.pop(key, None)

    def _cleanup(self, now: float) -> None:
        self._buckets = {
            key: bucket
            for key, bucket in self._buckets.items()
            if now - bucket.last_refill <= _IDLE_THRESHOLD
        }
        self._last_cleanup = now