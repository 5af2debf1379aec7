"""Retry policy with exponential backoff for upstream HTTP calls."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar

DEFAULT_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})


class _HasStatus(Protocol):
    status_code: int


_R = TypeVar("_R", bound=_HasStatus)


@dataclass
class RetryConfig:
    """How often and how patiently a failed request is retried.

    Durations are in seconds.
    """

    max_retries: int = 3
    initial_backoff: float = 0.1
    max_backoff: float = 10.0
    backoff_multiplier: float = 2.0
    jitter: bool = True
    retryable_status_codes: frozenset[int] = DEFAULT_RETRYABLE_STATUS_CODES
    enabled: bool = True

    def should_retry(self, status_code: int) -> bool:
        """Return whether a response with this status code should be retried."""
        return self.enabled and status_code in self.retryable_status_codes

    def backoff_duration(self, attempt: int) -> float:
        """Return the delay in seconds before the retry after ``attempt``."""
        backoff = self.initial_backoff * self.backoff_multiplier**attempt
        backoff = min(backoff, self.max_backoff)
        if self.jitter:
            backoff += backoff * 0.25 * random.random()
        return backoff


def default_retry_config() -> RetryConfig:
    """Return the default retry policy."""
    return RetryConfig()


def _close(response: object) -> None:
    close = getattr(response, "close", None)
    if callable(close):
        close()


def retry_with_backoff(config: RetryConfig | None, fn: Callable[[], _R]) -> _R:
    """Call ``fn`` until it returns a non-retryable response or attempts run out.

    Exceptions raised by ``fn`` are retried too; if the last attempt raised,
    its exception propagates. Otherwise the last response is returned.
    """
    if config is None or not config.enabled:
        return fn()

    attempts = max(config.max_retries, 0) + 1
    last_error: Exception | None = None
    response: _R | None = None

    for attempt in range(attempts):
        try:
            response = fn()
        except Exception as exc:
            last_error = exc
            response = None
        else:
            last_error = None
            if not config.should_retry(response.status_code):
                return response

        if attempt < attempts - 1:
            if response is not None:
                _close(response)
            time.sleep(config.backoff_duration(attempt))

    if last_error is not None:
        raise last_error
    assert response is not None
    return response