from __future__ import annotations

import random

from ..config import RetryOptions
from ..errors import ApiError


class RetryStrategy:
    """Backoff schedule for a liveness probe that could not reach the server.

    Only connection failures (``ApiError`` of kind ``unreachable``) are worth
    another attempt; an HTTP answer of any status means the server is up and
    repeating the probe would get the same answer. Delays grow from
    ``initial_delay_ms`` by ``backoff_multiplier`` up to ``max_delay_ms``,
    plus up to ``jitter_ms`` of random spread, for at most ``max_retries``
    retries (200ms, 400ms, 800ms with the defaults).
    """

    def __init__(self, options: RetryOptions | None = None) -> None:
        self._options = options or RetryOptions()

    @property
    def max_retries(self) -> float:
        return self._options.max_retries

    def is_retryable(self, error: ApiError) -> bool:
        return error.kind == "unreachable"

    def delay_after(self, error: ApiError, attempt: int) -> float | None:
        """Delay in ms before retrying after *error* on retry number
        *attempt* (0-based), or None when the error should be surfaced."""
        if not self.is_retryable(error):
            return None
        return self.get_delay(attempt)

    def get_delay(self, attempt: int) -> float | None:
        opts = self._options
        if attempt >= opts.max_retries:
            return None

        backoff = opts.initial_delay_ms * opts.backoff_multiplier**attempt
        return min(backoff, opts.max_delay_ms) + random.random() * opts.jitter_ms
