from __future__ import annotations

import pytest

from sugar_client.config import RetryOptions
from sugar_client.errors import ApiError
from sugar_client.transport.retry import RetryStrategy

NO_JITTER = RetryOptions(jitter_ms=0)


def unreachable() -> ApiError:
    return ApiError("unreachable", "GET ping failed: connection refused")


class TestSchedule:
    def test_default_schedule(self) -> None:
        strategy = RetryStrategy(NO_JITTER)

        delays = [strategy.get_delay(n) for n in range(4)]

        assert delays == [200, 400, 800, None]
        assert strategy.max_retries == 3

    def test_capped_by_max_delay(self) -> None:
        strategy = RetryStrategy(
            RetryOptions(
                max_retries=5,
                initial_delay_ms=1_000,
                backoff_multiplier=4.0,
                max_delay_ms=3_000,
                jitter_ms=0,
            )
        )

        assert strategy.get_delay(0) == 1_000
        assert strategy.get_delay(1) == 3_000
        assert strategy.get_delay(4) == 3_000
        assert strategy.get_delay(5) is None

    def test_no_retries(self) -> None:
        strategy = RetryStrategy(RetryOptions(max_retries=0))

        assert strategy.delay_after(unreachable(), 0) is None

    def test_jitter_bounds(self) -> None:
        strategy = RetryStrategy(
            RetryOptions(initial_delay_ms=100, backoff_multiplier=1.0, jitter_ms=50)
        )

        for _ in range(20):
            delay = strategy.get_delay(0)
            assert delay is not None
            assert 100 <= delay < 150


class TestRetryableErrors:
    def test_connection_failure_is_retried(self) -> None:
        strategy = RetryStrategy(NO_JITTER)

        assert strategy.is_retryable(unreachable()) is True
        assert strategy.delay_after(unreachable(), 1) == 400

    @pytest.mark.parametrize(
        "kind,status",
        [("unauthorized", 401), ("not_found", 404), ("other", 502)],
    )
    def test_http_answers_are_not_retried(self, kind: str, status: int) -> None:
        strategy = RetryStrategy(NO_JITTER)
        error = ApiError(kind, f"GET ping returned HTTP {status}", status=status)  # type: ignore[arg-type]

        assert strategy.is_retryable(error) is False
        assert strategy.delay_after(error, 0) is None
