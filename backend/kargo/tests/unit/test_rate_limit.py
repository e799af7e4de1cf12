"""Tests for the token bucket rate limiter."""

from kargo.server.rate_limit import TokenBucket


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestTokenBucket:
    def test_burst_allows_up_to_capacity(self):
        bucket = TokenBucket(rate=1.0, burst=5, clock=FakeClock())
        assert all(bucket.consume() for _ in range(5))
        assert bucket.consume() is False

    def test_refill_restores_tokens(self):
        clock = FakeClock()
        bucket = TokenBucket(rate=10.0, burst=5, clock=clock)
        for _ in range(5):
            bucket.consume()
        assert bucket.consume() is False

        clock.now += 0.15
        assert bucket.consume() is True
        assert bucket.consume() is False

    def test_refill_capped_at_burst(self):
        """Long idle periods never bank more than the burst size."""
        clock = FakeClock()
        bucket = TokenBucket(rate=10.0, burst=3, clock=clock)
        clock.now += 1000
        assert [bucket.consume() for _ in range(4)] == [True, True, True, False]

    def test_default_clock_is_monotonic(self):
        bucket = TokenBucket(rate=1.0, burst=1)
        assert bucket.consume() is True
        assert bucket.tokens < 1.0
