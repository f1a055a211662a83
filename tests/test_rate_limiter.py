"""Tests for the sliding-window rate limiter."""
from rate_limiter import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestSlidingWindowRateLimiter:
    def test_blocks_after_max_and_reports_retry(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(2, 60, clock=clock)
        assert limiter.hit("a") is None
        clock.now = 10
        assert limiter.hit("a") is None
        clock.now = 20
        assert limiter.hit("a") == 40

    def test_window_expiry_allows_again(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(1, 60, clock=clock)
        assert limiter.hit("a") is None
        assert limiter.hit("a") is not None
        clock.now = 60
        assert limiter.hit("a") is None

    def test_idle_clients_are_forgotten(self):
        """Clients whose hits all expired do not stay tracked."""
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(5, 60, clock=clock)
        for i in range(1000):
            limiter.hit(f"10.0.{i // 256}.{i % 256}")
        assert len(limiter) == 1000

        clock.now = 61
        assert limiter.hit("192.168.1.1") is None
        assert len(limiter) == 1

    def test_active_clients_survive_the_sweep(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(5, 60, clock=clock)
        limiter.hit("old")
        clock.now = 30
        limiter.hit("recent")
        clock.now = 65
        limiter.hit("new")
        assert len(limiter) == 2

    def test_reset_clears_clients(self):
        limiter = SlidingWindowRateLimiter(1, 60, clock=FakeClock())
        limiter.hit("a")
        limiter.reset()
        assert len(limiter) == 0
        assert limiter.hit("a") is None
