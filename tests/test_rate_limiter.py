import threading

import pytest

from app.services.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestRateLimiter:
    """Fixed-window, per-client request limits"""

    def test_ceiling_then_window_reset(self, clock):
        limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

        assert limiter.allow("1.2.3.4") is True
        assert limiter.allow("1.2.3.4") is True
        assert limiter.allow("1.2.3.4") is False

        clock.advance(61)
        assert limiter.allow("1.2.3.4") is True

    def test_window_boundary_is_inclusive(self, clock):
        """The window only resets once the reset time has passed"""
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)

        assert limiter.allow("client") is True
        clock.advance(60)
        assert limiter.allow("client") is False
        clock.advance(0.001)
        assert limiter.allow("client") is True

    def test_rejections_do_not_extend_count(self, clock):
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)

        limiter.allow("client")
        for _ in range(5):
            assert limiter.allow("client") is False
        assert limiter.remaining("client") == 0

        clock.advance(61)
        assert limiter.remaining("client") == 1

    def test_clients_are_independent(self, clock):
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)

        assert limiter.allow("a") is True
        assert limiter.allow("b") is True
        assert limiter.allow("a") is False
        assert limiter.allow("unknown") is True

    def test_remaining_and_reset(self, clock):
        limiter = RateLimiter(max_requests=3, window_seconds=60, clock=clock)

        assert limiter.remaining("a") == 3
        limiter.allow("a")
        limiter.allow("b")
        assert limiter.remaining("a") == 2

        limiter.reset("a")
        assert limiter.remaining("a") == 3
        assert limiter.remaining("b") == 2

        limiter.reset()
        assert limiter.remaining("b") == 3

    def test_expired_windows_are_evicted(self, clock):
        limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

        for i in range(10_000):
            assert limiter.allow(f"198.51.100.{i}") is True
        assert len(limiter) == 10_000

        clock.advance(3600)
        assert limiter.allow("late") is True

        assert len(limiter) == 1

    def test_eviction_keeps_live_windows(self, clock):
        limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

        limiter.allow("stale")
        clock.advance(30)
        limiter.allow("busy")
        limiter.allow("busy")

        # Past the first sweep point: "stale" has expired, "busy" has not
        clock.advance(31)
        assert limiter.allow("other") is True

        assert len(limiter) == 2
        assert limiter.allow("busy") is False
        assert limiter.remaining("stale") == 2

    def test_defaults(self):
        limiter = RateLimiter()

        assert limiter.max_requests == 25
        assert limiter.window_seconds == 60

    @pytest.mark.parametrize("kwargs", [
        {"max_requests": 0},
        {"window_seconds": 0},
        {"window_seconds": -1},
    ])
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            RateLimiter(**kwargs)

    def test_concurrent_requests_never_overshoot(self):
        limiter = RateLimiter(max_requests=50, window_seconds=60)
        admitted = []
        lock = threading.Lock()
        barrier = threading.Barrier(20)

        def worker():
            barrier.wait()
            for _ in range(10):
                if limiter.allow("shared"):
                    with lock:
                        admitted.append(1)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(admitted) == 50
