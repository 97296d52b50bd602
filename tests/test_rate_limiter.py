from salonflow.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_memory_rate_limiter_allows_then_blocks():
    rl = InMemoryRateLimiter()
    key = "k1"
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is False


def test_memory_rate_limiter_window_slides():
    clock = FakeClock()
    rl = InMemoryRateLimiter(clock=clock)
    assert rl.allow("ip", 1, 60) is True
    assert rl.allow("ip", 1, 60) is False
    clock.now += 61
    assert rl.allow("ip", 1, 60) is True


def test_memory_rate_limiter_keys_are_independent():
    rl = InMemoryRateLimiter()
    assert rl.allow("a", 1, 60) is True
    assert rl.allow("b", 1, 60) is True
    assert rl.allow("a", 1, 60) is False
