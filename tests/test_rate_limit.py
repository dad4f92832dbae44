from gym_access.services.rate_limit import InMemoryCounterStore, LoginThrottle, RateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_counter_store_expires_keys():
    store = InMemoryCounterStore()

    assert store.increment("k", ttl_seconds=10, now=100.0) == 1
    assert store.increment("k", ttl_seconds=10, now=105.0) == 2
    assert store.get("k", now=109.0) == 2
    assert store.get("k", now=110.0) == 0
    assert store.increment("k", ttl_seconds=10, now=111.0) == 1


def test_login_throttle_blocks_after_max_attempts():
    clock = FakeClock()
    throttle = LoginThrottle(InMemoryCounterStore(), max_attempts=3, window_seconds=900, clock=clock)

    for _ in range(3):
        assert throttle.is_blocked("Admin@Gym.test") is False
        throttle.record_failure("admin@gym.test")

    assert throttle.is_blocked("admin@gym.test") is True

    clock.now += 900
    assert throttle.is_blocked("admin@gym.test") is False


def test_login_throttle_reset_clears_failures():
    throttle = LoginThrottle(InMemoryCounterStore(), max_attempts=2, window_seconds=60, clock=FakeClock())
    throttle.record_failure("a@gym.test")
    throttle.record_failure("a@gym.test")

    throttle.reset("a@gym.test")

    assert throttle.is_blocked("a@gym.test") is False


def test_throttles_do_not_share_state():
    first = LoginThrottle(InMemoryCounterStore(), max_attempts=1, window_seconds=60, clock=FakeClock())
    second = LoginThrottle(InMemoryCounterStore(), max_attempts=1, window_seconds=60, clock=FakeClock())

    first.record_failure("a@gym.test")

    assert first.is_blocked("a@gym.test") is True
    assert second.is_blocked("a@gym.test") is False


def test_rate_limiter_sliding_window():
    clock = FakeClock(0.0)
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

    assert limiter.allow("ip") is True
    assert limiter.allow("ip") is True
    assert limiter.allow("ip") is False

    clock.now = 60.0
    assert limiter.allow("ip") is True


def test_counter_store_drops_expired_keys_on_write():
    store = InMemoryCounterStore(prune_interval=60.0)
    store.increment("login:a@gym.test", ttl_seconds=10, now=100.0)
    store.increment("login:b@gym.test", ttl_seconds=10, now=100.0)

    store.increment("login:c@gym.test", ttl_seconds=10, now=200.0)

    assert set(store._counters) == {"login:c@gym.test"}


def test_rate_limiter_drops_idle_buckets():
    clock = FakeClock(0.0)
    limiter = RateLimiter(max_requests=5, window_seconds=60, clock=clock)
    for ip in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
        limiter.allow(ip)

    clock.now = 120.0
    assert limiter.allow("10.0.0.4") is True

    assert set(limiter._requests) == {"10.0.0.4"}
