import threading

import pytest

from timeblocks.infrastructure.security.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def test_respects_window_limit():
    clock = FakeClock()
    limiter = RateLimiter(1000, 2, clock=clock)

    assert limiter.try_consume("k") is True
    assert limiter.try_consume("k") is True
    assert limiter.try_consume("k") is False

    clock.now += 1.001
    assert limiter.try_consume("k") is True


def test_keys_are_independent():
    limiter = RateLimiter(1000, 1, clock=FakeClock())

    assert limiter.try_consume("login:1.1.1.1") is True
    assert limiter.try_consume("login:2.2.2.2") is True
    assert limiter.try_consume("login:1.1.1.1") is False


def test_window_is_fixed_not_sliding():
    clock = FakeClock()
    limiter = RateLimiter(1000, 2, clock=clock)

    limiter.try_consume("k")
    clock.now += 0.9
    assert limiter.try_consume("k") is True

    # new window starts 1s after the first event, not after the last
    clock.now += 0.2
    assert limiter.try_consume("k") is True
    assert limiter.try_consume("k") is True
    assert limiter.try_consume("k") is False


def test_non_positive_max_disables_limiting():
    limiter = RateLimiter(1000, 0, clock=FakeClock())

    assert all(limiter.try_consume("k") for _ in range(50))


def test_window_must_be_positive():
    with pytest.raises(ValueError):
        RateLimiter(0, 10)


def test_concurrent_callers_on_one_key_never_exceed_limit():
    limiter = RateLimiter(60_000, 10)
    barrier = threading.Barrier(40)
    results: list[bool] = []
    results_lock = threading.Lock()

    def worker():
        barrier.wait()
        accepted = limiter.try_consume("shared")
        with results_lock:
            results.append(accepted)

    threads = [threading.Thread(target=worker) for _ in range(40)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 10
    assert results.count(False) == 30
