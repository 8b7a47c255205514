"""Unit tests for the in-memory fixed-window rate limiter."""

import threading
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter


def test_allows_up_to_limit_with_decreasing_remaining() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=5, window_seconds=60, clock=clock)

    results = [limiter.check("X") for _ in range(5)]

    assert all(r.allowed for r in results)
    assert [r.remaining for r in results] == [4, 3, 2, 1, 0]
    assert {r.reset_at for r in results} == {1_000_000 + 60_000}
    assert all(r.retry_after_seconds is None for r in results)


def test_blocks_request_after_capacity_is_reached() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=5, window_seconds=60, clock=clock)
    allowed = [limiter.check("X") for _ in range(5)]

    blocked = limiter.check("X")

    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.limit == 5
    assert blocked.reset_at == allowed[0].reset_at
    assert blocked.retry_after_seconds == 60


def test_denial_does_not_extend_or_consume_the_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=10, clock=clock)
    first = limiter.check("k")

    clock.return_value = 1005.0
    for _ in range(3):
        blocked = limiter.check("k")
        assert blocked.allowed is False
        assert blocked.reset_at == first.reset_at
        assert blocked.retry_after_seconds == 5


def test_retry_after_rounds_up_partial_seconds() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=10, clock=clock)
    limiter.check("k")

    clock.return_value = 1000.2
    assert limiter.check("k").retry_after_seconds == 10


def test_resets_once_window_has_elapsed() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=3, window_seconds=10, clock=clock)
    for _ in range(4):
        limiter.check("k")

    clock.return_value = 1010.0
    result = limiter.check("k")

    assert result.allowed is True
    assert result.remaining == 2
    assert result.reset_at == 1_020_000


def test_window_starts_at_first_request_not_clock_boundary() -> None:
    clock = Mock(return_value=1003.5)
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    assert limiter.check("k").reset_at == 1_013_500

    clock.return_value = 1013.4
    assert limiter.check("k").allowed is False


def test_boundary_burst_admits_up_to_twice_the_limit() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=3, window_seconds=10, clock=clock)
    limiter.check("k")

    clock.return_value = 1009.9
    late = [limiter.check("k").allowed for _ in range(2)]
    clock.return_value = 1010.0
    early = [limiter.check("k").allowed for _ in range(3)]

    assert late == [True, True]
    assert early == [True, True, True]


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=5, window_seconds=60, clock=clock)

    for expected_remaining in (4, 3, 2):
        assert limiter.check("X").remaining == expected_remaining
        other = limiter.check(f"Y-{expected_remaining}")
        assert other.allowed is True
        assert other.remaining == 4

    limiter.check("X")
    limiter.check("X")
    assert limiter.check("X").allowed is False

    y = limiter.check("Y")
    assert y.allowed is True
    assert y.remaining == 4


def test_purge_expired_drops_only_elapsed_records() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=2, window_seconds=10, clock=clock)
    limiter.check("old")
    clock.return_value = 1008.0
    limiter.check("fresh")

    clock.return_value = 1010.5
    removed = limiter.purge_expired()

    assert removed == 1
    assert limiter.tracked_keys() == 1
    assert limiter.check("fresh").remaining == 0


def test_purged_key_starts_a_new_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=10, clock=clock)
    limiter.check("k")

    clock.return_value = 1011.0
    limiter.purge_expired()

    result = limiter.check("k")
    assert result.allowed is True
    assert result.remaining == 0


def test_concurrent_checks_never_admit_more_than_limit() -> None:
    limiter = InMemoryFixedWindowRateLimiter(limit=50, window_seconds=60)
    allowed: list[bool] = []
    allowed_lock = threading.Lock()
    barrier = threading.Barrier(20)

    def _worker() -> None:
        barrier.wait()
        for _ in range(10):
            result = limiter.check("shared")
            with allowed_lock:
                allowed.append(result.allowed)

    threads = [threading.Thread(target=_worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(allowed) == 200
    assert sum(allowed) == 50


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
        {"limit": 1, "window_seconds": -5},
        {"limit": 1, "window_seconds": 0.0001},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowRateLimiter(**kwargs)


def test_empty_identifier_is_just_another_key() -> None:
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60)

    assert limiter.check("").allowed is True
    assert limiter.check("").allowed is False
    assert limiter.check("unknown").allowed is True


def test_millisecond_window_is_accepted() -> None:
    limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=0.001, clock=lambda: 1000.0)

    assert limiter.check("A").allowed is True
    assert limiter.check("A").allowed is False
