"""Unit tests for the in-memory token bucket rate limiter."""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from dnsqueryx.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter


def _limiter(clock: Mock, **kwargs) -> InMemoryTokenBucketRateLimiter:
    kwargs.setdefault("per_second", 3)
    kwargs.setdefault("burst_size", 10)
    return InMemoryTokenBucketRateLimiter(clock=clock, **kwargs)


def test_fresh_bucket_admits_exactly_burst_size() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock)

    decisions = [limiter.admit("k") for _ in range(11)]

    assert [d.admitted for d in decisions] == [True] * 10 + [False]
    assert decisions[0].remaining == 9
    assert decisions[9].remaining == 0


def test_rejection_reports_retry_after() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=3, burst_size=1)

    assert limiter.admit("k").admitted is True
    blocked = limiter.admit("k")

    assert blocked.admitted is False
    assert blocked.remaining == 0
    assert blocked.limit == 1
    assert blocked.retry_after_seconds == 1


def test_retry_after_rounds_up_for_slow_refill() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=1, burst_size=2)

    limiter.admit("k")
    limiter.admit("k")
    clock.return_value = 1000.25

    blocked = limiter.admit("k")
    assert blocked.admitted is False
    assert blocked.retry_after_seconds == 1
    assert blocked.reset_after_seconds == pytest.approx(1.75)


def test_refills_continuously() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=2, burst_size=2)

    assert limiter.admit("k").admitted is True
    assert limiter.admit("k").admitted is True
    assert limiter.admit("k").admitted is False

    # Half a second at 2 tokens/s buys exactly one request
    clock.return_value = 1000.5
    assert limiter.admit("k").admitted is True
    assert limiter.admit("k").admitted is False


def test_refill_is_capped_at_burst_size() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=3, burst_size=5)

    limiter.admit("k")
    clock.return_value = 5000.0

    decision = limiter.admit("k")
    assert decision.admitted is True
    assert decision.remaining == 4


def test_clock_going_backwards_adds_no_tokens() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=3, burst_size=1)

    assert limiter.admit("k").admitted is True
    clock.return_value = 900.0
    assert limiter.admit("k").admitted is False


def test_one_second_window_beyond_budget_is_throttled() -> None:
    clock = Mock(return_value=0.0)
    limiter = _limiter(clock, per_second=3, burst_size=10)

    admitted = 0
    rejected = 0
    for step in range(20):
        clock.return_value = step * 0.05
        if limiter.admit("k").admitted:
            admitted += 1
        else:
            rejected += 1

    assert admitted <= 3 + 10
    assert rejected >= 1


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=1, burst_size=1)

    assert limiter.admit("k1").admitted is True
    assert limiter.admit("k1").admitted is False

    assert limiter.admit("k2").admitted is True


def test_rejected_cost_consumes_nothing() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=1, burst_size=2)

    assert limiter.admit("k", cost=3).admitted is False
    assert limiter.admit("k").admitted is True
    assert limiter.admit("k").admitted is True


def test_concurrent_admissions_never_exceed_burst() -> None:
    limiter = InMemoryTokenBucketRateLimiter(
        per_second=1,
        burst_size=10,
        clock=lambda: 1000.0,
    )

    with ThreadPoolExecutor(max_workers=16) as pool:
        decisions = list(pool.map(lambda _: limiter.admit("shared"), range(200)))

    assert sum(d.admitted for d in decisions) == 10


def test_prune_drops_only_full_buckets() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=3, burst_size=10, prune_interval_seconds=0)

    limiter.admit("busy")
    limiter.admit("busy")
    limiter.admit("idle")
    clock.return_value = 1000.4  # idle refilled (9 + 1.2), busy has 9.2

    assert limiter.prune() == 1
    assert len(limiter) == 1

    # The surviving bucket keeps its deficit
    decision = limiter.admit("busy")
    assert decision.remaining == 8

    clock.return_value = 2000.0
    assert limiter.prune() == 1
    assert len(limiter) == 0


def test_pruned_key_behaves_like_fresh_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=1, burst_size=2, prune_interval_seconds=0)

    limiter.admit("k")
    clock.return_value = 1010.0
    limiter.prune()

    decisions = [limiter.admit("k") for _ in range(3)]
    assert [d.admitted for d in decisions] == [True, True, False]


def test_automatic_prune_runs_after_interval() -> None:
    clock = Mock(return_value=1000.0)
    limiter = _limiter(clock, per_second=1, burst_size=2, prune_interval_seconds=60)

    limiter.admit("old")
    clock.return_value = 1030.0
    limiter.admit("recent")
    assert len(limiter) == 2

    clock.return_value = 1061.0
    limiter.admit("new")
    # "old" and "recent" are full again and were swept; "new" was just drained
    assert len(limiter) == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"per_second": 0, "burst_size": 10},
        {"per_second": 3, "burst_size": 0},
        {"per_second": 3, "burst_size": 10, "prune_interval_seconds": -1},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryTokenBucketRateLimiter(**kwargs)


def test_invalid_admit_args() -> None:
    limiter = InMemoryTokenBucketRateLimiter(per_second=1, burst_size=1)

    with pytest.raises(ValueError):
        limiter.admit("")

    with pytest.raises(ValueError):
        limiter.admit("k", cost=0)
