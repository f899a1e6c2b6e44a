"""Unit tests for the in-memory weight budget."""

import threading
from unittest.mock import Mock

import pytest

from bnc_gateway.adapters.rate_limit.in_memory import WeightBudget


def test_admits_weights_summing_to_limit(budget: WeightBudget) -> None:
    for weight in (1, 4, 5):
        assert budget.reserve(weight) == 0

    assert budget.snapshot().accumulated == 10


def test_rejection_leaves_accumulated_unchanged(budget: WeightBudget, clock) -> None:
    assert budget.reserve(8) == 0

    clock.advance(15)
    hint = budget.reserve(3)

    assert hint == pytest.approx(45.0)
    assert budget.snapshot().accumulated == 8


def test_smaller_weight_still_fits_after_rejection(budget: WeightBudget) -> None:
    budget.reserve(8)

    assert budget.reserve(5) > 0
    assert budget.reserve(2) == 0
    assert budget.snapshot().accumulated == 10


def test_window_rollover_resets_to_new_weight(budget: WeightBudget, clock) -> None:
    budget.reserve(10)
    assert budget.reserve(1) > 0

    clock.advance(60)
    assert budget.reserve(3) == 0

    snapshot = budget.snapshot()
    assert snapshot.accumulated == 3
    assert snapshot.window_start == clock.current


def test_window_still_open_just_before_expiry(budget: WeightBudget, clock) -> None:
    budget.reserve(10)

    clock.advance(59.5)
    assert budget.reserve(1) == pytest.approx(0.5)


def test_cold_start_is_empty_window() -> None:
    clock = Mock(return_value=500.0)
    budget = WeightBudget(limit=5, window_seconds=60, clock=clock)

    snapshot = budget.snapshot()
    assert snapshot.accumulated == 0
    assert snapshot.window_start == 500.0
    assert snapshot.remaining == 5


def test_snapshot_reports_time_to_reset(budget: WeightBudget, clock) -> None:
    budget.reserve(4)
    clock.advance(20)

    snapshot = budget.snapshot()
    assert snapshot.resets_in == pytest.approx(40.0)
    assert snapshot.remaining == 6
    assert snapshot.effective_accumulated == 4

    clock.advance(50)
    expired = budget.snapshot()
    assert expired.resets_in == 0
    assert expired.remaining == 10
    assert expired.effective_accumulated == 0
    assert expired.accumulated == 4


def test_concurrent_reservations_lose_no_updates() -> None:
    budget = WeightBudget(limit=200, window_seconds=60)
    barrier = threading.Barrier(50)
    hints: list[float] = []
    hints_lock = threading.Lock()

    def _reserve(weight: int) -> None:
        barrier.wait()
        hint = budget.reserve(weight)
        with hints_lock:
            hints.append(hint)

    # 50 threads, weights alternating 3 and 5, summing to exactly 200
    threads = [threading.Thread(target=_reserve, args=(3 if i % 2 else 5,)) for i in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert hints == [0.0] * 50
    assert budget.snapshot().accumulated == 200


def test_concurrent_overflow_admits_exactly_one() -> None:
    budget = WeightBudget(limit=10, window_seconds=60)
    budget.reserve(3)
    barrier = threading.Barrier(2)
    hints: list[float] = []

    def _reserve() -> None:
        barrier.wait()
        hints.append(budget.reserve(4))

    # Room left is 7: one of the two weight-4 calls fits, the other does not.
    threads = [threading.Thread(target=_reserve) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(h == 0 for h in hints) == [False, True]
    assert budget.snapshot().accumulated == 7


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        WeightBudget(**kwargs)


def test_invalid_weight(budget: WeightBudget) -> None:
    with pytest.raises(ValueError):
        budget.reserve(0)

    assert budget.snapshot().accumulated == 0
