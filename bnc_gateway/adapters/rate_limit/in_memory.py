"""In-memory fixed-window weight budget.

Notes:
- Per-process only: counters reset on restart (cold start is an empty window).
- Thread-safe: every read and write of the counters happens under one lock.
- Windows start at the first reservation after expiry, not on clock
  boundaries, so a fresh window always gets its full length.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from bnc_gateway.adapters.rate_limit.base import AbstractWeightBudget, BudgetSnapshot

logger = logging.getLogger(__name__)


class WeightBudget(AbstractWeightBudget):
    """Fixed-window accountant for API request weight.

    One instance is meant to be shared by every gateway that spends the same
    credential's budget. Construct it once and pass it in explicitly.

    A fixed window is slightly more permissive than a sliding one at window
    boundaries. Configure ``limit`` below the API's real cap to absorb that.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the budget with an empty window starting now.

        Args:
            limit: Maximum weight per window.
            window_seconds: Length of the window in seconds.
            clock: Time source returning seconds; must not go backwards.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = float(window_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._accumulated = 0
        self._window_start = clock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def reserve(self, weight: int) -> float:
        """Record ``weight`` against the current window if it fits.

        Args:
            weight: Positive request cost.

        Returns:
            0.0 when admitted, otherwise seconds left in the current window.

        Raises:
            ValueError: If weight is not positive.
        """
        if weight < 1:
            raise ValueError("weight must be >= 1")

        with self._lock:
            now = self._clock()
            elapsed = now - self._window_start

            if elapsed >= self._window_seconds:
                previous = self._accumulated
                self._window_start = now
                self._accumulated = weight
                logger.debug(
                    "weight_budget.window_reset",
                    extra={"previous_weight": previous, "weight": weight},
                )
                return 0.0

            if self._accumulated + weight <= self._limit:
                self._accumulated += weight
                return 0.0

            sleep_hint = self._window_seconds - elapsed
            accumulated = self._accumulated

        logger.debug(
            "weight_budget.exhausted",
            extra={
                "accumulated": accumulated,
                "weight": weight,
                "limit": self._limit,
                "sleep_hint_s": round(sleep_hint, 3),
            },
        )
        return sleep_hint

    def snapshot(self) -> BudgetSnapshot:
        with self._lock:
            return BudgetSnapshot(
                accumulated=self._accumulated,
                window_start=self._window_start,
                limit=self._limit,
                window_seconds=self._window_seconds,
                taken_at=self._clock(),
            )
