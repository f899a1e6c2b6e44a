"""Weight budget interfaces.

The gateway depends on this abstraction (not the concrete implementation) so
the in-process counter can later be swapped for a shared store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BudgetSnapshot:
    """Consistent view of a weight budget at one instant.

    Attributes:
        accumulated: Weight reserved since ``window_start``.
        window_start: Clock reading at which the current window began.
        limit: Max weight per window.
        window_seconds: Window length in seconds.
        taken_at: Clock reading when the snapshot was taken.
    """

    accumulated: int
    window_start: float
    limit: int
    window_seconds: float
    taken_at: float

    @property
    def remaining(self) -> int:
        """Weight still available; the full limit once the window has expired."""
        return max(0, self.limit - self.effective_accumulated)

    @property
    def effective_accumulated(self) -> int:
        """Weight counted against the window; 0 once the window has expired."""
        if self.resets_in == 0:
            return 0
        return self.accumulated

    @property
    def resets_in(self) -> float:
        """Seconds until the current window expires (0 if it already has)."""
        return max(0.0, self.window_start + self.window_seconds - self.taken_at)


class AbstractWeightBudget(ABC):
    """Interface for request-weight accountants."""

    @abstractmethod
    def reserve(self, weight: int) -> float:
        """Atomically record ``weight`` if it fits in the current window.

        Args:
            weight: Positive request cost.

        Returns:
            0 when the weight was recorded and the call may proceed,
            otherwise the number of seconds until the window rolls over.
            Nothing is recorded in the latter case.
        """
        raise NotImplementedError

    @abstractmethod
    def snapshot(self) -> BudgetSnapshot:
        """Return the current state without mutating it."""
        raise NotImplementedError
