"""Request-weight budgeting.

This package provides a small abstraction layer so the client can start with
an in-process counter and later move to a shared store without touching the
gateway.
"""

from bnc_gateway.adapters.rate_limit.base import AbstractWeightBudget, BudgetSnapshot
from bnc_gateway.adapters.rate_limit.in_memory import WeightBudget

__all__ = [
    "AbstractWeightBudget",
    "BudgetSnapshot",
    "WeightBudget",
]
