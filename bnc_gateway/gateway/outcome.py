"""Call input and three-way call result types.

Every gateway call yields exactly one of ``Success``, ``RetryWarning`` or
``Failure``. Callers branch with ``match`` (or ``isinstance``) instead of
checking several nullable fields in the right order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, Mapping, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class CallSpec:
    """One logical API call.

    Attributes:
        endpoint: Path relative to the API base URL, e.g. ``/api/v3/depth``.
        params: Query parameters; values are sent as given.
        weight: Cost of the call in the API's published weight table.
    """

    endpoint: str
    params: Mapping[str, str] = field(default_factory=dict)
    weight: int = 1

    def __post_init__(self) -> None:
        if self.weight < 1:
            raise ValueError("weight must be >= 1")
        if not self.endpoint.startswith("/"):
            raise ValueError("endpoint must start with '/'")
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


@dataclass(frozen=True)
class Success(Generic[T]):
    """The call reached the API and returned usable data."""

    payload: T


@dataclass(frozen=True)
class RetryWarning:
    """The call was not made, or the API asked us to back off.

    Nothing was corrupted; the same call may be retried after
    ``retry_after_seconds``.
    """

    retry_after_seconds: float
    message: str


@dataclass(frozen=True)
class Failure:
    """The call failed in a way retrying will not fix."""

    cause: Exception


Outcome = Union[Success[T], RetryWarning, Failure]
