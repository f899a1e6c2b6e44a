"""Rate-limited request gateway and its call/result types."""

from bnc_gateway.gateway.outcome import CallSpec, Failure, Outcome, RetryWarning, Success
from bnc_gateway.gateway.request_gateway import RequestGateway

__all__ = [
    "CallSpec",
    "Failure",
    "Outcome",
    "RequestGateway",
    "RetryWarning",
    "Success",
]
