"""HTTP transport adapters - abstracts over the HTTP client library."""

from bnc_gateway.adapters.transport.base import AbstractTransport, TransportResponse
from bnc_gateway.adapters.transport.httpx_transport import HttpxTransport

__all__ = [
    "AbstractTransport",
    "HttpxTransport",
    "TransportResponse",
]
