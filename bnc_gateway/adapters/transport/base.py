"""Transport interface used by the request gateway."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP response as seen by the gateway.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers; lookups should be case-insensitive.
        body: Raw response body.
    """

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        value = self.headers.get(name)
        if value is not None:
            return value
        lowered = name.lower()
        for key, candidate in self.headers.items():
            if key.lower() == lowered:
                return candidate
        return None


class AbstractTransport(ABC):
    """Stateless HTTP sender."""

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
    ) -> TransportResponse:
        """Perform one HTTP request.

        Args:
            method: HTTP method (the gateway only issues GET).
            url: Absolute URL including the query string.
            headers: Request headers.

        Returns:
            TransportResponse for any status code the server answered with.

        Raises:
            TransportError: If no response was received (DNS, connect, timeout).
        """
        ...
