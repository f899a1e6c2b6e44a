"""Rate-limited request gateway.

Runs one API call under the shared weight budget and classifies what came
back. The gateway never retries and never sleeps: a ``RetryWarning`` carries
the suggested wait and the caller decides what to do with it.
"""

from __future__ import annotations

import logging
import math
from typing import Mapping
from urllib.parse import urlencode

from bnc_gateway.adapters.rate_limit.base import AbstractWeightBudget
from bnc_gateway.adapters.transport.base import AbstractTransport, TransportResponse
from bnc_gateway.core.errors import TransportError, UnexpectedStatusError
from bnc_gateway.gateway.outcome import CallSpec, Failure, Outcome, RetryWarning, Success

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-MBX-APIKEY"

BUDGET_EXHAUSTED = "budget exhausted"
TRANSPORT_FAILURE = "transport failure"
EDGE_REJECTION = "edge rejection"


def parse_retry_after(value: str | None) -> float:
    """Parse a ``Retry-After`` header given in whole seconds.

    Missing, unparsable or non-finite values yield 0.
    """
    if value is None:
        return 0.0
    try:
        seconds = float(value.strip())
    except ValueError:
        return 0.0
    if not math.isfinite(seconds):
        return 0.0
    return max(0.0, seconds)


class RequestGateway:
    """Execute API calls under a weight budget.

    Attributes:
        base_url: Scheme and authority prepended to every endpoint.
        budget: Shared weight accountant; never recreated per call.
        transport: HTTP sender.
    """

    def __init__(
        self,
        *,
        base_url: str,
        budget: AbstractWeightBudget,
        transport: AbstractTransport,
        api_key: str | None = None,
        edge_rejection_cooldown_seconds: float = 60.0,
        transport_backoff_seconds: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.budget = budget
        self.transport = transport
        self._api_key = api_key
        self._edge_cooldown = edge_rejection_cooldown_seconds
        self._transport_backoff = transport_backoff_seconds

    def build_url(self, spec: CallSpec) -> str:
        url = f"{self.base_url}{spec.endpoint}"
        if spec.params:
            url = f"{url}?{urlencode(sorted(spec.params.items()))}"
        return url

    def _headers(self) -> Mapping[str, str]:
        if self._api_key:
            return {API_KEY_HEADER: self._api_key}
        return {}

    async def execute(self, spec: CallSpec) -> Outcome[bytes]:
        """Run one call and classify the result.

        Args:
            spec: Endpoint, query parameters and weight of the call.

        Returns:
            ``Success`` with the raw body, ``RetryWarning`` with a suggested
            wait, or ``Failure`` with the cause.
        """
        # Reserve exactly once per call; the counter is shared.
        sleep_hint = self.budget.reserve(spec.weight)
        if sleep_hint > 0:
            logger.info(
                "gateway.budget_exhausted",
                extra={
                    "endpoint": spec.endpoint,
                    "weight": spec.weight,
                    "retry_after_s": round(sleep_hint, 3),
                },
            )
            return RetryWarning(retry_after_seconds=sleep_hint, message=BUDGET_EXHAUSTED)

        try:
            response = await self.transport.send("GET", self.build_url(spec), self._headers())
        except TransportError as exc:
            logger.warning(
                "gateway.transport_failure",
                extra={
                    "endpoint": spec.endpoint,
                    "error_msg": str(exc),
                    "retry_after_s": self._transport_backoff,
                },
            )
            return RetryWarning(
                retry_after_seconds=self._transport_backoff,
                message=TRANSPORT_FAILURE,
            )

        return self.classify(spec, response)

    def classify(self, spec: CallSpec, response: TransportResponse) -> Outcome[bytes]:
        status = response.status_code

        if status == 200:
            return Success(response.body)

        if status == 429:
            retry_after = parse_retry_after(response.header("Retry-After"))
            # Expected under load; not worth more than info.
            logger.info(
                "gateway.rate_limited",
                extra={"endpoint": spec.endpoint, "retry_after_s": retry_after},
            )
            return RetryWarning(
                retry_after_seconds=retry_after,
                message=f"Status code 429 received, API asks to wait {retry_after:g}s",
            )

        if status == 403:
            # Usually the CDN in front of the API, not the API itself.
            logger.warning(
                "gateway.edge_rejection",
                extra={
                    "endpoint": spec.endpoint,
                    "body": response.body[:512].decode("utf-8", errors="replace"),
                    "retry_after_s": self._edge_cooldown,
                },
            )
            return RetryWarning(retry_after_seconds=self._edge_cooldown, message=EDGE_REJECTION)

        logger.error(
            "gateway.unexpected_status",
            extra={
                "endpoint": spec.endpoint,
                "status_code": status,
                "body": response.body[:512].decode("utf-8", errors="replace"),
            },
        )
        return Failure(UnexpectedStatusError(status, response.body))
