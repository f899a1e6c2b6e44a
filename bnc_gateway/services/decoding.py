"""Decode raw API bodies into typed models.

When a body does not match the expected shape it is tried against the API's
``{code, msg}`` error envelope, so callers see the API's own explanation
rather than a validation traceback.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from bnc_gateway.core.errors import BinanceAPIError, ResponseParseError
from bnc_gateway.schemas.market import BinanceErrorEnvelope

T = TypeVar("T")

_envelope_adapter = TypeAdapter(BinanceErrorEnvelope)


@lru_cache(maxsize=None)
def _adapter_for(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def decode_payload(payload: bytes, target: type[T] | Any) -> T:
    """Parse ``payload`` as JSON into ``target``.

    Args:
        payload: Raw success body.
        target: Model class or type expression such as ``list[Trade]``.

    Returns:
        The validated value.

    Raises:
        BinanceAPIError: Body is the API's error envelope.
        ResponseParseError: Body matches neither; ``__cause__`` is the
            original validation error.
    """
    try:
        return _adapter_for(target).validate_json(payload)
    except ValidationError as exc:
        try:
            envelope = _envelope_adapter.validate_json(payload)
        except ValidationError:
            raise ResponseParseError(
                code="upstream_unparsable_body",
                message=f"Could not parse response body: {exc}",
            ) from exc
        raise BinanceAPIError(envelope.code, envelope.msg) from None
