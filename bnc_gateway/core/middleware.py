"""HTTP middleware for request ID propagation and correlation.

Every request/response pair carries a correlation id so gateway log lines
(budget exhaustion, upstream rate limits, edge rejections) can be tied back
to the inbound request that triggered them.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from bnc_gateway.core.config import settings
from bnc_gateway.core.logging import clear_request_id, set_request_id


async def request_id_middleware(request: Request, call_next) -> Response:
    """Bind a request id for the duration of the request and echo it back.

    The header name comes from the settings the app was built with
    (``LOG_REQUEST_ID_HEADER``, default ``X-Request-ID``). An incoming value
    is reused when present, otherwise a UUID4 is generated. The response
    gets the same header plus ``X-Request-Duration-ms``.
    """

    header_name = getattr(request.app.state, "request_id_header", settings.log.request_id_header)
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
