"""HTTP middleware for request ID propagation and correlation.

The middleware:
- Accepts an incoming request-id header or generates a UUID
- Stores request_id in contextvars so every log line of the request carries it
- Renders unexpected errors while the request id is still set, so the 500
  envelope carries the header and its log line carries the id
- Echoes request_id and total duration back in the response headers

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from dnsqueryx.core.config import settings
from dnsqueryx.core.exception_handlers import general_exception_handler
from dnsqueryx.core.logging import clear_request_id, set_request_id


def _request_id_header(request: Request) -> str:
    app_settings = getattr(request.app.state, "settings", None) or settings
    return app_settings.log.request_id_header


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a correlation id and duration to every request/response pair.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The response from the next handler with the app's
            request-id header and ``X-Request-Duration-ms`` added.
    """

    header_name = _request_id_header(request)
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            # Outermost error middleware would run after the id is cleared
            response = await general_exception_handler(request, exc)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
