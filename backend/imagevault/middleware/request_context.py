"""
ImageVault Backend — Request Context Middleware
=================================================

What:  Gives every request an id, turns errors no handler claimed into a
       `{"message": ...}` 500, and writes one access log line.
Why:   The id links the access line, the service log lines and the
       X-Request-ID a client reports with a failed upload or update.
How:   The id comes from the client's X-Request-ID or a short UUID and is
       kept in a ContextVar; RequestIdFilter copies it onto every log
       record so the root format can print %(request_id)s.

Access lines name the matched route template rather than the raw URL, so
`GET /api/images/{image_id}` groups every record lookup into one key and
stored upload filenames stay out of the log.

Level by status class:
    5xx → ERROR, 4xx → WARNING, everything else → INFO
"""

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger("imagevault.access")

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

# Probed every few seconds by orchestrators
UNLOGGED_ROUTES = {"/health"}


class RequestIdFilter(logging.Filter):
    """Stamps the current request id onto each record as `request_id`."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


def route_template(request: Request) -> str:
    """`/api/images/{image_id}` for a matched route, the raw path otherwise."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _status_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid
        started = time.perf_counter()

        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                # Exceptions the app's handlers did not map; answered here so
                # the response still carries X-Request-ID.
                logging.getLogger("imagevault").error(
                    "Unexpected error on %s %s: %s",
                    request.method,
                    route_template(request),
                    exc,
                    exc_info=True,
                )
                response = JSONResponse(
                    status_code=500,
                    content={"message": str(exc) or type(exc).__name__},
                )

            response.headers["X-Request-ID"] = rid

            route = route_template(request)
            if route not in UNLOGGED_ROUTES:
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.log(
                    _status_level(response.status_code),
                    "%s %s %d %.1fms",
                    request.method,
                    route,
                    response.status_code,
                    elapsed_ms,
                    extra={
                        "route": route,
                        "status": response.status_code,
                        "duration_ms": round(elapsed_ms, 2),
                        "client_ip": request.client.host if request.client else "unknown",
                    },
                )
            return response
        finally:
            request_id_var.reset(token)
