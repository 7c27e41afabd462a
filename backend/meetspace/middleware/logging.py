"""
MeetSpace Backend: Request Logging Middleware
===============================================

What:  One access log line per request on the `meetspace.access` logger.
How:   Measures wall time around the downstream call and picks the level
       from the status code. Protected routes set request.state.subject_id
       in the access gate, so the line also names the caller once known.

Logged: method, path, status, duration, request id, subject id, client ip.
Never logged: request or response bodies, the Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from meetspace.middleware.request_id import request_id_var

logger = logging.getLogger("meetspace.access")

# Probed every few seconds by load balancers
_QUIET_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": elapsed_ms,
            "subject_id": getattr(request.state, "subject_id", None) or "-",
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(
            _level_for(response.status_code),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] "
            "subject=%(subject_id)s from %(client_ip)s",
            fields,
            extra=fields,
        )
        return response
