"""
RICHIEAT Backend — Access Logging Middleware
==============================================

What:  One log line per HTTP request: method, path, status, latency, client
       IP, request ID and (when the route identified one) the advisor.
When:  Second stage, after RequestIDMiddleware.

Log levels follow the status code:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

What we log vs what we DON'T log (privacy):
    ✅ method, path, status, duration, IP, request ID, advisor id
    ❌ request bodies (passwords, client PII), Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from richieat.middleware.request_id import current_request_id

logger = logging.getLogger("richieat.access")


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs structured information about each HTTP request and response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        ip = client_ip(request)

        try:
            response = await call_next(request)
        except Exception:
            # The terminal error handler answers with 500; record it here too.
            self._log(request, method, path, 500, start_time, ip)
            raise

        self._log(request, method, path, response.status_code, start_time, ip)
        return response

    def _log(
        self,
        request: Request,
        method: str,
        path: str,
        status: int,
        start_time: float,
        ip: str,
    ) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = current_request_id(request)
        advisor_id = getattr(request.state, "advisor_id", None)

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s%s",
            method,
            path,
            status,
            duration_ms,
            rid,
            ip,
            f" (Advisor: {advisor_id})" if advisor_id else "",
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": ip,
                "advisor_id": advisor_id,
            },
        )
