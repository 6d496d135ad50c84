"""
RICHIEAT Backend — Request ID Middleware
==========================================

What:  Generates a unique ID for each incoming request and echoes it back.
How:   Creates a UUID, stores it in a ContextVar and in `request.state`,
       returns it in the `X-Request-ID` response header.
When:  First stage of the request pipeline.

Why the ID is always server-generated:
    Two concurrent requests must never share a correlation ID, so a client
    supplied X-Request-ID is not trusted. The inbound value, if any, is
    logged alongside ours for cross-system tracing.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local storage for the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex


def current_request_id(request: Request) -> str:
    """
    Request ID for `request`, readable from any layer.

    `request.state` lives in the ASGI scope, so it is also visible from the
    outermost server-error handler, where the ContextVar has already been
    reset.
    """
    return getattr(request.state, "request_id", "") or request_id_var.get("")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns a unique ID to each request for tracing.

    Behavior:
        1. Generate a new UUID (hex)
        2. Store in ContextVar for loggers and in request.state for handlers
        3. Add to response headers for the client to capture
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = new_request_id()
        inbound = request.headers.get(REQUEST_ID_HEADER)
        if inbound:
            logger.debug("Request %s carries upstream id %s", rid, inbound)

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
