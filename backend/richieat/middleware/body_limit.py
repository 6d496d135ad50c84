"""
RICHIEAT Backend — Body Size Limit Middleware
===============================================

What:  Rejects request bodies larger than the fixed ceiling (10MB) with 413.
When:  Last pipeline stage, directly in front of routing and JSON parsing.

Two checks:
    1. Declared Content-Length above the limit → 413 before anything is read
    2. Chunked / undeclared bodies are counted while the route reads them;
       crossing the limit raises PayloadTooLargeError, which the global
       handler turns into the same 413 envelope

Malformed JSON is not handled here: FastAPI raises RequestValidationError
while parsing, and the handler in main.py maps it to 400.
"""

import logging

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from richieat.config import MAX_BODY_SIZE_BYTES
from richieat.exceptions import PayloadTooLargeError
from richieat.middleware.errors import error_response

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """Pure ASGI middleware enforcing a maximum request body size."""

    def __init__(self, app: ASGIApp, max_body_size: int = MAX_BODY_SIZE_BYTES) -> None:
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                declared_size = int(declared)
            except ValueError:
                response = error_response(
                    scope, 400, "validation_error", "Invalid Content-Length header"
                )
                await response(scope, receive, send)
                return
            if declared_size > self.max_body_size:
                logger.warning(
                    "Rejected %d byte body for %s %s (limit %d)",
                    declared_size,
                    scope.get("method"),
                    scope.get("path"),
                    self.max_body_size,
                )
                exc = PayloadTooLargeError(limit=self.max_body_size)
                response = error_response(scope, exc.status_code, exc.error_code, exc.message)
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    raise PayloadTooLargeError(limit=self.max_body_size)
            return message

        await self.app(scope, limited_receive, send)
