"""
RICHIEAT Backend — CORS Policy Middleware
===========================================

What:  Enforces the origin allow-list, then applies standard CORS headers.
When:  Fourth stage, before body limits.

Starlette's CORSMiddleware only withholds headers from a disallowed
origin; the browser then blocks the response, but the handler has already
run. Here a request whose Origin header is not on the allow-list is
answered with 403 before it reaches a route. Requests without an Origin
header (same-origin navigation, curl, health checks) pass through.
"""

import logging
from typing import Iterable

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from richieat.middleware.errors import error_response

logger = logging.getLogger(__name__)


class CORSPolicyMiddleware:
    """Pure ASGI middleware: origin guard in front of Starlette's CORSMiddleware."""

    def __init__(self, app: ASGIApp, allow_origins: Iterable[str]) -> None:
        self.allow_origins = frozenset(allow_origins)
        self.cors = CORSMiddleware(
            app,
            allow_origins=sorted(self.allow_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.cors(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        if origin is not None and origin not in self.allow_origins:
            logger.warning("Rejected request from disallowed origin %s", origin)
            response = error_response(
                scope,
                status_code=403,
                error="origin_not_allowed",
                message="Not allowed by CORS",
            )
            await response(scope, receive, send)
            return

        await self.cors(scope, receive, send)
