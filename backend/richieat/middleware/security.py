"""
RICHIEAT Backend — Security Logging Middleware
================================================

What:  Flags suspicious traffic in the `richieat.security` log. Never blocks.
When:  Third stage, after access logging and before CORS.

Signals:
    1. Repeated auth failures: 401 responses from one IP within a sliding
       window reach the configured threshold (default 5 in 15 minutes)
    2. Malformed payloads: requests answered with 400 or 413
    3. Suspicious request targets: path traversal, script injection, SQL
       keywords or NUL bytes in the path or query string

Algorithm: Sliding Window Counter
    Each IP keeps a list of failure timestamps. On every failure, entries
    older than the window are dropped; the remaining count is compared
    with the threshold. Idle IPs are pruned every 1000 recorded failures.

    This state is per-process. Multiple workers each see their own share
    of the traffic.
"""

import logging
import re
import time
from collections import defaultdict
from typing import Dict, List, Optional
from urllib.parse import unquote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from richieat.config import settings
from richieat.middleware.logging import client_ip
from richieat.middleware.request_id import current_request_id

logger = logging.getLogger("richieat.security")

SUSPICIOUS_PATTERNS = [
    re.compile(r"\.\./"),
    re.compile(r"<\s*script", re.IGNORECASE),
    re.compile(r"\bunion\b.+\bselect\b", re.IGNORECASE),
    re.compile(r"('|\")\s*or\s+\d+\s*=\s*\d+", re.IGNORECASE),
    re.compile(r"\x00"),
]


class SecurityLoggingMiddleware(BaseHTTPMiddleware):
    """
    Observes requests and responses and logs security-relevant patterns.

    Configuration (constructor, defaulting to settings):
        failure_threshold: 401s from one IP before a warning
        failure_window: sliding window length in seconds
    """

    def __init__(
        self,
        app,
        failure_threshold: Optional[int] = None,
        failure_window: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self.failure_threshold = failure_threshold or settings.security_auth_failure_threshold
        self.failure_window = failure_window or settings.security_auth_failure_window
        self._failures: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        ip = client_ip(request)
        self._inspect_target(request, ip)

        response = await call_next(request)

        status = response.status_code
        if status == 401:
            self._record_auth_failure(request, ip)
        elif status in (400, 413):
            logger.warning(
                "Malformed payload rejected (%d): %s %s from %s [%s]",
                status,
                request.method,
                request.url.path,
                ip,
                current_request_id(request),
            )
        return response

    def _inspect_target(self, request: Request, ip: str) -> None:
        target = unquote(request.url.path)
        if request.url.query:
            target += "?" + unquote(request.url.query)
        for pattern in SUSPICIOUS_PATTERNS:
            if pattern.search(target):
                logger.warning(
                    "Suspicious request pattern %r: %s %s from %s [%s]",
                    pattern.pattern,
                    request.method,
                    request.url.path,
                    ip,
                    current_request_id(request),
                )
                return

    def _record_auth_failure(self, request: Request, ip: str) -> None:
        now = time.time()
        window_start = now - self.failure_window

        self._failures[ip] = [ts for ts in self._failures[ip] if ts > window_start]
        self._failures[ip].append(now)
        count = len(self._failures[ip])

        if count >= self.failure_threshold:
            logger.warning(
                "Repeated authentication failures: %d from %s within %ds (last: %s %s) [%s]",
                count,
                ip,
                self.failure_window,
                request.method,
                request.url.path,
                current_request_id(request),
            )
        else:
            logger.info("Authentication failure from %s (%s %s)", ip, request.method, request.url.path)

        self._recorded += 1
        if self._recorded % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

    def failure_count(self, ip: str) -> int:
        window_start = time.time() - self.failure_window
        return sum(1 for ts in self._failures.get(ip, []) if ts > window_start)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._failures.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for ip in inactive_ips:
            del self._failures[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
