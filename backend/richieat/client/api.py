"""
RICHIEAT Client — Auth API
============================

What:  Async HTTP client for /api/auth, built on httpx.
How:   Attaches `Authorization: Bearer <token>` from session storage to every
       call, returns the decoded JSON body on 2xx, raises APIError otherwise.
       Transport failures (connection refused, timeouts) are raised as
       APIError too, so callers handle one exception type.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from richieat.client.storage import TOKEN_KEY, KeyValueStorage, MemoryStorage

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)


class APIError(Exception):
    """A failed API call: HTTP error status or transport failure."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.request_id = request_id
        super().__init__(message)


class AuthAPI:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        storage: Optional[KeyValueStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def login(self, credentials: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/auth/login", json=credentials)

    async def register(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/auth/register", json=data)

    async def get_profile(self) -> Dict[str, Any]:
        return await self._request("GET", "/auth/profile")

    async def update_profile(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", "/auth/profile", json=changes)

    async def logout(self) -> Dict[str, Any]:
        return await self._request("POST", "/auth/logout")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self, method: str, path: str, json: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        headers = {}
        token = self.storage.get_item(TOKEN_KEY)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise APIError("Network error. Please check your connection.") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error:
            raise APIError(
                body.get("message") or f"Request failed with status {response.status_code}",
                status_code=response.status_code,
                request_id=body.get("requestId") or response.headers.get("X-Request-ID"),
            )
        return body
