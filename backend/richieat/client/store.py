"""
RICHIEAT Client — Auth Store
==============================

What:  Single source of truth for "who is signed in" on the client side.
State: user, is_authenticated, loading, status (checking / authenticated /
       unauthenticated).
How:   login/register persist token + user together; logout and any failed
       profile check purge both together. Operations never raise for API
       failures: they resolve to {"success": False, "message": ...} and raise
       an error notification.

Concurrency:
    Overlapping login/register calls are not de-duplicated: each successful
    response persists its own token and user, so the last one to resolve
    wins. Every call takes a ticket; a session check that resolves after a
    newer call has started is discarded, so a stale profile check cannot
    purge a session that was just created.
"""

import itertools
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from richieat.client.api import APIError, AuthAPI
from richieat.client.notifications import Notifier
from richieat.client.storage import TOKEN_KEY, USER_KEY, KeyValueStorage

logger = logging.getLogger("richieat.client")

Listener = Callable[[Dict[str, Any]], None]


class AuthStatus(str, Enum):
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class AuthStore:
    def __init__(
        self,
        api: AuthAPI,
        storage: KeyValueStorage,
        notifier: Optional[Notifier] = None,
    ):
        self.api = api
        self.storage = storage
        self.notifier = notifier or Notifier()

        self.user: Optional[Dict[str, Any]] = None
        self.is_authenticated = False
        self.loading = True
        self.status = AuthStatus.CHECKING

        self._listeners: List[Listener] = []
        self._tickets = itertools.count(1)
        self._latest = 0

    # ── Observers ────────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> Dict[str, Any]:
        return {
            "user": self.user,
            "isAuthenticated": self.is_authenticated,
            "loading": self.loading,
            "status": self.status.value,
        }

    # ── Startup check ────────────────────────────────────────────────────

    async def init(self) -> None:
        await self.check_auth_status()

    async def recheck(self) -> None:
        await self.check_auth_status()

    async def check_auth_status(self) -> None:
        """
        Re-validate the persisted session against the server.

        The stored user is shown optimistically while the profile call is in
        flight; is_authenticated stays False until the server confirms.
        """
        ticket = self._begin()
        token = self.storage.get_item(TOKEN_KEY)
        stored_user = self._read_stored_user()

        if not token:
            self._purge()
            self._finish(ticket, user=None, status=AuthStatus.UNAUTHENTICATED)
            return

        self._update(user=stored_user, status=AuthStatus.CHECKING, loading=True)

        try:
            response = await self.api.get_profile()
        except APIError as e:
            logger.info("Stored session rejected: %s", e.message)
            response = None

        if not self._is_current(ticket):
            return
        if response and response.get("success") and response.get("advisor"):
            advisor = response["advisor"]
            self.storage.set_item(USER_KEY, json.dumps(advisor))
            self._finish(ticket, user=advisor, status=AuthStatus.AUTHENTICATED)
        else:
            self._purge()
            self._finish(ticket, user=None, status=AuthStatus.UNAUTHENTICATED)

    # ── Session operations ───────────────────────────────────────────────

    async def login(self, credentials: Dict[str, Any]) -> Dict[str, Any]:
        return await self._authenticate(
            self.api.login,
            credentials,
            success_message="Login successful!",
            failure_message="Login failed. Please try again.",
        )

    async def register(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._authenticate(
            self.api.register,
            data,
            success_message="Registration successful!",
            failure_message="Registration failed. Please try again.",
        )

    async def logout(self) -> Dict[str, Any]:
        """Tell the server, then purge local state whatever the outcome."""
        ticket = self._begin(keep_status=True)
        try:
            await self.api.logout()
        except APIError as e:
            logger.warning("Logout request failed: %s", e.message)
        else:
            self.notifier.success("Logged out successfully!")
        finally:
            self._purge()
            self._finish(ticket, user=None, status=AuthStatus.UNAUTHENTICATED, force=True)
        return {"success": True}

    async def update_profile(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        ticket = self._begin(keep_status=True)
        try:
            response = await self.api.update_profile(changes)
        except APIError as e:
            message = e.message or "Profile update failed"
            self._finish(ticket, user=self.user, status=self.status)
            self.notifier.error(message)
            return {"success": False, "message": message}

        advisor = response.get("advisor")
        if advisor:
            self.storage.set_item(USER_KEY, json.dumps(advisor))
        self._finish(ticket, user=advisor or self.user, status=self.status)
        self.notifier.success("Profile updated successfully!")
        return {"success": True, "user": advisor}

    # ── Internals ────────────────────────────────────────────────────────

    async def _authenticate(
        self,
        call: Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]],
        payload: Dict[str, Any],
        success_message: str,
        failure_message: str,
    ) -> Dict[str, Any]:
        ticket = self._begin(keep_status=True)
        try:
            response = await call(payload)
        except APIError as e:
            message = e.message or failure_message
            self._finish(ticket, user=self.user, status=self.status)
            self.notifier.error(message)
            return {"success": False, "message": message}

        token = response.get("token")
        advisor = response.get("advisor")
        if not (response.get("success") and token and advisor):
            message = response.get("message") or failure_message
            self._finish(ticket, user=self.user, status=self.status)
            self.notifier.error(message)
            return {"success": False, "message": message}

        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, json.dumps(advisor))
        self._finish(ticket, user=advisor, status=AuthStatus.AUTHENTICATED, force=True)
        self.notifier.success(success_message)
        return {"success": True, "user": advisor}

    def _read_stored_user(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get_item(USER_KEY)
        if raw is None:
            return None
        try:
            user = json.loads(raw)
        except ValueError:
            user = None
        if not isinstance(user, dict):
            # Corrupt entry: drop it without bothering the user.
            self.storage.remove_item(USER_KEY)
            return None
        return user

    def _purge(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)

    def _begin(self, keep_status: bool = False) -> int:
        ticket = next(self._tickets)
        self._latest = ticket
        if keep_status:
            self._update(loading=True)
        else:
            self._update(loading=True, status=AuthStatus.CHECKING)
        return ticket

    def _is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    def _finish(
        self,
        ticket: int,
        user: Optional[Dict[str, Any]],
        status: AuthStatus,
        force: bool = False,
    ) -> None:
        if not force and not self._is_current(ticket):
            return
        self._update(user=user, status=status, loading=False)

    def _update(self, **changes: Any) -> None:
        if "user" in changes:
            self.user = changes["user"]
        if "status" in changes:
            self.status = changes["status"]
            self.is_authenticated = self.status is AuthStatus.AUTHENTICATED
        if "loading" in changes:
            self.loading = changes["loading"]

        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)
