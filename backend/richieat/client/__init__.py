"""
RICHIEAT Client — Session layer for API consumers.

    api            — AuthAPI, async httpx client for /api/auth
    storage        — persisted token + user (memory or JSON file)
    store          — AuthStore, the authentication state machine
    gate           — route table and ProtectedRouteGate
    notifications  — transient success/error messages
"""

from richieat.client.api import APIError, AuthAPI
from richieat.client.gate import GateAction, GateDecision, ProtectedRouteGate, Route
from richieat.client.notifications import Notification, Notifier
from richieat.client.storage import JSONFileStorage, KeyValueStorage, MemoryStorage
from richieat.client.store import AuthStatus, AuthStore

__all__ = [
    "APIError",
    "AuthAPI",
    "AuthStatus",
    "AuthStore",
    "GateAction",
    "GateDecision",
    "JSONFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "Notification",
    "Notifier",
    "ProtectedRouteGate",
    "Route",
]
