"""
RICHIEAT Client — Route Table & Protected Route Gate
======================================================

Route table:
    public     /  /login  /signup  /client-onboarding/:token
    protected  /dashboard  /profile  /clients  /clients/:clientId
    anything else redirects to /

Gate decisions for a protected route:
    status checking         → wait (render a placeholder, never the page)
    status authenticated    → render
    status unauthenticated  → redirect to /login, remembering the original path
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from richieat.client.store import AuthStatus, AuthStore


class GateAction(str, Enum):
    WAIT = "wait"
    RENDER = "render"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class Route:
    pattern: str
    name: str
    protected: bool = False

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """Match `path` against the pattern; `:name` segments become params."""
        pattern_parts = self.pattern.strip("/").split("/")
        path_parts = path.split("?", 1)[0].strip("/").split("/")
        if len(pattern_parts) != len(path_parts):
            return None

        params: Dict[str, str] = {}
        for expected, actual in zip(pattern_parts, path_parts):
            if expected.startswith(":"):
                if not actual:
                    return None
                params[expected[1:]] = actual
            elif expected != actual:
                return None
        return params


@dataclass(frozen=True)
class GateDecision:
    action: GateAction
    location: Optional[str] = None
    route: Optional[Route] = None
    params: Dict[str, str] = field(default_factory=dict)
    from_path: Optional[str] = None


ROUTES: Tuple[Route, ...] = (
    Route("/", "home"),
    Route("/login", "login"),
    Route("/signup", "signup"),
    Route("/client-onboarding/:token", "client-onboarding"),
    Route("/dashboard", "dashboard", protected=True),
    Route("/profile", "profile", protected=True),
    Route("/clients", "clients", protected=True),
    Route("/clients/:clientId", "client-detail", protected=True),
)

_DOUBLE_SLASH = re.compile(r"/{2,}")


class ProtectedRouteGate:
    def __init__(
        self,
        store: AuthStore,
        routes: Sequence[Route] = ROUTES,
        login_path: str = "/login",
        fallback_path: str = "/",
    ):
        self.store = store
        self.routes = tuple(routes)
        self.login_path = login_path
        self.fallback_path = fallback_path

    def resolve(self, path: str) -> Tuple[Optional[Route], Dict[str, str]]:
        path = _DOUBLE_SLASH.sub("/", path or "/")
        for route in self.routes:
            params = route.match(path)
            if params is not None:
                return route, params
        return None, {}

    def decide(self, path: str) -> GateDecision:
        route, params = self.resolve(path)
        if route is None:
            return GateDecision(GateAction.REDIRECT, location=self.fallback_path)

        if not route.protected:
            return GateDecision(GateAction.RENDER, route=route, params=params)

        status = self.store.status
        if status is AuthStatus.CHECKING:
            return GateDecision(GateAction.WAIT, route=route, params=params)
        if status is AuthStatus.AUTHENTICATED:
            return GateDecision(GateAction.RENDER, route=route, params=params)
        return GateDecision(
            GateAction.REDIRECT,
            location=self.login_path,
            route=route,
            params=params,
            from_path=path,
        )
