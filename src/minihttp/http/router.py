"""
=============================================================================
FIRST-SEGMENT ROUTER
=============================================================================

The server knows exactly four routes. Each one is identified by the FIRST
segment of the request target, and nothing else:

    ┌──────────────────────┬──────────────────┬──────────────────────────┐
    │  Target              │  First segment   │  Route                   │
    ├──────────────────────┼──────────────────┼──────────────────────────┤
    │  /                   │  /               │  Route.INDEX             │
    │  /echo/abc           │  /echo           │  Route.ECHO              │
    │  /user-agent         │  /user-agent     │  Route.USER_AGENT        │
    │  /files/notes.txt    │  /files          │  Route.FILES             │
    │  /foo/echo/abc       │  /foo            │  (none) → 404            │
    │  /echo?x=1           │  /echo?x=1       │  (none) → 404            │
    └──────────────────────┴──────────────────┴──────────────────────────┘

This is not a prefix router. Deeper segments are never consulted, and the
first segment must equal a route identifier exactly.

=============================================================================
DISPATCH
=============================================================================

    target ──► resolve() ──► Route ──► handler(request) ──► HTTPResponse
                   │
                   └──► None ──► not_found()   (handlers never run)

Route is a closed enum; the Router maps each member to a handler. A Route
with no registered handler behaves like an unknown segment.

=============================================================================
"""

from enum import Enum
from typing import Callable, Dict, Optional
import logging

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)

# Handler: takes the parsed request, returns a response descriptor
Handler = Callable[[HTTPRequest], HTTPResponse]


class Route(Enum):
    """The closed set of routes, valued by their first-segment identifier."""

    ECHO = "/echo"
    USER_AGENT = "/user-agent"
    INDEX = "/"
    FILES = "/files"

    @property
    def prefix(self) -> str:
        """Identifier plus trailing slash: "/echo/", "/files/"."""
        return self.value.rstrip("/") + "/"

    def parameter(self, target: str) -> str:
        """
        The part of target after "<identifier>/".

            Route.ECHO.parameter("/echo/abc")        → "abc"
            Route.FILES.parameter("/files/a/b.txt")  → "a/b.txt"
            Route.ECHO.parameter("/echo")            → ""
        """
        return target[len(self.prefix):]


_BY_IDENTIFIER: Dict[str, Route] = {route.value: route for route in Route}


def first_segment(target: str) -> Optional[str]:
    """
    "/" plus the text between the first and second slash.

        "/echo/abc"  → "/echo"
        "/"          → "/"
        "abc"        → None   (no slash, nothing to route on)
    """
    segments = target.split("/")
    if len(segments) < 2:
        return None
    return "/" + segments[1]


class Router:
    """
    Maps the four Routes to handlers.

    Usage:
        router = Router()
        router.add_route(Route.ECHO, echo)
        router.add_route(Route.FILES, FileHandler("/tmp").handle)

        response = router.handle(request)
    """

    def __init__(self):
        self._handlers: Dict[Route, Handler] = {}

    def add_route(self, route: Route, handler: Handler) -> "Router":
        """Register the handler for a route, replacing any previous one."""
        self._handlers[route] = handler
        return self

    def route(self, route: Route):
        """
        Decorator form of add_route().

            @router.route(Route.USER_AGENT)
            def user_agent(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(route, handler)
            return handler
        return decorator

    def resolve(self, target: str) -> Optional[Route]:
        """Route whose identifier equals the target's first segment."""
        segment = first_segment(target)
        if segment is None:
            return None
        route = _BY_IDENTIFIER.get(segment)
        if route is None or route not in self._handlers:
            return None
        return route

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch to the matching handler, or answer 404 directly."""
        route = self.resolve(request.target)
        if route is None:
            logger.debug(f"No route for {request.target!r}")
            return not_found()
        return self._handlers[route](request)

    def __contains__(self, route: Route) -> bool:
        return route in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
