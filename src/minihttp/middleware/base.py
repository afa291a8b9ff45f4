"""
=============================================================================
MIDDLEWARE INTERFACE AND PIPELINE
=============================================================================

Middleware wraps the router. Each one sees the request on the way in and
the response descriptor on the way out (Chain of Responsibility):

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Request ────────────────────────────────────────────►              │
    │                                                                      │
    │   ┌───────────┐    ┌──────────────┐    ┌──────────────┐              │
    │   │  Logging  │───►│ Compression  │───►│   Router     │              │
    │   │  (access) │    │ (negotiate)  │    │  → handler   │              │
    │   └─────┬─────┘    └──────┬───────┘    └──────┬───────┘              │
    │         ▲                 ▲                   │                      │
    │    log line          rewrite headers,         │                      │
    │    + timing          gzip body aside          ▼                      │
    │                                                                      │
    │   ◄──────────────────────────────────────────── HTTPResponse         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The first middleware added is the outermost layer.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

# The rest of the chain, as seen from inside a middleware
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

    Subclasses implement __call__:

        class MyMiddleware(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.set_header("X-Handled-By", "me")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The parsed request.
            next: The rest of the chain; call it to reach the router.

        Returns:
            The (possibly rewritten) response descriptor.
        """

    @property
    def name(self) -> str:
        """Middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())       # outermost
        pipeline.add(CompressionMiddleware())   # closest to the router

        handler = pipeline.wrap(router.handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append middleware; returns self for chaining."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """Append several middleware at once."""
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain around handler.

        Wrapping runs in reverse so the first-added middleware ends up
        outermost: [A, B] + handler → A(B(handler)).
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler,
    ) -> NextHandler:
        # Closure binds this layer to the next one
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
