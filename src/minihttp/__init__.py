"""
=============================================================================
MINIHTTP - A Small HTTP/1.1 Server on Raw Sockets
=============================================================================

Four routes, one request per connection, gzip when the client asks:

    GET  /                  200, no body
    GET  /echo/<text>       200 text/plain, body = <text>
    GET  /user-agent        200 text/plain, body = User-Agent value
    GET  /files/<name>      200 application/octet-stream, or 404
    POST /files/<name>      write the body, 201
    anything else           404

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer, build_router
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # bind / listen / accept
    │   └── connection.py    # read one request, write, close
    ├── http/
    │   ├── request.py       # HTTPRequest, RequestParser
    │   ├── response.py      # HTTPResponse descriptor + serializer
    │   ├── router.py        # Route enum, Router
    │   └── status_codes.py  # HTTPStatus
    ├── middleware/
    │   ├── base.py          # Middleware, MiddlewarePipeline
    │   ├── logging.py       # Access log
    │   └── compression.py   # Accept-Encoding negotiation, gzip
    └── handlers/
        ├── text.py          # index, echo, user_agent
        └── files.py         # FileHandler

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/tmp"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer, build_router, create_app
from .http import (
    HTTPStatus,
    HTTPRequest,
    HTTPResponse,
    Route,
    Router,
    parse_request,
)

__all__ = [
    "__version__",
    "ServerConfig",
    "HTTPServer",
    "build_router",
    "create_app",
    "HTTPStatus",
    "HTTPRequest",
    "HTTPResponse",
    "Route",
    "Router",
    "parse_request",
]
