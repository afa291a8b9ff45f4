"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: socket server, connection workers, middleware
and router.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼  new daemon thread                                          │
    │   Connection.read_request()      headers + Content-Length body       │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestParser.parse()          never fails                         │
    │        │                                                             │
    │        ▼                                                             │
    │   LoggingMiddleware                                                  │
    │     └─► CompressionMiddleware    negotiate Accept-Encoding           │
    │           └─► Router.handle()    first path segment → handler        │
    │        │                                                             │
    │        ▼                                                             │
    │   send(to_bytes()), send(encoded_body), close                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every connection gets its own thread and carries exactly one request.
Handlers share nothing except the files directory.

=============================================================================
TRANSPORT ERRORS
=============================================================================

    request larger than max_request_size   → 413, close
    client too slow to finish the request  → 408, close
    anything else                          → logged with traceback, close

The accept loop never sees these; one bad client cannot stop the server.

=============================================================================
"""

import logging
import threading
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .core.connection import ConnectionState
from .http import (
    HTTPRequest,
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    Route,
    Router,
    status_only,
)
from .handlers import index, echo, user_agent, FileHandler
from .middleware import (
    Middleware,
    MiddlewarePipeline,
    LoggingMiddleware,
    CompressionMiddleware,
)


logger = logging.getLogger(__name__)


def build_router(directory: Optional[str] = None) -> Router:
    """
    Register the four routes.

    Args:
        directory: Root for /files/<name>. None leaves the route in place;
                   every request to it then answers 404.
    """
    files = FileHandler(directory)
    return (
        Router()
        .add_route(Route.INDEX, index)
        .add_route(Route.ECHO, echo)
        .add_route(Route.USER_AGENT, user_agent)
        .add_route(Route.FILES, files.handle)
    )


class HTTPServer:
    """
    Threaded HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(directory="/tmp"))
        server.run()  # Blocks until Ctrl+C / SIGTERM

    Default middleware, outermost first:

        LoggingMiddleware → CompressionMiddleware → Router
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────
        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()

        # ─────────────────────────────────────────────────────────────────
        # APPLICATION COMPONENTS
        # ─────────────────────────────────────────────────────────────────
        self._router = build_router(self.config.directory)
        self._middleware = MiddlewarePipeline()
        self._middleware.use(LoggingMiddleware(), CompressionMiddleware())

        # middleware.wrap(router.handle); built lazily so use() can still
        # add layers before the first request
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Append a middleware inside the default ones."""
        self._middleware.add(middleware)
        self._handler = None
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port). Reports the OS-assigned port when port=0."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        if self.config.directory:
            logger.info(f"Serving files from {self.config.directory}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Callable from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    @property
    def handler(self) -> Callable[[HTTPRequest], HTTPResponse]:
        """The full middleware + router chain."""
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)
        return self._handler

    def process(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPResponse:
        """
        Turn one raw request into a response descriptor.

        No sockets involved; the connection worker and the tests both go
        through here.
        """
        request = self._parser.parse(data, client_address)
        return self.handler(request)

    def _handle_connection(self, conn: Connection):
        """Hand the connection to its own worker thread."""
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """Read, process, write, close. Runs in the worker thread."""
        with conn:
            try:
                # ─────────────────────────────────────────────────────────
                # READ
                # ─────────────────────────────────────────────────────────
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    logger.info(f"[{conn.id}] Request timeout from {conn.client_ip}")
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT)
                    return
                except ValueError as e:
                    logger.warning(f"[{conn.id}] {e}")
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE)
                    return

                if raw_request is None:
                    logger.debug(f"[{conn.id}] Client closed without sending")
                    return

                # ─────────────────────────────────────────────────────────
                # PROCESS + WRITE
                # ─────────────────────────────────────────────────────────
                conn.state = ConnectionState.PROCESSING
                response = self.process(raw_request, conn.address)

                conn.send_response(response.to_bytes(), response.encoded_body)

            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def _send_error(self, conn: Connection, status: HTTPStatus):
        """Status-only response for failures before routing."""
        conn.send_response(status_only(status).to_bytes())


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Factory for a configured server.

        app = create_app(ServerConfig(port=0, directory="/tmp"))
        app.run()
    """
    return HTTPServer(config)
