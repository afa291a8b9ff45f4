"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All knobs in one dataclass, filled from code, environment or the CLI:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     Configuration Sources                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ServerConfig()                defaults below                       │
    │   ServerConfig.from_env()       HTTP_* environment variables         │
    │   python -m minihttp --...      argparse in __main__.py              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

validate() runs at server construction so a bad port fails at startup,
not on the first connection. The files directory is the exception: it is
never checked up front, an unusable directory just turns every /files
request into a 404.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    NETWORK     host, port, backlog, buffer_size, timeout
    HTTP        max_request_size
    FILES       directory
    LOGGING     log_level
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "localhost"
    """Address to bind. localhost only by default."""

    port: int = 4221
    """TCP port. 0 lets the OS pick one (tests)."""

    backlog: int = 128
    """Accept queue length passed to listen()."""

    buffer_size: int = 4096
    """Bytes per recv() call."""

    timeout: Optional[float] = 30.0
    """Seconds a client gets to finish sending its request. None = forever."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """Upper bound on headers + body. Larger requests get 413."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Root for /files/<name>. Relative paths are resolved against the
    working directory at startup. None disables the route (404).
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a config from environment variables.

            HTTP_HOST       (default: localhost)
            HTTP_PORT       (default: 4221)
            HTTP_TIMEOUT    seconds (default: 30)
            HTTP_DIRECTORY  files root (default: unset)
            HTTP_LOG_LEVEL  (default: INFO)

            HTTP_PORT=8080 HTTP_DIRECTORY=/tmp python -m minihttp
        """
        return cls(
            host=os.getenv("HTTP_HOST", "localhost"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            directory=os.getenv("HTTP_DIRECTORY"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """Fail fast on values the server cannot run with."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")
