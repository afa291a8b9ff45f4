"""
=============================================================================
CORE NETWORKING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer      bind / listen / accept loop                      │
    │        │                                                             │
    │        ▼ one per client                                              │
    │   Connection        read one request, write the response, close     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Each Connection is served on its own thread by HTTPServer. Connections
share nothing but the filesystem.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
