"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: read one complete request, write the
response, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP only guarantees that bytes arrive in order and intact. It does NOT
preserve the boundaries of the sender's writes:

    Client sends:
        send(b"POST /files/a HTTP/1.1\\r\\nContent-Length: 5\\r\\n\\r\\nhello")

    Server might receive:
        recv() → b"POST /files/a HTTP/1.1\\r\\nContent-Le"
        recv() → b"ngth: 5\\r\\n\\r\\nhel"
        recv() → b"lo"

One recv() is therefore NOT one request. read_request() keeps reading
until it has seen the whole thing:

    ┌─────────────────────────────────────────────────────────────────┐
    │                     Reading a Request                            │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   1. recv() until CRLF CRLF appears   (end of headers)           │
    │   2. Find Content-Length in the header block (0 if absent)       │
    │   3. recv() until Content-Length body bytes are buffered         │
    │   4. Return headers + exactly that many body bytes               │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

No keep-alive, no pipelining. After the response the server closes the
socket; bytes sent past the first request are drained and discarded.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
               │                                      ▲
               └──────────── (error/timeout) ─────────┘

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple
import uuid

from ..http.request import HEADER_TERMINATOR, CRLF, parse_content_length


logger = logging.getLogger(__name__)

# Upper bounds on discarding client bytes during close()
DRAIN_TIMEOUT = 1.0
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Where a connection is in its (single-request) lifecycle."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Receiving the request
    PROCESSING = "processing"  # Request parsed, handler running
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port).
        id: Short random id for log correlation.
        state: Current ConnectionState.
        created_at: Accept timestamp.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (from ServerConfig)
    buffer_size: int = 4096
    timeout: Optional[float] = 30.0
    max_request_size: int = 10 * 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since accept."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request.

        Returns:
            Request bytes (headers + Content-Length body bytes). If the peer
            stops sending early, whatever arrived is returned as-is; None
            only when nothing arrived at all.

        Raises:
            TimeoutError: The client went quiet before finishing.
            ValueError: The request exceeds max_request_size.
        """
        self.state = ConnectionState.READING

        try:
            # ─────────────────────────────────────────────────────────────
            # STEP 1: Headers
            # ─────────────────────────────────────────────────────────────
            while HEADER_TERMINATOR not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return self._take_all()
                self._append(chunk)

            header_end = self._buffer.find(HEADER_TERMINATOR)
            body_start = header_end + len(HEADER_TERMINATOR)

            # ─────────────────────────────────────────────────────────────
            # STEP 2: Content-Length
            # ─────────────────────────────────────────────────────────────
            header_lines = self._buffer[:header_end].decode(
                "utf-8", errors="replace"
            ).split(CRLF)
            content_length = parse_content_length(header_lines) or 0

            if body_start + content_length > self.max_request_size:
                raise ValueError(
                    f"Request too large: {body_start + content_length} bytes"
                )

            # ─────────────────────────────────────────────────────────────
            # STEP 3: Body
            # ─────────────────────────────────────────────────────────────
            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break  # Peer closed mid-body; parse what we have
                self._append(chunk)

            # ─────────────────────────────────────────────────────────────
            # STEP 4: Exactly one request
            # ─────────────────────────────────────────────────────────────
            request_end = body_start + content_length
            request_data = self._buffer[:request_end]
            self._buffer = b""
            return request_data

        except socket.timeout:
            raise TimeoutError("Request read timeout")

    def _append(self, chunk: bytes):
        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise ValueError(f"Request too large: {len(self._buffer)} bytes")

    def _take_all(self) -> Optional[bytes]:
        data, self._buffer = self._buffer, b""
        return data or None

    def _recv(self) -> bytes:
        """recv() that reports an abrupt disconnect as end of stream."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, *chunks: bytes) -> bool:
        """
        Send the response, one sendall() per chunk.

        The header block and a compressed body go out as separate chunks.

        Returns:
            True if everything was sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            for chunk in chunks:
                if chunk:
                    self.socket.sendall(chunk)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

            1. shutdown(SHUT_WR)   send FIN, client sees end of response
            2. drain               discard what the client still sends,
                                   at most DRAIN_LIMIT bytes / DRAIN_TIMEOUT s
            3. close()             release the file descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            self.socket.settimeout(0.5)
            while drained < DRAIN_LIMIT and time.monotonic() < deadline:
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
