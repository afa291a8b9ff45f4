"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Every HTTP response starts with a status line:

    HTTP/1.1 200 OK
    ──┬───── ─┬─ ─┬─
      │       │   └── Reason phrase (for humans)
      │       └────── Status code (for machines)
      └────────────── Protocol version

This server only ever produces a handful of codes, so the enum below is
short. The codes fall into the usual classes:

    ┌──────────┬──────────────────────────────────────────────────────────┐
    │  Class   │ Used here for                                            │
    ├──────────┼──────────────────────────────────────────────────────────┤
    │  2xx     │ 200 for echo/user-agent/index/file reads, 201 for writes │
    │  4xx     │ 404 for unknown routes and file failures,                │
    │          │ 408/413 when the transport gives up on a request         │
    └──────────┴──────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so values compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                    # Echo, user-agent, index, file read
    CREATED = 201               # File written

    NOT_FOUND = 404             # Unrouted target, file access failure
    REQUEST_TIMEOUT = 408       # Client connected but never finished a request
    PAYLOAD_TOO_LARGE = 413     # Request exceeded max_request_size

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _PHRASES[self]


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
}
