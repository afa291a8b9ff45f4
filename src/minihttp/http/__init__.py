"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between raw bytes and handler code:

    bytes ──► RequestParser ──► HTTPRequest ──► Router ──► handler
                                                              │
    bytes ◄── HTTPResponse.to_bytes() ◄───────────────────────┘

    - request.py       HTTPRequest, RequestParser
    - response.py      HTTPResponse (ordered descriptor) and serializer
    - router.py        Route enum, first-segment Router
    - status_codes.py  HTTPStatus

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import HTTPRequest, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ok,
    created,
    not_found,
    empty,
    status_only,
)
from .router import Route, Router, Handler

__all__ = [
    "HTTPStatus",
    "HTTPRequest",
    "RequestParser",
    "parse_request",
    "HTTPResponse",
    "ok",
    "created",
    "not_found",
    "empty",
    "status_only",
    "Route",
    "Router",
    "Handler",
]
