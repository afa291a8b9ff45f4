"""
=============================================================================
HTTP RESPONSE DESCRIPTOR AND SERIALIZER
=============================================================================

Handlers never write bytes. They return an HTTPResponse, an ordered
description of what should go on the wire, and this module renders it.

=============================================================================
THE DESCRIPTOR
=============================================================================

    HTTPResponse(
        status=HTTPStatus.OK,                 ← status line, always first
        headers=[                             ← insertion order = wire order
            ("Content-Type", "text/plain"),
            ("Content-Length", "3"),
        ],
        body=b"abc",                          ← optional
        encoded_body=None,                    ← compressed side channel
    )

Headers are a list of pairs, not a dict, so order is explicit and the
editing operations are plain:

    set_header(name, value)   replace in place, or append when new
    remove_header(name)       drop every entry with that name
    get_header(name)          first value or None

A descriptor with status=None is the EMPTY descriptor. Routes fall back to
it when they have nothing meaningful to say (missing User-Agent, an
unsupported method on /files). It renders as a bare blank line.

=============================================================================
SERIALIZATION
=============================================================================

    HTTP/1.1 200 OK\r\n              ← status line
    Content-Type: text/plain\r\n     ← header lines, in order
    Content-Length: 3\r\n
    \r\n                             ← blank line
    abc                              ← body, when present
    \r\n\r\n                         ← terminator normalization

Every rendering is normalized to end in exactly CRLF CRLF: the serializer
looks at the last two and last four bytes and appends only what is missing.
A status-only response therefore ends right after its blank line, while a
response with a body gets a trailing blank line after the body. That
trailer sits outside the Content-Length framing and clients reading by
length never see it.

Compressed bodies are NOT part of to_bytes(). They live in encoded_body
and the server writes them straight after the header block.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, List, Tuple, Union

from .status_codes import HTTPStatus


CRLF = b"\r\n"
BLANK_LINE = b"\r\n\r\n"

Header = Tuple[str, str]


@dataclass
class HTTPResponse:
    """
    Ordered description of an HTTP response.

    Attributes:
        status:       Status code, or None for the empty descriptor.
        headers:      (name, value) pairs in wire order.
        body:         Uncompressed body bytes, or None for no body.
        encoded_body: Compressed body written after the header block.
        version:      Protocol version for the status line.
    """

    status: Optional[HTTPStatus] = None
    headers: List[Header] = field(default_factory=list)
    body: Optional[bytes] = None
    encoded_body: Optional[bytes] = None
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """"HTTP/1.1 200 OK"; empty for the empty descriptor."""
        if self.status is None:
            return ""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def is_empty(self) -> bool:
        """True for the degenerate no-status, no-headers descriptor."""
        return self.status is None and not self.headers and self.body is None

    # =========================================================================
    # HEADER EDITING
    # =========================================================================

    def get_header(self, name: str) -> Optional[str]:
        """First value of the named header, or None."""
        for key, value in self.headers:
            if key == name:
                return value
        return None

    def set_header(self, name: str, value: Union[str, int]) -> "HTTPResponse":
        """
        Set a header, keeping its position if it already exists.

        Returns self for chaining:
            response.set_header("Content-Type", "text/plain").set_header(...)
        """
        value = str(value)
        for index, (key, _) in enumerate(self.headers):
            if key == name:
                self.headers[index] = (name, value)
                return self
        self.headers.append((name, value))
        return self

    def remove_header(self, name: str) -> "HTTPResponse":
        """Drop every header with this name; absent names are ignored."""
        self.headers = [(key, value) for key, value in self.headers if key != name]
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body; strings are encoded as UTF-8."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_bytes(self) -> bytes:
        """
        Render the descriptor to wire bytes.

        Status line and headers joined by CRLF, then a blank line and the
        body when there is one, normalized to end in CRLF CRLF.
        encoded_body is never included.
        """
        lines = []
        if self.status is not None:
            lines.append(self.status_line)
        lines.extend(f"{name}: {value}" for name, value in self.headers)

        data = CRLF.join(line.encode("utf-8") for line in lines)
        if self.body:
            data += BLANK_LINE + self.body

        return terminate(data)


def terminate(data: bytes) -> bytes:
    """
    Make data end in exactly one CRLF CRLF.

        b"...OK"          → b"...OK\\r\\n\\r\\n"
        b"...OK\\r\\n"      → b"...OK\\r\\n\\r\\n"
        b"...OK\\r\\n\\r\\n"  → unchanged

    Only the missing part is appended, so a terminator that is already
    there is never doubled.
    """
    if not data.endswith(CRLF):
        return data + BLANK_LINE
    if not data.endswith(BLANK_LINE):
        return data + CRLF
    return data


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================
#
#     return ok("hello", content_type="text/plain")
#     return created()
#     return not_found()
#
# =============================================================================

def ok(body: Union[str, bytes], content_type: str) -> HTTPResponse:
    """
    200 OK with a typed body.

    Content-Length is the BYTE length, so "héllo" declares 6, not 5.
    """
    response = HTTPResponse(status=HTTPStatus.OK).set_body(body)
    response.set_header("Content-Type", content_type)
    response.set_header("Content-Length", len(response.body))
    return response


def status_only(status: HTTPStatus) -> HTTPResponse:
    """A status line and nothing else."""
    return HTTPResponse(status=status)


def created() -> HTTPResponse:
    """201 Created, no headers, no body."""
    return status_only(HTTPStatus.CREATED)


def not_found() -> HTTPResponse:
    """404 Not Found, no headers, no body."""
    return status_only(HTTPStatus.NOT_FOUND)


def empty() -> HTTPResponse:
    """The empty descriptor; serializes to a lone CRLF CRLF."""
    return HTTPResponse()
