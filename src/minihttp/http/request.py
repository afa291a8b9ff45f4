"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

This module turns the raw bytes of one HTTP request into an HTTPRequest.

=============================================================================
HTTP REQUEST FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       HTTP Request Structure                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /files/notes.txt HTTP/1.1\r\n      ← Request line             │
    │   Host: localhost:4221\r\n                ← Header lines             │
    │   User-Agent: curl/8.4.0\r\n                                         │
    │   Accept-Encoding: gzip\r\n                                          │
    │   Content-Length: 5\r\n                                              │
    │   \r\n                                    ← Empty line (separator)   │
    │   hello                                   ← Body (Content-Length)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The request line is split on single spaces into exactly three tokens:

    POST /files/notes.txt HTTP/1.1
    ─┬── ────────┬─────── ───┬────
   method     target      version (parsed, never used)

The TARGET is kept whole. Routes such as /echo/<text> and /files/<name>
read their parameter straight out of it, so nothing is URL-decoded and the
query string is not split off.

=============================================================================
LENIENT PARSING
=============================================================================

The parser never raises. Whatever the client sent, a request object comes
out the other end:

    b""                   → method="", target="", no headers, empty body
    b"GARBAGE\r\n\r\n"    → method="GARBAGE", target="", version=""
    b"GET /\r\n\r\n"      → method="GET", target="/", version=""

A target that cannot be routed simply ends in a 404 later on.

=============================================================================
HEADER/BODY SPLIT
=============================================================================

Headers end at the first empty line (CRLF CRLF). The body is everything
after it, cut to Content-Length when that header is present. The body stays
as raw bytes so file uploads survive untouched, including embedded CRLFs
and non-UTF-8 data.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, List, Tuple


HEADER_TERMINATOR = b"\r\n\r\n"
CRLF = "\r\n"


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Immutable once created. Header lines are kept verbatim and in order;
    lookups go through header(), which matches the literal "Name: " prefix
    the way clients actually send it.

    Attributes:
        method:         First request-line token ("GET", "POST", ...).
        target:         Second request-line token, path plus any suffix.
        version:        Third request-line token ("HTTP/1.1").
        header_lines:   Raw header lines between request line and body.
        body:           Body bytes.
        client_address: (ip, port) of the peer, for logging.
    """

    method: str
    target: str
    version: str = ""
    header_lines: Tuple[str, ...] = ()
    body: bytes = b""
    client_address: Tuple[str, int] = ("", 0)

    # Original bytes, handy when debugging a misbehaving client
    raw: bytes = field(default=b"", repr=False, compare=False)

    def header(self, name: str) -> Optional[str]:
        """
        Value of the first header line starting with "<name>: ".

        Args:
            name: Header name exactly as the client spells it.

        Returns:
            Everything after the prefix, or None when no line matches.
        """
        prefix = f"{name}: "
        for line in self.header_lines:
            if line.startswith(prefix):
                return line[len(prefix):]
        return None

    @property
    def user_agent(self) -> Optional[str]:
        """User-Agent header value, if the client sent one."""
        return self.header("User-Agent")

    @property
    def accept_encodings(self) -> Optional[List[str]]:
        """
        Accept-Encoding tokens in client order, split on ", ".

        "gzip, deflate" → ["gzip", "deflate"]
        "gzip,deflate"  → ["gzip,deflate"]   (one token, matches nothing)
        (absent)        → None

        None and [""] mean different things: no header at all leaves the
        response untouched, an empty header still counts as a request.
        """
        value = self.header("Accept-Encoding")
        if value is None:
            return None
        return value.split(", ")


def parse_content_length(lines) -> Optional[int]:
    """
    Find Content-Length among raw header lines.

    Header names are case-insensitive on the wire, so this one lookup
    ignores case. Used by both the parser and Connection, which needs the
    value before a full parse is possible.
    """
    for line in lines:
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "content-length":
            try:
                length = int(value.strip())
            except ValueError:
                return None
            return length if length >= 0 else None
    return None


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw Request Bytes
              │
              ▼
        ┌───────────────────────────────────────────────────────────────┐
        │  1. Split at CRLF CRLF → header section | body                │
        │  2. Decode header section (UTF-8, undecodable bytes replaced) │
        │  3. First line → method, target, version                      │
        │  4. Remaining non-empty lines → header_lines                  │
        │  5. Cut body to Content-Length when declared                  │
        └───────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest
    """

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest.

        Args:
            data: Bytes of one complete request.
            client_address: Peer (ip, port).

        Returns:
            Parsed request; malformed input yields empty fields.
        """
        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Header/body boundary
        # ─────────────────────────────────────────────────────────────────
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            head_bytes, body = data, b""
        else:
            head_bytes = data[:header_end]
            body = data[header_end + len(HEADER_TERMINATOR):]

        # ─────────────────────────────────────────────────────────────────
        # STEP 2-4: Request line and header lines
        # ─────────────────────────────────────────────────────────────────
        lines = head_bytes.decode("utf-8", errors="replace").split(CRLF)
        method, target, version = self._parse_request_line(lines[0])
        header_lines = tuple(line for line in lines[1:] if line)

        # ─────────────────────────────────────────────────────────────────
        # STEP 5: Body length
        # ─────────────────────────────────────────────────────────────────
        # Connection already stops reading at Content-Length, but the
        # parser may be fed bytes from elsewhere (tests, other transports).
        content_length = parse_content_length(header_lines)
        if content_length is not None:
            body = body[:content_length]

        return HTTPRequest(
            method=method,
            target=target,
            version=version,
            header_lines=header_lines,
            body=body,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str, str]:
        """Split on single spaces; missing tokens become ""."""
        tokens = line.split(" ")
        tokens += [""] * (3 - len(tokens))
        return tokens[0], tokens[1], tokens[2]


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """Parse one request with a throwaway RequestParser."""
    return RequestParser().parse(data, client_address)
