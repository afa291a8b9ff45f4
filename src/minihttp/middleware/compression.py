"""
=============================================================================
CONTENT NEGOTIATION AND COMPRESSION
=============================================================================

Decides whether a response body goes out gzip-compressed, based on the
client's Accept-Encoding header, and rewrites the descriptor to match.

=============================================================================
THE THREE CASES
=============================================================================

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │  Accept-Encoding         │  What happens to the response            │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │  (absent)                │  untouched                               │
    │                          │                                          │
    │  gzip  /  x, gzip, y     │  body gzip-compressed into encoded_body  │
    │                          │  body removed from the descriptor        │
    │                          │  Content-Encoding: gzip                  │
    │                          │  Content-Length: <compressed size>       │
    │                          │                                          │
    │  deflate  /  x, y        │  body, Content-Length and                │
    │  (nothing we support)    │  Content-Encoding all removed            │
    └──────────────────────────┴──────────────────────────────────────────┘

The last row does NOT fall back to an uncompressed body. A client that
only lists encodings this server cannot produce gets headers and no body.

A chosen scheme on a response without a body (index, 201, 404) changes
nothing: there is nothing to compress.

=============================================================================
WHY THE SIDE CHANNEL?
=============================================================================

The header block is text; gzip output is arbitrary bytes. The compressed
body is kept out of the descriptor's body field and stored in
encoded_body. The server sends

    response.to_bytes()      status line + headers + blank line
    response.encoded_body    gzip member

as two writes on the same connection.

=============================================================================
HOW GZIP FRAMES DATA
=============================================================================

    ┌──────────┬────────────────────────────┬──────────┬──────────┐
    │  header  │   DEFLATE compressed data  │  CRC-32  │  ISIZE   │
    │ 10 bytes │                            │ 4 bytes  │ 4 bytes  │
    └──────────┴────────────────────────────┴──────────┴──────────┘

gzip.compress() produces one complete member; gzip.decompress() on the
client side gets the original bytes back. Even an empty body compresses
to ~20 bytes, and Content-Length always reports the compressed size.

=============================================================================
"""

import gzip
import logging
from dataclasses import dataclass
from typing import Optional, List, Tuple

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

# Exactly one scheme is produced by this server
SUPPORTED_ENCODINGS: Tuple[str, ...] = ("gzip",)


@dataclass(frozen=True)
class EncodingDecision:
    """
    Outcome of negotiation for one request.

    Attributes:
        requested: Client's Accept-Encoding tokens; None if no header.
        chosen:    Supported scheme picked from requested, if any.
    """

    requested: Optional[List[str]] = None
    chosen: Optional[str] = None

    @classmethod
    def from_request(
        cls,
        request: HTTPRequest,
        supported: Tuple[str, ...] = SUPPORTED_ENCODINGS,
    ) -> "EncodingDecision":
        """Pick the first supported scheme the client listed."""
        requested = request.accept_encodings
        if requested is None:
            return cls()
        chosen = next((scheme for scheme in supported if scheme in requested), None)
        return cls(requested=requested, chosen=chosen)

    @property
    def header_present(self) -> bool:
        return self.requested is not None

    @property
    def unsatisfiable(self) -> bool:
        """Client asked for encodings and none of them is supported."""
        return self.header_present and self.chosen is None


class CompressionMiddleware(Middleware):
    """
    Response compression middleware.

        1. Negotiate an encoding from Accept-Encoding
        2. Call the next handler to get the response
        3. Compress, strip, or pass through (see module docstring)

    Position: innermost, right around the router, so it rewrites the
    handler's descriptor before anything else looks at sizes.

        pipeline.add(LoggingMiddleware())
        pipeline.add(CompressionMiddleware())
    """

    def __init__(self, level: int = 9):
        """
        Args:
            level: gzip compression level, 1 (fast) to 9 (small).
                   9 matches gzip.compress()'s own default.
        """
        self.level = level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        decision = EncodingDecision.from_request(request)
        response = next(request)
        return self.apply(decision, response)

    def apply(self, decision: EncodingDecision, response: HTTPResponse) -> HTTPResponse:
        """Rewrite response according to decision; returns the same object."""
        if not decision.header_present:
            return response

        if decision.unsatisfiable:
            logger.debug(f"No supported encoding in {decision.requested}, dropping body")
            response.body = None
            response.remove_header("Content-Length")
            response.remove_header("Content-Encoding")
            return response

        if response.body is None:
            return response

        compressed = self.compress(response.body)
        logger.debug(
            f"{decision.chosen}: {len(response.body)} → {len(compressed)} bytes"
        )

        # Content-Length keeps its position; Content-Encoding goes last
        response.set_header("Content-Encoding", decision.chosen)
        response.set_header("Content-Length", len(compressed))
        response.body = None
        response.encoded_body = compressed
        return response

    def compress(self, body: bytes) -> bytes:
        return gzip.compress(body, compresslevel=self.level)
