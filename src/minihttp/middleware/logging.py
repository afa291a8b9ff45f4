"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One line per routed request on the "minihttp.access" logger, in a
trimmed Apache common-log style:

    127.0.0.1 - - [19/Oct/2026:11:02:07 +0000] "GET /echo/abc" 200 3 0.41ms

The byte count is what actually follows the header block: the compressed
size when gzip was chosen, the plain body size otherwise, 0 for
status-only responses.

The logger is namespaced so it can be tuned on its own:

    logging.getLogger("minihttp.access").setLevel(logging.WARNING)

=============================================================================
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """Structured access-log entry."""

    method: str
    target: str
    client_ip: str
    status_code: Optional[int]
    content_length: int
    duration_ms: float
    timestamp: str

    def to_text(self) -> str:
        status = self.status_code if self.status_code is not None else "-"
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {status} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def payload_size(response: HTTPResponse) -> int:
    """Bytes sent after the header block."""
    if response.encoded_body is not None:
        return len(response.encoded_body)
    return len(response.body or b"")


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so the timing covers compression too
    and the logged size is the one that goes on the wire.

        pipeline.add(LoggingMiddleware())
        pipeline.add(CompressionMiddleware())
    """

    def __init__(self, log_level: int = logging.INFO):
        """
        Args:
            log_level: Level access lines are emitted at.
        """
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.target} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        entry = RequestLog(
            method=request.method,
            target=request.target,
            client_ip=request.client_address[0],
            status_code=int(response.status) if response.status is not None else None,
            content_length=payload_size(response),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )
        logger.log(self.log_level, entry.to_text())

        return response
