"""
=============================================================================
MIDDLEWARE
=============================================================================

Layers wrapped around the router, outermost first:

    LoggingMiddleware      access log line + timing
    CompressionMiddleware  Accept-Encoding negotiation, gzip side channel

    pipeline = MiddlewarePipeline()
    pipeline.use(LoggingMiddleware(), CompressionMiddleware())
    handler = pipeline.wrap(router.handle)

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware
from .compression import CompressionMiddleware, EncodingDecision, SUPPORTED_ENCODINGS

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "CompressionMiddleware",
    "EncodingDecision",
    "SUPPORTED_ENCODINGS",
]
