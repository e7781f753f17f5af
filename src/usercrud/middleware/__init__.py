"""
=============================================================================
MIDDLEWARE
=============================================================================

    base.py      Middleware ABC and MiddlewarePipeline
    logging.py   LoggingMiddleware (access log)

Usage:

    from usercrud.middleware import MiddlewarePipeline, LoggingMiddleware

    pipeline = MiddlewarePipeline().add(LoggingMiddleware())
    handler = pipeline.wrap(router.handle)

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
