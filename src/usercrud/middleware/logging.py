"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

Writes one line per handled request to the "usercrud.access" logger.

Text format:

    127.0.0.1 "POST /users HTTP/1.1" 200 12 3.41ms

JSON format (for log aggregators):

    {"method": "POST", "path": "/users", "status": 200, ...}

Bodies are never logged: they carry names and email addresses.

Configure it like any other logger:

    logging.getLogger("usercrud.access").setLevel(logging.WARNING)

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("usercrud.access")


@dataclass
class RequestLog:
    """Structured access log entry."""

    method: str
    path: str
    version: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        request_line = " ".join(p for p in (self.method, self.path, self.version) if p)
        return (
            f'{self.client_ip or "-"} "{request_line}" '
            f"{self.status_code} {self.content_length} {self.duration_ms:.2f}ms"
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware. Add it first so it times everything.

        pipeline.add(LoggingMiddleware(log_format="json"))
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" (human readable) or "json" (structured).
            log_level: Level used for access lines.
        """
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.request_line} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        log_entry = RequestLog(
            method=request.method,
            path=request.path,
            version=request.version,
            client_ip=request.client_address[0],
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
