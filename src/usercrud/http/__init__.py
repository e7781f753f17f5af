"""
=============================================================================
HTTP LAYER
=============================================================================

The thin text protocol between the socket and the handlers.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       bytes → HTTPRequest (method, path, body)           │
    │ router.py        HTTPRequest → RouteMatch → handler                 │
    │ response.py      HTTPResponse → bytes                               │
    │ status_codes.py  200 OK / 404 NOT FOUND / 500 INTERNAL ERROR        │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import HTTPResponse, ok, ok_json, not_found, internal_error
from .router import Router, RouteKind, RouteMatch, classify, extract_target_id
from .status_codes import HTTPStatus

__all__ = [
    # Request
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    # Response
    "HTTPResponse",
    "ok",
    "ok_json",
    "not_found",
    "internal_error",
    # Routing
    "Router",
    "RouteKind",
    "RouteMatch",
    "classify",
    "extract_target_id",
    # Status
    "HTTPStatus",
]
