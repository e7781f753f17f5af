"""
=============================================================================
ROUTER
=============================================================================

Maps a parsed request onto one of five user operations.

=============================================================================
MATCHING RULES
=============================================================================

Rules are tried in order; the first one that matches wins. Paths are
matched by PREFIX, not by pattern:

    ┌───┬──────────┬──────────────┬────────────┬──────────────────────────┐
    │ # │  Method  │ Path prefix  │ Kind       │ Example                  │
    ├───┼──────────┼──────────────┼────────────┼──────────────────────────┤
    │ 1 │  POST    │ /users       │ CREATE     │ POST /users              │
    │ 2 │  GET     │ /users/      │ READ_ONE   │ GET /users/7             │
    │ 3 │  GET     │ /users       │ READ_ALL   │ GET /users               │
    │ 4 │  PUT     │ /users/      │ UPDATE     │ PUT /users/7             │
    │ 5 │  DELETE  │ /users/      │ DELETE     │ DELETE /users/7          │
    │ 6 │  other   │              │ UNKNOWN    │ GET /unknown → 404       │
    └───┴──────────┴──────────────┴────────────┴──────────────────────────┘

Rule 2 must come before rule 3: "/users/7" also starts with "/users".

=============================================================================
TARGET ID EXTRACTION
=============================================================================

    "/users/7"          split("/") → ["", "users", "7"]           → "7"
    "/users/7/extra"    split("/") → ["", "users", "7", "extra"]  → "7"
    "/users/"           split("/") → ["", "users", ""]            → ""

The id stays text here. An empty or non-numeric id is NOT a routing
failure: the request still reaches its handler, which fails to parse the
id and answers 500 (not 404).

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple
import logging

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


USERS_PREFIX = "/users"
USER_ITEM_PREFIX = "/users/"


class RouteKind(Enum):
    """What a request asks the service to do."""

    CREATE = "create"
    READ_ONE = "read_one"
    READ_ALL = "read_all"
    UPDATE = "update"
    DELETE = "delete"
    UNKNOWN = "unknown"


@dataclass
class RouteMatch:
    """
    Result of classifying a request.

    Attributes:
        kind:      Which operation was selected.
        target_id: Raw id text for READ_ONE/UPDATE/DELETE, else None.
        body:      Request body text (only meaningful for CREATE/UPDATE).
    """

    kind: RouteKind
    target_id: Optional[str] = None
    body: str = ""


# Ordered (method, prefix, kind) rules. First match wins.
ROUTE_RULES: List[Tuple[str, str, RouteKind]] = [
    ("POST", USERS_PREFIX, RouteKind.CREATE),
    ("GET", USER_ITEM_PREFIX, RouteKind.READ_ONE),
    ("GET", USERS_PREFIX, RouteKind.READ_ALL),
    ("PUT", USER_ITEM_PREFIX, RouteKind.UPDATE),
    ("DELETE", USER_ITEM_PREFIX, RouteKind.DELETE),
]

ITEM_KINDS = {RouteKind.READ_ONE, RouteKind.UPDATE, RouteKind.DELETE}


RouteHandler = Callable[[RouteMatch], HTTPResponse]


def extract_target_id(path: str) -> str:
    """
    Take the third "/"-delimited segment of the path, trimmed to its first
    whitespace-separated token. Returns "" when the path has no such
    segment.
    """
    segments = path.split("/")
    if len(segments) < 3:
        return ""
    tokens = segments[2].split()
    return tokens[0] if tokens else ""


def classify(request: HTTPRequest) -> RouteMatch:
    """
    Classify a request by method and path prefix.

    Args:
        request: Parsed request.

    Returns:
        RouteMatch; kind is UNKNOWN when no rule applies.
    """
    for method, prefix, kind in ROUTE_RULES:
        if request.method == method and request.path.startswith(prefix):
            target_id = extract_target_id(request.path) if kind in ITEM_KINDS else None
            return RouteMatch(kind=kind, target_id=target_id, body=request.body)

    return RouteMatch(kind=RouteKind.UNKNOWN)


class Router:
    """
    Dispatches classified requests to registered handlers.

    =========================================================================
    USAGE
    =========================================================================

        router = Router()
        router.add_route(RouteKind.CREATE, handler.create)
        router.add_route(RouteKind.READ_ONE, handler.read_one)
        ...
        response = router.handle(request)

    Any kind without a handler (UNKNOWN included) answers 404.

    =========================================================================
    """

    def __init__(self):
        self._handlers: Dict[RouteKind, RouteHandler] = {}

    def add_route(self, kind: RouteKind, handler: RouteHandler) -> None:
        """
        Register the handler for one kind of request.

        Raises:
            ValueError: For RouteKind.UNKNOWN, which always answers 404.
        """
        if kind is RouteKind.UNKNOWN:
            raise ValueError("Cannot register a handler for unknown requests")
        self._handlers[kind] = handler
        logger.debug(f"Registered route: {kind.value} → {getattr(handler, '__name__', handler)}")

    def match(self, request: HTTPRequest) -> RouteMatch:
        """Classify without dispatching."""
        return classify(request)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Classify the request and run its handler.

        This is the final handler wrapped by the middleware pipeline.
        """
        route = classify(request)
        handler = self._handlers.get(route.kind)

        if handler is None:
            logger.debug(f"No route for {request.request_line!r}")
            return not_found()

        return handler(route)

    @property
    def routes(self) -> List[RouteKind]:
        """Registered kinds, in rule order."""
        return [kind for _, _, kind in ROUTE_RULES if kind in self._handlers]
