"""
=============================================================================
RESPONSE STATUS CODES
=============================================================================

The service answers with exactly three statuses. Every handler collapses
its failure modes into one of them:

    ┌────────┬──────────────────┬──────────────────────────────────────────┐
    │  Code  │  Reason phrase   │  Used for                                │
    ├────────┼──────────────────┼──────────────────────────────────────────┤
    │  200   │  OK              │  Successful create/read/update/delete    │
    │  404   │  NOT FOUND       │  Unroutable request, missing user row    │
    │  500   │  INTERNAL ERROR  │  Bad id, bad body, store failure         │
    └────────┴──────────────────┴──────────────────────────────────────────┘

The reason phrases are upper-case on purpose: existing clients of the
service match on the exact status line, e.g. "HTTP/1.1 404 NOT FOUND".

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Response status codes and reason phrases.

    IntEnum, so codes compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    OK = 200
    NOT_FOUND = 404
    INTERNAL_ERROR = 500

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 NOT FOUND
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        """Check if this is a 2xx status code."""
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
    HTTPStatus.INTERNAL_ERROR: "INTERNAL ERROR",
}
