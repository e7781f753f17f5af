"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Handlers never write to the socket. They return an HTTPResponse and the
server serializes it with to_bytes().

=============================================================================
RESPONSE SHAPES
=============================================================================

    Success (every route):

        HTTP/1.1 200 OK\r\n
        Content-Type: application/json\r\n
        Content-Length: 12\r\n
        \r\n
        User created

    Failure:

        HTTP/1.1 404 NOT FOUND\r\n
        Content-Length: 14\r\n
        \r\n
        User not found

Read routes put JSON in the body. Write routes put a short plain-text
confirmation in the body, still labelled application/json. Clients of the
service depend on this shape, so ok() always sets the JSON content type.

Only Content-Length is added automatically. There is no Date, Server or
Connection header: the server closes the socket after every response.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Union
import json

from .status_codes import HTTPStatus


JSON_CONTENT_TYPE = "application/json"


@dataclass
class HTTPResponse:
    """
    Represents a response to be sent to the client.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
            │                       │                        │
        HTTPResponse(            b"HTTP/1.1 200 OK\r\n   conn.send_response(
          status=200,              Content-Type: ...\r\n     response_bytes
          headers={...},           \r\n                    )
          body=b"..."              User created"
        )

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the status line, e.g. "HTTP/1.1 500 INTERNAL ERROR".
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body, encoding strings as UTF-8."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

            HTTP/1.1 200 OK\r\n                ← Status line
            Content-Type: application/json\r\n
            Content-Length: 45\r\n             ← Auto-calculated
            \r\n                               ← Empty line (separator)
            {"id":1,"name":"Ada","email":"..."}  ← Body bytes

        Returns:
            Complete response as bytes.
        """
        response_headers = dict(self.headers)

        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok("User created")
#     return ok_json(user.to_dict())
#     return not_found("User not found")
#     return internal_error()
#
# =============================================================================

def ok(body: Union[str, bytes] = "") -> HTTPResponse:
    """
    Create a 200 OK response with Content-Type: application/json.

    The body is sent as given; use ok_json() to serialize data.
    """
    response = HTTPResponse(status=HTTPStatus.OK)
    response.set_header("Content-Type", JSON_CONTENT_TYPE)
    return response.set_body(body)


def ok_json(data: Any) -> HTTPResponse:
    """
    Create a 200 OK response with data serialized as compact JSON.

    Args:
        data: Anything json.dumps() accepts (dicts, lists of dicts, ...)
    """
    return ok(json.dumps(data, separators=(",", ":"), ensure_ascii=False))


def not_found(message: str = "404 not found") -> HTTPResponse:
    """
    Create a 404 NOT FOUND response.

    The default message is the one sent for unroutable requests; handlers
    pass "User not found" when a row is missing.
    """
    return HTTPResponse(status=HTTPStatus.NOT_FOUND).set_body(message)


def internal_error(message: str = "Internal error") -> HTTPResponse:
    """
    Create a 500 INTERNAL ERROR response.

    The message stays fixed and generic: no exception text, no field
    names, no traceback ever reach the client.
    """
    return HTTPResponse(status=HTTPStatus.INTERNAL_ERROR).set_body(message)
