"""
=============================================================================
REQUEST PARSING
=============================================================================

This module turns the raw bytes of ONE socket read into an HTTPRequest.

It is deliberately narrow. It is not an HTTP/1.1 implementation:

    ┌──────────────────────────────────────────────────────────────────────┐
    │  WHAT THE PARSER LOOKS AT                                            │
    ├──────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /users HTTP/1.1\r\n           ← request line: METHOD PATH VER │
    │   Host: localhost:8080\r\n           ┐                               │
    │   Content-Type: application/json\r\n ├ headers: skipped              │
    │   Content-Length: 35\r\n             ┘                               │
    │   \r\n                               ← first blank line              │
    │   {"name":"Ada","email":"ada@x.io"}  ← body: everything after it     │
    │                                                                      │
    └──────────────────────────────────────────────────────────────────────┘

- Headers are not interpreted. Content-Length is not honored: the body is
  whatever arrived in the same read after the first blank line.
- A request without a blank line has an empty body. That is not a parse
  error; create/update will fail to decode it later.
- A malformed request line is not a parse error either. Missing tokens
  become empty strings and the router sends the request to "not found".
- The only parse errors are an empty buffer (the peer sent nothing) and a
  buffer larger than the configured limit.

Keeping the contract to parse(buffer) -> HTTPRequest | HTTPParseError lets a
compliant HTTP layer replace this one without touching the router or the
handlers.

=============================================================================
"""

from dataclasses import dataclass
from typing import Tuple


HEADER_TERMINATOR = "\r\n\r\n"


class HTTPParseError(Exception):
    """
    Raised when a buffer cannot be turned into a request at all.

    The server reacts by logging and dropping the connection without
    writing a response.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed request. Lives for one connection only.

    Attributes:
        method:         First token of the request line ("GET", "POST", ...)
        path:           Second token, taken as-is (no query parsing)
        version:        Third token, usually "HTTP/1.1"
        body:           Text after the first blank line, or ""
        raw:            The whole decoded buffer
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    path: str
    version: str = ""
    body: str = ""
    raw: str = ""
    client_address: Tuple[str, int] = ("", 0)

    @property
    def request_line(self) -> str:
        """The request line rebuilt from its tokens, for log messages."""
        return " ".join(part for part in (self.method, self.path, self.version) if part)


class RequestParser:
    """
    Parses one raw buffer into an HTTPRequest.

        Raw bytes
            │
            ▼
        1. Empty? ────────────────► HTTPParseError("Empty request")
        2. Too large? ────────────► HTTPParseError(413)
        3. Decode UTF-8 (lossy)
        4. Request line = up to first CRLF, split on whitespace
        5. Body = after first CRLF CRLF, or ""
            │
            ▼
        HTTPRequest
    """

    def __init__(self, max_request_size: int = 1024 * 1024):
        """
        Args:
            max_request_size: Largest buffer accepted, in bytes. The server
                              reads at most buffer_size bytes, so this only
                              matters for callers feeding bytes directly.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw request bytes.

        Args:
            data: Bytes from a single socket read.
            client_address: Peer (ip, port) for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If data is empty or exceeds the size limit.
        """
        if not data:
            raise HTTPParseError("Empty request")

        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        # Invalid UTF-8 must not abort the request; the router and the JSON
        # decoder see replacement characters instead.
        text = data.decode("utf-8", errors="replace")

        method, path, version = self._parse_request_line(text)
        body = self._extract_body(text)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            body=body,
            raw=text,
            client_address=client_address,
        )

    def _parse_request_line(self, text: str) -> Tuple[str, str, str]:
        """
        Split the first line into (method, path, version).

            "GET /users/7 HTTP/1.1"  →  ("GET", "/users/7", "HTTP/1.1")
            "GET"                    →  ("GET", "", "")
            ""                       →  ("", "", "")
        """
        line = text.split("\r\n", 1)[0]
        tokens = line.split()
        tokens += [""] * (3 - len(tokens))
        return tokens[0], tokens[1], tokens[2]

    def _extract_body(self, text: str) -> str:
        """Everything after the first blank line, or "" if there is none."""
        _, separator, body = text.partition(HEADER_TERMINATOR)
        if not separator:
            return ""
        return body


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_size: int = 1024 * 1024,
) -> HTTPRequest:
    """
    Convenience function to parse a request with a throwaway parser.
    """
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(data, client_address)
