"""
=============================================================================
CONNECTION
=============================================================================

Wraps one accepted client socket.

=============================================================================
ONE READ, ONE WRITE
=============================================================================

TCP is a byte stream: a request may arrive split across several recv()
calls. This service does not reassemble it. It reads ONCE, up to
buffer_size bytes, and treats whatever arrived as the whole request:

    ┌─────────────────────────────────────────────────────────────────┐
    │   accept()                                                      │
    │      │                                                          │
    │      ▼                                                          │
    │   recv(buffer_size)   ← single read, no Content-Length loop     │
    │      │                                                          │
    │      ▼                                                          │
    │   parse → route → handle                                        │
    │      │                                                          │
    │      ▼                                                          │
    │   sendall(response)   ← single write                            │
    │      │                                                          │
    │      ▼                                                          │
    │   close()             ← no keep-alive                           │
    └─────────────────────────────────────────────────────────────────┘

Requests larger than one read, or bodies sent in a later segment, are not
supported.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
               │                                      ▲
               └──────────── (read failed) ───────────┘

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and debugging."""

    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used as a log prefix.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Bytes requested from the single recv().
        timeout: Socket timeout in seconds; None blocks forever.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: Optional[float] = None

    def __post_init__(self):
        # settimeout(None) puts the socket in blocking mode.
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    def read_request(self) -> Optional[bytes]:
        """
        Read the request with a single recv().

        Returns:
            The bytes received, or None if the read failed or the peer
            closed without sending anything. Either way the caller should
            drop the connection without answering.
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except (socket.timeout, OSError) as e:
            logger.warning(f"[{self.id}] Unable to read stream: {e}")
            return None

        if not data:
            logger.warning(f"[{self.id}] Peer closed before sending a request")
            return None

        logger.debug(f"[{self.id}] Read {len(data)} bytes")
        return data

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response with sendall().

        Returns:
            True if sent, False if the connection was lost. Failed writes
            are logged and never retried.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR): send FIN, the client sees end-of-response
        2. drain: discard whatever the client sent past our single read and
           is already buffered, without waiting for more
        3. close(): release the descriptor

        Every step is best effort: the peer may already be gone. Nothing
        here blocks, since the accept loop serves one connection at a time.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already disconnected

        # Unread bytes left in the kernel buffer make close() send RST,
        # which can destroy the response before the client reads it.
        try:
            self.socket.setblocking(False)
            while self.socket.recv(4096):
                pass
        except BlockingIOError:
            pass  # Buffer empty
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        """
        Context manager entry:

            with conn:
                data = conn.read_request()
                conn.send_response(response)
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
