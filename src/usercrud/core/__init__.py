"""
=============================================================================
CORE NETWORKING
=============================================================================

    socket_server.py   Listening socket and the single-threaded accept loop
    connection.py      One client connection: one read, one write, close

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = ["SocketServer", "Connection", "ConnectionState"]
