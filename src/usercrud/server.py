"""
=============================================================================
CRUD SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         CRUDServer                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   SocketServer ──► Connection ──► RequestParser                     │
    │                                        │                            │
    │                                        ▼                            │
    │                    LoggingMiddleware ──► Router ──► UserHandler     │
    │                                                          │          │
    │                                                          ▼          │
    │                                                      UserStore      │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts a connection (one at a time)
    2. Connection reads ONE buffer
         └── nothing read / read error → log, close, no response
    3. RequestParser splits method, path and body
         └── HTTPParseError → log, close, no response
    4. Middleware + Router pick the handler; the handler runs one
       statement against a fresh store connection
    5. HTTPResponse is serialized and written
         └── write error → log, close, no retry
    6. Connection closes

=============================================================================
STARTUP
=============================================================================

run() bootstraps the schema BEFORE binding the socket. If that fails the
StoreError propagates and the CLI exits with status 1.

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .handlers import UserHandler
from .http import (
    HTTPParseError,
    HTTPResponse,
    RequestParser,
    Router,
    internal_error,
)
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline
from .store import UserStore


logger = logging.getLogger(__name__)


class CRUDServer:
    """
    The user CRUD service.

        config = ServerConfig.from_env()
        server = CRUDServer(config)
        server.run()            # blocks until SIGINT/SIGTERM

    A store can be injected (tests use SQLite):

        server = CRUDServer(config, store=UserStore("sqlite:///users.db"))
    """

    def __init__(self, config: Optional[ServerConfig] = None, store: Optional[UserStore] = None):
        """
        Args:
            config: Server configuration. Defaults apply if omitted.
            store: Store gateway. Built from config.database_url if omitted.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.store = store or UserStore(self.config.database_url)

        self._socket_server = SocketServer(self.config)
        # The read is capped at buffer_size, so this limit never trips for
        # socket input; it guards direct callers of process().
        self._parser = RequestParser(max_request_size=max(self.config.buffer_size, 1024 * 1024))

        self._router = UserHandler(self.store).register(Router())

        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware(log_format=self.config.log_format))
        self._handler = self._middleware.wrap(self._router.handle)

        self._running = False

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (ip, port) once running."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    def use(self, middleware: Middleware) -> "CRUDServer":
        """
        Add middleware inside the access logger.

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        self._handler = self._middleware.wrap(self._router.handle)
        return self

    def bootstrap(self) -> None:
        """
        Create the users table if missing.

        Raises:
            StoreError: Fatal; the server must not start.
        """
        self.store.ensure_schema()

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Bootstrap the schema, then serve until shutdown() or a signal.

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            StoreError: If the schema bootstrap fails.
            OSError: If the address cannot be bound.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self.bootstrap()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}"
        )

        self._running = True
        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. The current request finishes first."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("usercrud").setLevel(level)

    def process(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> Optional[HTTPResponse]:
        """
        Turn one raw buffer into a response.

        Returns:
            The response, or None when the buffer is not a request at all
            (the connection is then dropped without an answer).
        """
        try:
            request = self._parser.parse(data, client_address)
        except HTTPParseError as e:
            logger.warning(f"Dropping unparseable request from {client_address[0]}: {e}")
            return None

        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.request_line!r}: {e}")
            return internal_error()

    def _handle_connection(self, conn: Connection):
        """
        Serve one connection: read, process, write, close.

        Called inline by the accept loop, so it never raises: any failure
        is logged and the connection is dropped.
        """
        with conn:
            raw_request = conn.read_request()
            if raw_request is None:
                return

            conn.state = ConnectionState.PROCESSING
            response = self.process(raw_request, conn.address)
            if response is None:
                return

            if not conn.send_response(response.to_bytes()):
                logger.warning(f"[{conn.id}] Response to {conn.client_ip} was not delivered")


def create_app(config: Optional[ServerConfig] = None, store: Optional[UserStore] = None) -> CRUDServer:
    """Factory for server instances."""
    return CRUDServer(config, store)
