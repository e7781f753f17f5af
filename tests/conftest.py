"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Generator, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from usercrud import CRUDServer, ServerConfig, create_app
from usercrud.handlers import UserHandler
from usercrud.store import UserStore


def build_request(method: str, path: str, body: str = "") -> bytes:
    """Build a raw request the way a simple HTTP client would."""
    head = f"{method} {path} HTTP/1.1\r\nHost: localhost\r\n"
    if body:
        head += "Content-Type: application/json\r\n"
        head += f"Content-Length: {len(body.encode())}\r\n"
    return (head + "\r\n" + body).encode()


def split_response(data: bytes) -> Tuple[str, dict, str]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode().split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return lines[0], headers, body.decode()


@pytest.fixture
def sample_post_request() -> bytes:
    """POST /users with a JSON body."""
    return build_request("POST", "/users", '{"name": "Ada", "email": "ada@x.io"}')


@pytest.fixture
def sample_get_request() -> bytes:
    """GET /users/1 without a body."""
    return build_request("GET", "/users/1")


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite file in a temporary directory."""
    return f"sqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def store(database_url: str) -> Generator[UserStore, None, None]:
    """A bootstrapped store backed by SQLite."""
    user_store = UserStore(database_url)
    user_store.ensure_schema()
    yield user_store
    user_store.dispose()


@pytest.fixture
def unreachable_store(tmp_path: Path) -> UserStore:
    """A store whose database file can never be opened."""
    return UserStore(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'users.db'}")


@pytest.fixture
def handler(store: UserStore) -> UserHandler:
    return UserHandler(store)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: CRUDServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        # Wait for server to be ready
        for _ in range(50):  # 5 seconds max
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(('127.0.0.1', self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def send(self, data: bytes) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with socket.create_connection(('127.0.0.1', self.port), timeout=5.0) as s:
            if data:
                s.sendall(data)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def request(self, method: str, path: str, body: str = "") -> Tuple[str, dict, str]:
        return split_response(self.send(build_request(method, path, body)))


def make_server(port: int, store: UserStore) -> CRUDServer:
    return create_app(
        ServerConfig(
            host="127.0.0.1",
            port=port,
            timeout=5.0,
            database_url=store.database_url,
            log_level="WARNING",
        ),
        store=store,
    )


@pytest.fixture
def test_server(free_port: int, store: UserStore) -> Generator[TestServer, None, None]:
    """A running server backed by the SQLite store."""
    test_srv = TestServer(make_server(free_port, store), free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def unreachable_server(free_port: int, unreachable_store: UserStore) -> Generator[TestServer, None, None]:
    """
    A running server whose store goes away after startup: the schema step
    is skipped so the server can start at all.
    """
    server = make_server(free_port, unreachable_store)
    server.bootstrap = lambda: None
    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
