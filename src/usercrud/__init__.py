"""
=============================================================================
USERCRUD - Minimal User CRUD Service Over Raw Sockets
=============================================================================

A single-threaded TCP server that understands a narrow subset of HTTP and
maps five routes onto a relational "users" table.

=============================================================================
ROUTES
=============================================================================

    POST   /users        {"name": ..., "email": ...}  →  200 "User created"
    GET    /users/{id}                                →  200 {"id":..,"name":..,"email":..}
    GET    /users                                     →  200 [{...}, ...]
    PUT    /users/{id}   {"name": ..., "email": ...}  →  200 "User updated"
    DELETE /users/{id}                                →  200 "User deleted"

    Missing row → 404 NOT FOUND, anything else wrong → 500 INTERNAL ERROR,
    unknown route → 404 NOT FOUND.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    usercrud/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m usercrud)
    ├── server.py            # CRUDServer orchestrator
    ├── config.py            # ServerConfig dataclass
    ├── models.py            # User record and its JSON contract
    ├── store.py             # UserStore gateway (SQLAlchemy)
    ├── core/
    │   ├── socket_server.py # Accept loop
    │   └── connection.py    # One read, one write
    ├── http/
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response serialization
    │   ├── router.py        # Method + prefix routing
    │   └── status_codes.py  # 200 / 404 / 500
    ├── middleware/
    │   ├── base.py          # Middleware pipeline
    │   └── logging.py       # Access log
    └── handlers/
        └── users.py         # The five CRUD operations

=============================================================================
QUICK START
=============================================================================

    from usercrud import CRUDServer, ServerConfig

    server = CRUDServer(ServerConfig(port=8080, database_url="sqlite:///users.db"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import CRUDServer, create_app
from .config import ServerConfig
from .models import User
from .store import UserStore

__all__ = ["CRUDServer", "create_app", "ServerConfig", "User", "UserStore", "__version__"]
