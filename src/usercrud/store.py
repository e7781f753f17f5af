"""
=============================================================================
STORE GATEWAY
=============================================================================

The only module that talks to the database. Handlers see two things:

    UserStore.connect()  →  StoreConnection   (or StoreConnectError)
    UserStore.ensure_schema()                 (startup only)

=============================================================================
CONNECT PER REQUEST
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Request 1:  connect → one statement → commit → close             │
    │   Request 2:  connect → one statement → commit → close             │
    │   Request 3:  connect → one statement → commit → close             │
    └─────────────────────────────────────────────────────────────────────┘

The engine is built with NullPool, so SQLAlchemy keeps nothing open between
requests: connect() really opens a DBAPI connection and close() really
closes it. Swapping in a pooled engine only means changing _create_engine();
handlers depend on connect() alone.

=============================================================================
SCHEMA
=============================================================================

    users
    ├── id     INTEGER  PRIMARY KEY (auto-assigned)
    ├── name   VARCHAR  NOT NULL
    └── email  VARCHAR  NOT NULL

ensure_schema() issues CREATE TABLE only when the table is missing, so it is
safe to run on every start.

=============================================================================
"""

import logging
from typing import List, Optional

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.pool import NullPool

from .models import User


logger = logging.getLogger(__name__)


metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False),
)


class StoreError(Exception):
    """A statement failed, or the store rejected it."""


class StoreConnectError(StoreError):
    """The store could not be reached."""


class UserNotFound(LookupError):
    """No row matched the requested id."""

    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class StoreConnection:
    """
    One open database connection, used for one request.

    Use as a context manager: the transaction is committed on a clean exit,
    rolled back otherwise, and the connection is always closed.

        with store.connect() as conn:
            conn.insert_user(user)
    """

    def __init__(self, connection: Connection):
        self._conn = connection

    def __enter__(self) -> "StoreConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        except SQLAlchemyError as e:
            raise StoreError(f"Transaction failed: {e}") from e
        finally:
            self._conn.close()
        return False

    def insert_user(self, user: User) -> None:
        """Insert name and email. The store assigns the id."""
        stmt = insert(users_table).values(name=user.name, email=user.email)
        self._execute(stmt)

    def fetch_user(self, user_id: int) -> User:
        """
        Fetch exactly one user.

        Raises:
            UserNotFound: If no row has this id.
            StoreError: If the query fails.
        """
        stmt = select(users_table.c.id, users_table.c.name, users_table.c.email).where(
            users_table.c.id == user_id
        )
        try:
            row = self._conn.execute(stmt).one()
        except NoResultFound as e:
            raise UserNotFound(user_id) from e
        except SQLAlchemyError as e:
            raise StoreError(f"Query failed: {e}") from e
        return _row_to_user(row)

    def fetch_users(self) -> List[User]:
        """All users, in whatever order the store returns them."""
        stmt = select(users_table.c.id, users_table.c.name, users_table.c.email)
        result = self._execute(stmt)
        return [_row_to_user(row) for row in result]

    def update_user(self, user_id: int, user: User) -> int:
        """Overwrite name and email. Returns the number of rows matched."""
        stmt = (
            update(users_table)
            .where(users_table.c.id == user_id)
            .values(name=user.name, email=user.email)
        )
        return self._execute(stmt).rowcount

    def delete_user(self, user_id: int) -> int:
        """Delete one row. Returns the number of rows removed."""
        stmt = delete(users_table).where(users_table.c.id == user_id)
        return self._execute(stmt).rowcount

    def _execute(self, stmt):
        try:
            return self._conn.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Statement failed: {e}") from e


class UserStore:
    """
    Façade over the relational store.

    Built once at startup from ServerConfig.database_url and shared by the
    handlers. It holds an Engine (a connection factory), never an open
    connection.
    """

    def __init__(self, database_url: str, engine: Optional[Engine] = None):
        self.database_url = database_url
        self._engine = engine or self._create_engine(database_url)

    @staticmethod
    def _create_engine(database_url: str) -> Engine:
        return create_engine(database_url, poolclass=NullPool)

    @property
    def engine(self) -> Engine:
        return self._engine

    def connect(self) -> StoreConnection:
        """
        Open a fresh connection.

        Raises:
            StoreConnectError: If the database cannot be reached.
        """
        try:
            connection = self._engine.connect()
        except SQLAlchemyError as e:
            raise StoreConnectError(f"Cannot connect to store: {e}") from e
        logger.debug("Opened store connection")
        return StoreConnection(connection)

    def ensure_schema(self) -> None:
        """
        Create the users table if it does not exist.

        Raises:
            StoreError: If the store is unreachable or the DDL fails.
                        Startup must abort in that case.
        """
        try:
            metadata.create_all(self._engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise StoreError(f"Schema bootstrap failed: {e}") from e
        logger.info("Schema ready (table: users)")

    def dispose(self) -> None:
        """Release the engine. Only matters for tests and embedding."""
        self._engine.dispose()


def _row_to_user(row) -> User:
    return User(id=row.id, name=row.name, email=row.email)
