"""
=============================================================================
USER CRUD HANDLERS
=============================================================================

One method per route. Each runs the same straight line:

    parse inputs ──► connect to store ──► one statement ──► map to response

Nothing is retried and nothing spans two statements.

=============================================================================
FAILURE MAPPING
=============================================================================

    ┌───────────┬─────────────────────┬───────────────┬───────────────────┐
    │ Handler   │ Bad id / bad body   │ Connect fails │ Statement result  │
    ├───────────┼─────────────────────┼───────────────┼───────────────────┤
    │ create    │ 500                 │ 500           │ error → 500       │
    │ read_one  │ 500                 │ 500           │ 0 rows/error → 404│
    │ read_all  │ -                   │ 500           │ error → 500       │
    │ update    │ 500                 │ 500           │ error → 500       │
    │           │                     │               │ 0 rows → 200 (!)  │
    │ delete    │ 500                 │ 500           │ error → 500       │
    │           │                     │               │ 0 rows → 404      │
    └───────────┴─────────────────────┴───────────────┴───────────────────┘

A malformed id or body is answered exactly like a backend failure. Clients
rely on that, so there is no separate 400 class.

Every collapsed failure is logged before it becomes a response.

=============================================================================
"""

import logging
import re

from ..http.response import HTTPResponse, internal_error, not_found, ok, ok_json
from ..http.router import RouteKind, RouteMatch, Router
from ..models import User, UserDecodeError
from ..store import StoreConnectError, StoreError, UserNotFound, UserStore


logger = logging.getLogger(__name__)


USER_CREATED = "User created"
USER_UPDATED = "User updated"
USER_DELETED = "User deleted"
USER_NOT_FOUND = "User not found"

# The id column is a 32-bit signed integer.
_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_ID_MIN = -(2 ** 31)
_ID_MAX = 2 ** 31 - 1


def parse_user_id(text: str) -> int:
    """
    Parse a target id.

    Raises:
        ValueError: If text is not a decimal integer in the id range.
    """
    if text is None or not _ID_PATTERN.fullmatch(text):
        raise ValueError(f"Invalid user id: {text!r}")
    value = int(text)
    if not _ID_MIN <= value <= _ID_MAX:
        raise ValueError(f"User id out of range: {text}")
    return value


class UserHandler:
    """
    CRUD operations on the users table.

    Holds a UserStore and nothing else, so an instance can be shared by
    every request without locking.

        handler = UserHandler(store)
        handler.register(router)
    """

    def __init__(self, store: UserStore):
        self.store = store

    def register(self, router: Router) -> Router:
        """Attach all five operations to a router."""
        router.add_route(RouteKind.CREATE, self.create)
        router.add_route(RouteKind.READ_ONE, self.read_one)
        router.add_route(RouteKind.READ_ALL, self.read_all)
        router.add_route(RouteKind.UPDATE, self.update)
        router.add_route(RouteKind.DELETE, self.delete)
        return router

    def create(self, route: RouteMatch) -> HTTPResponse:
        """POST /users"""
        try:
            user = User.from_json(route.body)
        except UserDecodeError as e:
            logger.warning(f"Create rejected: {e}")
            return internal_error()

        try:
            with self.store.connect() as conn:
                conn.insert_user(user)
        except StoreError as e:
            logger.warning(f"Create failed: {e}")
            return internal_error()

        return ok(USER_CREATED)

    def read_one(self, route: RouteMatch) -> HTTPResponse:
        """
        GET /users/{id}

        Only a connect failure is a 500 here. Once connected, an empty
        result and a failing query are both reported as 404.
        """
        try:
            user_id = parse_user_id(route.target_id)
        except ValueError as e:
            logger.warning(f"Read rejected: {e}")
            return internal_error()

        try:
            with self.store.connect() as conn:
                user = conn.fetch_user(user_id)
        except StoreConnectError as e:
            logger.warning(f"Read failed: {e}")
            return internal_error()
        except UserNotFound:
            return not_found(USER_NOT_FOUND)
        except StoreError as e:
            logger.warning(f"Read of user {user_id} failed: {e}")
            return not_found(USER_NOT_FOUND)

        return ok(user.to_json())

    def read_all(self, route: RouteMatch) -> HTTPResponse:
        """GET /users"""
        try:
            with self.store.connect() as conn:
                users = conn.fetch_users()
        except StoreError as e:
            logger.warning(f"List failed: {e}")
            return internal_error()

        return ok_json([user.to_dict() for user in users])

    def update(self, route: RouteMatch) -> HTTPResponse:
        """
        PUT /users/{id}

        An update that matches no row still answers "User updated".
        """
        try:
            user_id = parse_user_id(route.target_id)
            user = User.from_json(route.body)
        except ValueError as e:
            logger.warning(f"Update rejected: {e}")
            return internal_error()

        try:
            with self.store.connect() as conn:
                matched = conn.update_user(user_id, user)
        except StoreError as e:
            logger.warning(f"Update of user {user_id} failed: {e}")
            return internal_error()

        if matched == 0:
            logger.debug(f"Update matched no rows for user {user_id}")

        return ok(USER_UPDATED)

    def delete(self, route: RouteMatch) -> HTTPResponse:
        """DELETE /users/{id}"""
        try:
            user_id = parse_user_id(route.target_id)
        except ValueError as e:
            logger.warning(f"Delete rejected: {e}")
            return internal_error()

        try:
            with self.store.connect() as conn:
                deleted = conn.delete_user(user_id)
        except StoreError as e:
            logger.warning(f"Delete of user {user_id} failed: {e}")
            return internal_error()

        if deleted == 0:
            return not_found(USER_NOT_FOUND)

        return ok(USER_DELETED)
