"""
Unit tests for the user CRUD handlers.
"""

import json

import pytest

from usercrud.handlers import UserHandler, parse_user_id
from usercrud.http.router import RouteKind, RouteMatch, Router
from usercrud.http.status_codes import HTTPStatus
from usercrud.store import UserStore


ADA = '{"name": "Ada", "email": "ada@x.io"}'


def create(handler: UserHandler, body: str = ADA):
    return handler.create(RouteMatch(kind=RouteKind.CREATE, body=body))


def read_one(handler: UserHandler, target_id: str):
    return handler.read_one(RouteMatch(kind=RouteKind.READ_ONE, target_id=target_id))


def read_all(handler: UserHandler):
    return handler.read_all(RouteMatch(kind=RouteKind.READ_ALL))


def update(handler: UserHandler, target_id: str, body: str):
    return handler.update(RouteMatch(kind=RouteKind.UPDATE, target_id=target_id, body=body))


def delete(handler: UserHandler, target_id: str):
    return handler.delete(RouteMatch(kind=RouteKind.DELETE, target_id=target_id))


def first_id(handler: UserHandler) -> str:
    return str(json.loads(read_all(handler).text)[0]["id"])


class TestParseUserId:
    """Tests for id parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [("7", 7), ("007", 7), ("+7", 7), ("-7", -7), ("2147483647", 2147483647)],
    )
    def test_valid(self, text, expected):
        assert parse_user_id(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "abc", "7a", "1.5", " 7", "2147483648", "-2147483649", None],
    )
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_user_id(text)


class TestCreate:
    def test_create(self, handler: UserHandler):
        response = create(handler)

        assert response.status == HTTPStatus.OK
        assert response.text == "User created"
        assert response.headers["Content-Type"] == "application/json"

    @pytest.mark.parametrize("body", ["", "not json", '{"name": "Ada"}', "[]"])
    def test_bad_body_is_internal_error(self, handler: UserHandler, body):
        response = create(handler, body)

        assert response.status == HTTPStatus.INTERNAL_ERROR
        assert response.text == "Internal error"

    def test_bad_body_writes_nothing(self, handler: UserHandler):
        create(handler, '{"name": "Ada"}')

        assert read_all(handler).text == "[]"

    def test_unreachable_store(self, unreachable_store: UserStore):
        response = create(UserHandler(unreachable_store))

        assert response.status == HTTPStatus.INTERNAL_ERROR


class TestReadOne:
    def test_read_existing(self, handler: UserHandler):
        create(handler)
        user_id = first_id(handler)

        response = read_one(handler, user_id)

        assert response.status == HTTPStatus.OK
        assert json.loads(response.text) == {
            "id": int(user_id),
            "name": "Ada",
            "email": "ada@x.io",
        }

    def test_read_missing(self, handler: UserHandler):
        response = read_one(handler, "9999")

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.text == "User not found"

    @pytest.mark.parametrize("target_id", ["abc", "", "99999999999"])
    def test_malformed_id_is_internal_error(self, handler: UserHandler, target_id):
        response = read_one(handler, target_id)

        assert response.status == HTTPStatus.INTERNAL_ERROR
        assert response.text == "Internal error"

    def test_unreachable_store(self, unreachable_store: UserStore):
        response = read_one(UserHandler(unreachable_store), "1")

        assert response.status == HTTPStatus.INTERNAL_ERROR

    def test_query_failure_is_not_found(self, database_url: str):
        """Test that a failing query after connecting answers 404."""
        bare = UserStore(database_url)
        try:
            response = read_one(UserHandler(bare), "1")
        finally:
            bare.dispose()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.text == "User not found"


class TestReadAll:
    def test_empty(self, handler: UserHandler):
        response = read_all(handler)

        assert response.status == HTTPStatus.OK
        assert response.text == "[]"

    def test_lists_every_user(self, handler: UserHandler):
        create(handler)
        create(handler, '{"name": "Bob", "email": "bob@x.io"}')

        users = json.loads(read_all(handler).text)

        assert sorted(u["name"] for u in users) == ["Ada", "Bob"]
        assert all(set(u) == {"id", "name", "email"} for u in users)

    def test_unreachable_store(self, unreachable_store: UserStore):
        response = read_all(UserHandler(unreachable_store))

        assert response.status == HTTPStatus.INTERNAL_ERROR

    def test_query_failure_is_internal_error(self, database_url: str):
        bare = UserStore(database_url)
        try:
            response = read_all(UserHandler(bare))
        finally:
            bare.dispose()

        assert response.status == HTTPStatus.INTERNAL_ERROR


class TestUpdate:
    def test_update(self, handler: UserHandler):
        create(handler)
        user_id = first_id(handler)

        response = update(handler, user_id, '{"name": "Ada L.", "email": "ada@l.io"}')

        assert response.status == HTTPStatus.OK
        assert response.text == "User updated"
        assert json.loads(read_one(handler, user_id).text)["name"] == "Ada L."

    def test_update_missing_still_ok(self, handler: UserHandler):
        response = update(handler, "9999", ADA)

        assert response.status == HTTPStatus.OK
        assert response.text == "User updated"
        assert read_all(handler).text == "[]"

    def test_bad_id(self, handler: UserHandler):
        assert update(handler, "abc", ADA).status == HTTPStatus.INTERNAL_ERROR

    def test_bad_body(self, handler: UserHandler):
        create(handler)
        user_id = first_id(handler)

        response = update(handler, user_id, '{"name": "X"}')

        assert response.status == HTTPStatus.INTERNAL_ERROR
        assert json.loads(read_one(handler, user_id).text)["name"] == "Ada"

    def test_unreachable_store(self, unreachable_store: UserStore):
        response = update(UserHandler(unreachable_store), "1", ADA)

        assert response.status == HTTPStatus.INTERNAL_ERROR


class TestDelete:
    def test_delete(self, handler: UserHandler):
        create(handler)
        user_id = first_id(handler)

        response = delete(handler, user_id)

        assert response.status == HTTPStatus.OK
        assert response.text == "User deleted"
        assert read_one(handler, user_id).status == HTTPStatus.NOT_FOUND

    def test_delete_twice(self, handler: UserHandler):
        create(handler)
        user_id = first_id(handler)
        delete(handler, user_id)

        response = delete(handler, user_id)

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.text == "User not found"

    def test_bad_id(self, handler: UserHandler):
        assert delete(handler, "abc").status == HTTPStatus.INTERNAL_ERROR

    def test_unreachable_store(self, unreachable_store: UserStore):
        response = delete(UserHandler(unreachable_store), "1")

        assert response.status == HTTPStatus.INTERNAL_ERROR


class TestRegister:
    def test_registers_all_routes(self, handler: UserHandler):
        router = handler.register(Router())

        assert router.routes == [
            RouteKind.CREATE,
            RouteKind.READ_ONE,
            RouteKind.READ_ALL,
            RouteKind.UPDATE,
            RouteKind.DELETE,
        ]
