"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Handlers hold the business logic of the service. The router picks one per
request; the handler turns a RouteMatch into an HTTPResponse.

    from usercrud.handlers import UserHandler

    handler = UserHandler(store)
    handler.register(router)

=============================================================================
"""

from .users import UserHandler, parse_user_id

__all__ = [
    "UserHandler",
    "parse_user_id",
]
