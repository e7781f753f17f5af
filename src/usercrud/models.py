"""
=============================================================================
USER RECORD
=============================================================================

The service manages exactly one entity:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  User                                                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │  id     Optional[int]   assigned by the store, never by the client  │
    │  name   str             required in request bodies                  │
    │  email  str             required in request bodies                  │
    └─────────────────────────────────────────────────────────────────────┘

Request bodies (create/update):

    {"name": "Ada", "email": "ada@x.io"}         ← id, if sent, is dropped

Response bodies (read):

    {"id":1,"name":"Ada","email":"ada@x.io"}

Decoding checks types only. Empty strings are accepted; the table's NOT NULL
constraints are the only other guard.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import json


class UserDecodeError(ValueError):
    """Raised when a request body is not a valid user object."""


@dataclass
class User:
    """A single row of the users table."""

    name: str
    email: str
    id: Optional[int] = None

    @classmethod
    def from_json(cls, text: str) -> "User":
        """
        Decode a request body.

        The body must be a JSON object with string "name" and "email"
        fields. Any "id" field is ignored: identifiers come from the store.

        Args:
            text: Raw body text.

        Returns:
            User with id=None.

        Raises:
            UserDecodeError: On invalid JSON, a non-object, or a missing or
                             non-string field.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise UserDecodeError(f"Invalid JSON body: {e}") from e

        if not isinstance(data, dict):
            raise UserDecodeError("Body must be a JSON object")

        return cls(
            name=_require_str(data, "name"),
            email=_require_str(data, "email"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Field order matches the response contract: id, name, email."""
        return {"id": self.id, "name": self.name, "email": self.email}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


def _require_str(data: Dict[str, Any], key: str) -> str:
    if key not in data:
        raise UserDecodeError(f"Missing field: {key}")
    value = data[key]
    if not isinstance(value, str):
        raise UserDecodeError(f"Field {key} must be a string")
    return value
