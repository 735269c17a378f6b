"""Database layer package.

Public re-exports so callers can write::

    from enforcer.db import get_connection, init_db
    from enforcer.db import KeyState, KeyStateList, KeyStateRRState
"""

from enforcer.db.connection import get_connection
from enforcer.db.errors import (
    BindError,
    DbError,
    DbValidationError,
    NotFoundError,
    StorageError,
)
from enforcer.db.key_state import (
    KeyState,
    KeyStateList,
    KeyStateRRState,
    rrstate_from_text,
    rrstate_to_text,
)
from enforcer.db.migrations import init_db

__all__ = [
    "get_connection",
    "init_db",
    "KeyState",
    "KeyStateList",
    "KeyStateRRState",
    "rrstate_from_text",
    "rrstate_to_text",
    "DbError",
    "BindError",
    "DbValidationError",
    "NotFoundError",
    "StorageError",
]
