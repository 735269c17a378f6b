"""Concrete :class:`~enforcer.db.object.DbConnection` implementations."""

from enforcer.db.backends.memory import InMemoryConnection
from enforcer.db.backends.sqlite import SQLiteConnection

__all__ = ["InMemoryConnection", "SQLiteConnection"]
