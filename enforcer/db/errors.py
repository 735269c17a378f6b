"""Exceptions raised by the database layer.

Every failure is reported to the immediate caller by raising one of these;
nothing is retried at this layer.
"""

from __future__ import annotations


class DbError(Exception):
    """Base class for all database layer failures."""


class BindError(DbError):
    """A storage descriptor could not be obtained or is no longer bound."""


class DbValidationError(DbError, ValueError):
    """Malformed input: bad state text, wrong-arity row, uncoercible value."""


class NotFoundError(DbError, LookupError):
    """The referenced row does not exist."""


class StorageError(DbError):
    """The backend rejected or failed a create/read/update/delete."""
