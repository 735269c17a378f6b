"""Table layouts known to the database layer.

Mirrors ``schema.sql`` for backends that have no DDL of their own.
"""

from __future__ import annotations

TABLES: dict[str, tuple[str, ...]] = {
    "keyState": ("id", "state", "lastChange", "minimize", "ttl"),
}
