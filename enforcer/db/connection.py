"""Backend connection factory.

Usage::

    from enforcer.db.connection import get_connection

    conn = get_connection()
    try:
        ...
    finally:
        conn.close()
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from enforcer.config import settings
from enforcer.db.backends import InMemoryConnection, SQLiteConnection
from enforcer.db.object import DbConnection


def get_connection(
    db_path: Optional[Union[Path, str]] = None,
    backend: Optional[str] = None,
) -> DbConnection:
    """Open a connection to the configured storage backend.

    Args:
        db_path: Override the DB path.  Defaults to ``settings.db_path``.
            Ignored by the ``memory`` backend.
        backend: ``sqlite`` or ``memory``.  Defaults to
            ``settings.storage_backend``.

    Raises:
        ValueError: If *backend* names an unknown backend.
    """
    backend = backend or settings.storage_backend

    if backend == "memory":
        return InMemoryConnection()

    if backend == "sqlite":
        path = db_path or settings.db_path
        # Create parent directory if needed (no-op for `:memory:`)
        if str(path) != ":memory:":
            settings.ensure_workspace()
        return SQLiteConnection(path)

    raise ValueError(f"Unknown storage backend: {backend!r}")
