"""Database initialisation.

``init_db(conn)`` is idempotent, safe to call on an existing database.
"""

from __future__ import annotations

from enforcer.db.object import DbConnection
from enforcer.logging_utils import get_logger

logger = get_logger(__name__)


def init_db(conn: DbConnection) -> None:
    """Create every table the database layer needs.

    Args:
        conn: An open backend connection.
    """
    conn.init_schema()
    logger.debug("Schema initialised on %s", type(conn).__name__)
