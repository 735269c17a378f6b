"""SQLite backend.

Wraps a :class:`sqlite3.Connection` configured with foreign keys and WAL
journalling.  All SQL the database layer issues is generated here.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Sequence, Union

from enforcer.config import settings
from enforcer.db.errors import StorageError
from enforcer.db.object import ClauseOperator, DbClause, DbConnection
from enforcer.logging_utils import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _where(clauses: Sequence[DbClause]) -> tuple[str, list[Any]]:
    """Render ANDed clauses as a ``WHERE`` fragment plus its parameters."""
    if not clauses:
        return "", []

    parts: list[str] = []
    params: list[Any] = []
    for clause in clauses:
        if clause.operator is ClauseOperator.IN:
            values = list(clause.value)
            if not values:
                parts.append("0")
                continue
            placeholders = ", ".join("?" for _ in values)
            parts.append(f'"{clause.column}" IN ({placeholders})')
            params.extend(values)
        else:
            parts.append(f'"{clause.column}" = ?')
            params.append(clause.value)
    return " WHERE " + " AND ".join(parts), params


def open_sqlite(db_path: Union[Path, str]) -> sqlite3.Connection:
    """Open and configure a raw SQLite connection.

    Steps performed on every new connection:
    1. Enable ``PRAGMA foreign_keys = ON``.
    2. Switch to WAL journal mode for concurrent readers.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------

class SQLiteConnection(DbConnection):
    def __init__(self, db_path: Union[Path, str]) -> None:
        self.db_path = db_path
        self.db = open_sqlite(db_path)
        self.closed = False

    def _execute(
        self, sql: str, params: Sequence[Any] = (), commit: bool = False
    ) -> sqlite3.Cursor:
        try:
            cursor = self.db.execute(sql, params)
            if commit:
                self.db.commit()
            return cursor
        except (sqlite3.Error, OverflowError) as exc:
            logger.warning("SQLite statement failed: %s (%s)", exc, sql)
            if commit and self.db.in_transaction:
                self.db.rollback()
            raise StorageError(str(exc)) from exc

    def init_schema(self) -> None:
        """Run ``schema.sql``; every statement uses ``IF NOT EXISTS``."""
        sql = settings.schema_path.read_text(encoding="utf-8")
        try:
            self.db.executescript(sql)
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def has_table(self, table: str) -> bool:
        row = self._execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        ).fetchone()
        return row is not None

    def create(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> int:
        names = ", ".join(f'"{c}"' for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        cursor = self._execute(
            f'INSERT INTO "{table}" ({names}) VALUES ({placeholders})',  # noqa: S608
            list(values),
            commit=True,
        )
        return cursor.lastrowid

    def read(
        self, table: str, columns: Sequence[str], clauses: Sequence[DbClause]
    ) -> list[tuple[Any, ...]]:
        names = ", ".join(f'"{c}"' for c in columns)
        where, params = _where(clauses)
        rows = self._execute(
            f'SELECT {names} FROM "{table}"{where} ORDER BY "id"',  # noqa: S608
            params,
        ).fetchall()
        return [tuple(r) for r in rows]

    def update(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        clauses: Sequence[DbClause],
    ) -> int:
        set_clause = ", ".join(f'"{c}" = ?' for c in columns)
        where, params = _where(clauses)
        cursor = self._execute(
            f'UPDATE "{table}" SET {set_clause}{where}',  # noqa: S608
            list(values) + params,
            commit=True,
        )
        return cursor.rowcount

    def delete(self, table: str, clauses: Sequence[DbClause]) -> int:
        where, params = _where(clauses)
        cursor = self._execute(
            f'DELETE FROM "{table}"{where}', params, commit=True  # noqa: S608
        )
        return cursor.rowcount

    def close(self) -> None:
        if not self.closed:
            self.db.close()
            self.closed = True
