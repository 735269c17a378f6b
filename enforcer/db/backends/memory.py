"""Dict-backed backend, mainly for tests and dry runs.

Each table is a ``{id: {column: value}}`` mapping with an auto-increment
counter.  Rows are copied in and out so callers never share state with the
store.
"""

from __future__ import annotations

from typing import Any, Sequence

from enforcer.db.errors import StorageError
from enforcer.db.object import DbClause, DbConnection
from enforcer.db.schema import TABLES


class InMemoryConnection(DbConnection):
    def __init__(self) -> None:
        self.tables: dict[str, dict[int, dict[str, Any]]] = {}
        self._next_id: dict[str, int] = {}
        self.closed = False

    def _table(self, table: str) -> dict[int, dict[str, Any]]:
        if self.closed:
            raise StorageError("connection is closed")
        try:
            return self.tables[table]
        except KeyError:
            raise StorageError(f"no such table: {table}") from None

    def _matching(self, table: str, clauses: Sequence[DbClause]) -> list[int]:
        rows = self._table(table)
        return sorted(
            row_id
            for row_id, row in rows.items()
            if all(clause.matches(row) for clause in clauses)
        )

    def init_schema(self) -> None:
        for name in TABLES:
            self.tables.setdefault(name, {})
            self._next_id.setdefault(name, 1)

    def has_table(self, table: str) -> bool:
        return table in self.tables

    def create(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> int:
        rows = self._table(table)
        unknown = set(columns) - set(TABLES[table])
        if unknown:
            raise StorageError(f"table {table} has no column(s) {sorted(unknown)}")
        new_id = self._next_id[table]
        self._next_id[table] = new_id + 1
        row = dict.fromkeys(TABLES[table])
        row.update(zip(columns, values))
        row["id"] = new_id
        rows[new_id] = row
        return new_id

    def read(
        self, table: str, columns: Sequence[str], clauses: Sequence[DbClause]
    ) -> list[tuple[Any, ...]]:
        rows = self._table(table)
        return [
            tuple(rows[row_id][c] for c in columns)
            for row_id in self._matching(table, clauses)
        ]

    def update(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        clauses: Sequence[DbClause],
    ) -> int:
        rows = self._table(table)
        matched = self._matching(table, clauses)
        for row_id in matched:
            rows[row_id].update(zip(columns, values))
        return len(matched)

    def delete(self, table: str, clauses: Sequence[DbClause]) -> int:
        rows = self._table(table)
        matched = self._matching(table, clauses)
        for row_id in matched:
            del rows[row_id]
        return len(matched)

    def close(self) -> None:
        self.closed = True
