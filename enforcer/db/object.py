"""Entity-agnostic storage abstraction.

Entity modules (see :mod:`enforcer.db.key_state`) never build SQL.  They
describe their columns with :class:`DbObjectField`, bind a :class:`DbObject`
to a :class:`DbConnection`, and get back positional :class:`DbResult` rows.

Usage::

    from enforcer.db.object import DbObject, DbObjectField, DbType

    dbo = DbObject(conn, "keyState", [DbObjectField("id", DbType.PRIMARY_KEY), ...])
    rows = dbo.read([DbClause("id", 1)])
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence

from enforcer.db.errors import BindError, DbValidationError, NotFoundError
from enforcer.logging_utils import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Field / clause descriptions
# ---------------------------------------------------------------------------

class DbType(enum.Enum):
    PRIMARY_KEY = "primary_key"
    INT32 = "int32"
    ENUM = "enum"


_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


@dataclass(frozen=True)
class DbObjectField:
    name: str
    type: DbType
    enum_type: Optional[type[enum.IntEnum]] = None


class ClauseOperator(enum.Enum):
    EQUAL = "="
    IN = "IN"


@dataclass(frozen=True)
class DbClause:
    """A single ``column <op> value`` filter.  Clauses in a list are ANDed."""

    column: str
    value: Any
    operator: ClauseOperator = ClauseOperator.EQUAL

    def matches(self, row: dict[str, Any]) -> bool:
        """Evaluate the clause against a column-name → value mapping."""
        actual = row.get(self.column)
        if self.operator is ClauseOperator.IN:
            return actual in self.value
        return actual == self.value


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class DbResult:
    """One positional row, with typed extraction by column index."""

    def __init__(self, values: Sequence[Any]) -> None:
        self._values = tuple(values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"DbResult{self._values!r}"

    def _raw(self, index: int) -> Any:
        if index < 0 or index >= len(self._values):
            raise DbValidationError(
                f"Column {index} out of range for a row of {len(self._values)} values"
            )
        return self._values[index]

    def get_int(self, index: int) -> int:
        value = self._raw(index)
        # bool is an int subclass but never a legitimate stored integer
        if isinstance(value, bool) or not isinstance(value, int):
            raise DbValidationError(
                f"Column {index}: expected an integer, got {value!r}"
            )
        if not _INT32_MIN <= value <= _INT32_MAX:
            raise DbValidationError(f"Column {index}: {value} does not fit in 32 bits")
        return value

    def get_primary_key(self, index: int) -> int:
        value = self.get_int(index)
        if value <= 0:
            raise DbValidationError(f"Column {index}: invalid primary key {value}")
        return value

    def get_enum(self, index: int, enum_type: type[enum.IntEnum]) -> enum.IntEnum:
        """Decode an integer code into *enum_type*; unknown codes are rejected."""
        code = self.get_int(index)
        try:
            return enum_type(code)
        except ValueError:
            raise DbValidationError(
                f"Column {index}: {code} is not a valid {enum_type.__name__}"
            ) from None

    def get_field(self, index: int, field: DbObjectField) -> Any:
        """Extract column *index* with the getter matching ``field.type``."""
        if field.type is DbType.PRIMARY_KEY:
            return self.get_primary_key(index)
        if field.type is DbType.ENUM:
            if field.enum_type is None:
                raise DbValidationError(f"Field {field.name!r} has no enum type")
            return self.get_enum(index, field.enum_type)
        return self.get_int(index)


class DbResultList:
    """An ordered row-set with a forward-only cursor.

    ``begin()`` rewinds to the first row; ``next()`` advances.  Once the end
    has been reached ``next()`` keeps returning ``None``.
    """

    def __init__(self, results: Sequence[DbResult] = ()) -> None:
        self._results = list(results)
        self._position = -1

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[DbResult]:
        return iter(self._results)

    def begin(self) -> Optional[DbResult]:
        self._position = 0
        return self._current()

    def next(self) -> Optional[DbResult]:
        if self._position < len(self._results):
            self._position += 1
        return self._current()

    def _current(self) -> Optional[DbResult]:
        if 0 <= self._position < len(self._results):
            return self._results[self._position]
        return None


# ---------------------------------------------------------------------------
# Backend interface
# ---------------------------------------------------------------------------

class DbConnection(ABC):
    """Narrow interface every storage backend implements.

    Rows are exchanged as plain tuples in the column order the caller asks
    for; ``read`` returns them ordered by the table's ``id`` column.  Backend
    failures are raised as :class:`~enforcer.db.errors.StorageError`.
    """

    closed: bool = False

    @abstractmethod
    def init_schema(self) -> None: ...

    @abstractmethod
    def has_table(self, table: str) -> bool: ...

    @abstractmethod
    def create(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> int:
        """Insert a row and return the identity assigned to it."""

    @abstractmethod
    def read(
        self, table: str, columns: Sequence[str], clauses: Sequence[DbClause]
    ) -> list[tuple[Any, ...]]: ...

    @abstractmethod
    def update(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        clauses: Sequence[DbClause],
    ) -> int:
        """Update matching rows and return how many were affected."""

    @abstractmethod
    def delete(self, table: str, clauses: Sequence[DbClause]) -> int:
        """Delete matching rows and return how many were affected."""

    @abstractmethod
    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Storage descriptor
# ---------------------------------------------------------------------------

class DbObject:
    """A storage descriptor: one entity table bound to one connection.

    The first field must be the primary key; the remaining fields are the
    values written by :meth:`create` and :meth:`update`.

    Raises:
        BindError: If *connection* is missing or closed, or does not know
            *table*.
    """

    def __init__(
        self,
        connection: Optional[DbConnection],
        table: str,
        fields: Sequence[DbObjectField],
    ) -> None:
        if connection is None or connection.closed:
            raise BindError(f"Cannot bind {table!r}: no open connection")
        if not fields or fields[0].type is not DbType.PRIMARY_KEY:
            raise BindError(f"Cannot bind {table!r}: first field must be the primary key")
        if not connection.has_table(table):
            raise BindError(f"Cannot bind {table!r}: unknown table")

        self.connection = connection
        self.table = table
        self.fields = tuple(fields)

    @property
    def primary_key(self) -> str:
        return self.fields[0].name

    @property
    def columns(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def value_columns(self) -> list[str]:
        return [f.name for f in self.fields[1:]]

    def _check_values(self, values: Sequence[Any]) -> None:
        if len(values) != len(self.fields) - 1:
            raise DbValidationError(
                f"{self.table}: expected {len(self.fields) - 1} values, got {len(values)}"
            )

    def create(self, values: Sequence[Any]) -> int:
        """Insert *values* (every field but the primary key); return the new id."""
        self._check_values(values)
        new_id = self.connection.create(self.table, self.value_columns, values)
        logger.debug("%s: created row %d", self.table, new_id)
        return new_id

    def read(self, clauses: Sequence[DbClause] = ()) -> DbResultList:
        rows = self.connection.read(self.table, self.columns, clauses)
        logger.debug("%s: read %d row(s)", self.table, len(rows))
        return DbResultList([DbResult(row) for row in rows])

    def update(self, object_id: int, values: Sequence[Any]) -> None:
        """Overwrite every non-key field of row *object_id*.

        Raises:
            NotFoundError: If no row has that id.
        """
        self._check_values(values)
        affected = self.connection.update(
            self.table,
            self.value_columns,
            values,
            [DbClause(self.primary_key, object_id)],
        )
        if affected == 0:
            raise NotFoundError(f"{self.table} not found: {object_id!r}")
        logger.debug("%s: updated row %d", self.table, object_id)

    def delete(self, object_id: int) -> None:
        """Remove row *object_id*.

        Raises:
            NotFoundError: If no row has that id.
        """
        affected = self.connection.delete(
            self.table, [DbClause(self.primary_key, object_id)]
        )
        if affected == 0:
            raise NotFoundError(f"{self.table} not found: {object_id!r}")
        logger.debug("%s: deleted row %d", self.table, object_id)
