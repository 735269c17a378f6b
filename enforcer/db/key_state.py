"""Key state objects and lists.

A key state records which resource-record state one piece of DNSSEC key
material is in, plus when that state last changed, whether minimal
exposure applies, and the TTL in effect.

Usage::

    from enforcer.db import KeyState, KeyStateRRState, get_connection

    ks = KeyState(conn)
    ks.state = KeyStateRRState.RUMOURED
    ks.ttl = 3600
    ks.create()

Every failed operation raises a :class:`~enforcer.db.errors.DbError`
subclass and leaves the object exactly as it was before the call.
"""

from __future__ import annotations

import enum
from typing import Any, Iterator, Optional

from enforcer.db.errors import BindError, DbError, DbValidationError, NotFoundError
from enforcer.db.object import (
    ClauseOperator,
    DbClause,
    DbConnection,
    DbObject,
    DbObjectField,
    DbResult,
    DbResultList,
    DbType,
)
from enforcer.logging_utils import get_logger

logger = get_logger(__name__)


class KeyStateRRState(enum.IntEnum):
    INVALID = -1
    HIDDEN = 0
    RUMOURED = 1
    OMNIPRESENT = 2
    UNRETENTIVE = 3
    NA = 4


_RRSTATE_TEXT: dict[KeyStateRRState, str] = {
    KeyStateRRState.HIDDEN: "hidden",
    KeyStateRRState.RUMOURED: "rumoured",
    KeyStateRRState.OMNIPRESENT: "omnipresent",
    KeyStateRRState.UNRETENTIVE: "unretentive",
    KeyStateRRState.NA: "NA",
}
_TEXT_RRSTATE: dict[str, KeyStateRRState] = {v: k for k, v in _RRSTATE_TEXT.items()}


def rrstate_to_text(state: KeyStateRRState) -> str:
    """Return the text form of *state*.

    Raises:
        DbValidationError: For ``INVALID``, which has no text form.
    """
    try:
        return _RRSTATE_TEXT[state]
    except KeyError:
        raise DbValidationError(f"RR state {state!r} has no text form") from None


def rrstate_from_text(text: Optional[str]) -> KeyStateRRState:
    """Parse one of ``hidden``, ``rumoured``, ``omnipresent``, ``unretentive``, ``NA``.

    Matching is exact.  Anything else, including ``""`` and ``None``, raises
    :class:`DbValidationError`.
    """
    try:
        return _TEXT_RRSTATE[text]  # type: ignore[index]
    except (KeyError, TypeError):
        raise DbValidationError(f"Unknown RR state text: {text!r}") from None


KEY_STATE_TABLE = "keyState"

# Column order is the decode order used by KeyState.from_result().
KEY_STATE_FIELDS: tuple[DbObjectField, ...] = (
    DbObjectField("id", DbType.PRIMARY_KEY),
    DbObjectField("state", DbType.ENUM, KeyStateRRState),
    DbObjectField("lastChange", DbType.INT32),
    DbObjectField("minimize", DbType.INT32),
    DbObjectField("ttl", DbType.INT32),
)


def _check_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if not isinstance(value, int):
        raise DbValidationError(f"{name} must be an integer, got {value!r}")
    if not -(2**31) <= value < 2**31:
        raise DbValidationError(f"{name} {value} does not fit in 32 bits")
    return value


def _check_id(value: Any) -> int:
    """Validate a caller-supplied id before it reaches a query."""
    if isinstance(value, bool):
        raise DbValidationError(f"KeyState id must be an integer, got {value!r}")
    return _check_int("KeyState id", value)


# ---------------------------------------------------------------------------
# KeyState
# ---------------------------------------------------------------------------

class KeyState:
    """One row of the ``keyState`` table.

    A new or :meth:`reset` object is *fresh*: ``id`` is ``None``, ``state`` is
    ``INVALID`` and every other field is ``0``.  It becomes *populated* after
    :meth:`from_result`, :meth:`copy` or :meth:`get_by_id`.

    Raises:
        BindError: If the ``keyState`` table cannot be bound on *connection*.
    """

    def __init__(self, connection: Optional[DbConnection]) -> None:
        self._dbo: Optional[DbObject] = DbObject(
            connection, KEY_STATE_TABLE, KEY_STATE_FIELDS
        )
        self.reset()

    @classmethod
    def _bound_to(cls, dbo: DbObject) -> KeyState:
        key_state = cls.__new__(cls)
        key_state._dbo = dbo
        key_state.reset()
        return key_state

    def __repr__(self) -> str:
        return (
            f"KeyState(id={self._id!r}, state={self._state.name}, "
            f"last_change={self._last_change}, minimize={self._minimize}, "
            f"ttl={self._ttl})"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def free(self) -> None:
        """Release the storage descriptor.  Does not touch the database."""
        self._dbo = None

    def reset(self) -> None:
        """Make the object fresh again.  Does not touch the database."""
        self._id: Optional[int] = None
        self._state = KeyStateRRState.INVALID
        self._last_change = 0
        self._minimize = 0
        self._ttl = 0

    def copy(self, other: KeyState) -> None:
        """Copy every scalar field of *other* into this object.

        The storage descriptor of this object is left as it is.
        """
        if not isinstance(other, KeyState):
            raise DbValidationError(f"Cannot copy from {type(other).__name__}")
        self._id = other._id
        self._state = other._state
        self._last_change = other._last_change
        self._minimize = other._minimize
        self._ttl = other._ttl

    def from_result(self, result: DbResult) -> None:
        """Populate from a row laid out as :data:`KEY_STATE_FIELDS`.

        Every column is decoded before any field is assigned, so a malformed
        row leaves the object unchanged.

        Raises:
            DbValidationError: Wrong number of columns, a non-integer value,
                or a state code outside :class:`KeyStateRRState`.
        """
        if not isinstance(result, DbResult):
            raise DbValidationError(f"Cannot decode {type(result).__name__}")
        if len(result) != len(KEY_STATE_FIELDS):
            raise DbValidationError(
                f"keyState row must have {len(KEY_STATE_FIELDS)} columns, "
                f"got {len(result)}"
            )

        object_id, state, last_change, minimize, ttl = [
            result.get_field(index, field)
            for index, field in enumerate(KEY_STATE_FIELDS)
        ]

        self._id = object_id
        self._state = KeyStateRRState(state)
        self._last_change = last_change
        self._minimize = minimize
        self._ttl = ttl

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "state": self._state,
            "last_change": self._last_change,
            "minimize": self._minimize,
            "ttl": self._ttl,
        }

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------
    @property
    def id(self) -> Optional[int]:
        """Storage identity; ``None`` until created or fetched."""
        return self._id

    @property
    def state(self) -> KeyStateRRState:
        return self._state

    @state.setter
    def state(self, state: KeyStateRRState) -> None:
        # INVALID is accepted and clears the state.
        if isinstance(state, bool) or not isinstance(state, int):
            raise DbValidationError(f"RR state must be a KeyStateRRState, got {state!r}")
        try:
            self._state = KeyStateRRState(state)
        except ValueError:
            raise DbValidationError(f"Unknown RR state: {state!r}") from None

    @property
    def state_text(self) -> str:
        """Text form of :attr:`state`; raises for ``INVALID``."""
        return rrstate_to_text(self._state)

    @state_text.setter
    def state_text(self, text: str) -> None:
        self._state = rrstate_from_text(text)

    @property
    def last_change(self) -> int:
        return self._last_change

    @last_change.setter
    def last_change(self, last_change: int) -> None:
        self._last_change = _check_int("last_change", last_change)

    @property
    def minimize(self) -> int:
        return self._minimize

    @minimize.setter
    def minimize(self, minimize: int) -> None:
        self._minimize = _check_int("minimize", minimize)

    @property
    def ttl(self) -> int:
        return self._ttl

    @ttl.setter
    def ttl(self, ttl: int) -> None:
        self._ttl = _check_int("ttl", ttl)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def _require_dbo(self) -> DbObject:
        if self._dbo is None:
            raise BindError("KeyState is not bound to a storage descriptor")
        return self._dbo

    def _require_id(self) -> int:
        if self._id is None:
            raise DbValidationError("KeyState has no id")
        return self._id

    def _values(self) -> list[int]:
        if self._state is KeyStateRRState.INVALID:
            raise DbValidationError("KeyState with an INVALID state cannot be stored")
        return [int(self._state), self._last_change, self._minimize, self._ttl]

    def create(self) -> None:
        """Insert this key state as a new row and take the assigned id.

        Raises:
            DbValidationError: If the object already has an id or its state
                is ``INVALID``.
        """
        dbo = self._require_dbo()
        if self._id is not None:
            raise DbValidationError(f"KeyState already created with id {self._id}")
        self._id = dbo.create(self._values())
        logger.debug("Created key state %d (%s)", self._id, self._state.name)

    def get_by_id(self, object_id: int) -> None:
        """Load the row whose id is *object_id* into this object.

        Raises:
            DbValidationError: If *object_id* is not a 32-bit integer.
            NotFoundError: If no row matches.
            DbError: If more than one row matches.
        """
        dbo = self._require_dbo()
        results = dbo.read([DbClause("id", _check_id(object_id))])
        if len(results) == 0:
            raise NotFoundError(f"KeyState not found: {object_id!r}")
        if len(results) > 1:
            raise DbError(f"KeyState id {object_id!r} matched {len(results)} rows")
        self.from_result(results.begin())

    def update(self) -> None:
        """Write every field back to the row identified by :attr:`id`."""
        dbo = self._require_dbo()
        dbo.update(self._require_id(), self._values())
        logger.debug("Updated key state %d (%s)", self._id, self._state.name)

    def delete(self) -> None:
        """Remove the row identified by :attr:`id`.  The object keeps its fields."""
        dbo = self._require_dbo()
        dbo.delete(self._require_id())
        logger.debug("Deleted key state %d", self._id)


# ---------------------------------------------------------------------------
# KeyStateList
# ---------------------------------------------------------------------------

class KeyStateList:
    """A forward-only cursor over key states fetched in one query.

    ``begin()`` and ``next()`` each decode the row they land on into a new
    :class:`KeyState`, so objects handed out stay valid after the cursor
    moves on.
    """

    def __init__(self, connection: Optional[DbConnection]) -> None:
        self._dbo: Optional[DbObject] = DbObject(
            connection, KEY_STATE_TABLE, KEY_STATE_FIELDS
        )
        self._result_list = DbResultList()
        self._started = False

    def __len__(self) -> int:
        return len(self._result_list)

    def __iter__(self) -> Iterator[KeyState]:
        key_state = self.begin()
        while key_state is not None:
            yield key_state
            key_state = self.next()

    def _require_dbo(self) -> DbObject:
        if self._dbo is None:
            raise BindError("KeyStateList is not bound to a storage descriptor")
        return self._dbo

    def _clear(self) -> None:
        self._result_list = DbResultList()
        self._started = False

    def _fetch(self, clauses: list[DbClause]) -> None:
        dbo = self._require_dbo()
        self._clear()
        self._result_list = dbo.read(clauses)

    def get_4_by_id(self, id1: int, id2: int, id3: int, id4: int) -> None:
        """Fetch the key states whose id is any of the four given."""
        self.get_by_ids(id1, id2, id3, id4)

    def get_by_ids(self, *ids: int) -> None:
        """Fetch the key states whose id is in *ids*.

        Ids with no row are skipped; duplicates are returned once.  Rows come
        back in storage order, not argument order.

        Raises:
            DbValidationError: If any id is not a 32-bit integer.  The list
                is left empty.
        """
        self._clear()
        checked = tuple(_check_id(object_id) for object_id in ids)
        self._fetch([DbClause("id", checked, ClauseOperator.IN)])
        logger.debug("Fetched %d of %d requested key states", len(self), len(set(ids)))

    def get_all(self) -> None:
        """Fetch every key state."""
        self._fetch([])

    def _decode(self, result: Optional[DbResult]) -> Optional[KeyState]:
        if result is None:
            return None
        key_state = KeyState._bound_to(self._require_dbo())
        key_state.from_result(result)
        return key_state

    def begin(self) -> Optional[KeyState]:
        """Rewind and return the first key state, or ``None`` if there are none."""
        self._started = True
        return self._decode(self._result_list.begin())

    def next(self) -> Optional[KeyState]:
        """Advance and return the next key state, or ``None`` past the end.

        Calling ``next()`` before ``begin()`` behaves like ``begin()``.
        """
        if not self._started:
            return self.begin()
        return self._decode(self._result_list.next())

    def free(self) -> None:
        """Drop the fetched rows and release the storage descriptor."""
        self._clear()
        self._dbo = None
