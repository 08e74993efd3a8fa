"""
Generic table access.

A ``Table`` describes one relational table: its name and an ordered list
of ``Column`` descriptors, one or more of which form the primary key.
An ``EntityStore`` bound to a table and an open connection translates
entities (plain ``dict`` objects keyed by column name) into
parameterized SQL and back.  A missing key in an entity is the same as
``None``.

The store never caches: every call goes to the database.  Each write
statement is committed on its own.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..core.errors import DatabaseOperationError, NotFoundError


logger = logging.getLogger(__name__)

Entity = Dict[str, Any]


@dataclass(frozen=True)
class Column:
    """Descriptor of a single scalar column."""

    name: str
    type: type = str
    primary_key: bool = False
    auto_increment: bool = False

    def coerce(self, value: Any) -> Any:
        if value is None or isinstance(value, self.type):
            return value
        # numbers bind as they are; only text is converted
        if self.type in (int, float) and isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        return self.type(value)


@dataclass(frozen=True)
class Table:
    """Name and ordered columns of a table."""

    name: str
    columns: Tuple[Column, ...]
    _by_name: Dict[str, Column] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_name", {c.name: c for c in self.columns})
        if not self.primary_key:
            raise ValueError(f"Table {self.name} has no primary key column")

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def primary_key(self) -> List[Column]:
        return [c for c in self.columns if c.primary_key]

    @property
    def non_key_columns(self) -> List[Column]:
        return [c for c in self.columns if not c.primary_key]

    def column(self, name: str) -> Column:
        try:
            return self._by_name[name]
        except KeyError:
            raise ValueError(f"Unknown column {name!r} for table {self.name}") from None


def quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def like_literal(value: str) -> str:
    """Render ``%value%`` as an SQL string literal matching ``value`` as a substring.

    Wildcards inside ``value`` are escaped with a backslash, which the
    caller must declare with ``ESCAPE '\\'``.
    """
    escaped = (
        str(value)
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
        .replace("'", "''")
    )
    return f"'%{escaped}%'"


class EntityStore:
    """Data access object for a single table.

    Parameters
    ----------
    conn : sqlite3.Connection
        Open connection owned by the caller.  The store never closes it.
    table : Table
        Description of the table this store reads and writes.
    """

    def __init__(self, conn: sqlite3.Connection, table: Table):
        self.conn = conn
        self.table = table
        self._fields = ", ".join(
            f"{quote(table.name)}.{quote(c.name)}" for c in table.columns
        )

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, tuple(params))
        except sqlite3.Error as e:
            logger.exception("Query on %s failed: %s", self.table.name, sql)
            raise DatabaseOperationError() from e

    def _write(self, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
        try:
            cursor = self.conn.execute(sql, tuple(params))
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.exception("Write on %s failed: %s", self.table.name, sql)
            raise DatabaseOperationError() from e
        logger.debug("%s -> %s row(s)", sql, cursor.rowcount)
        return cursor

    def _fetch(self, sql: str, params: Sequence[Any] = ()) -> List[Entity]:
        rows = self._execute(sql, params).fetchall()
        return [self._to_entity(row) for row in rows]

    def _to_entity(self, row: Any) -> Entity:
        # SELECT lists the columns in table order
        return dict(zip(self.table.column_names, tuple(row)))

    def _key_values(self, key: Any) -> Optional[Tuple[Any, ...]]:
        pk = self.table.primary_key
        values = tuple(key) if isinstance(key, (tuple, list)) else (key,)
        if len(values) != len(pk):
            raise ValueError(
                f"{self.table.name} primary key has {len(pk)} column(s), got {len(values)} value(s)"
            )
        if any(v is None for v in values):
            return None
        return tuple(c.coerce(v) for c, v in zip(pk, values))

    def _entity_key(self, entity: Mapping[str, Any]) -> Tuple[Any, ...]:
        return tuple(entity.get(c.name) for c in self.table.primary_key)

    def _key_clause(self) -> str:
        return " AND ".join(f"{quote(c.name)} = ?" for c in self.table.primary_key)

    def _check_columns(self, names: Iterable[str]) -> None:
        for name in names:
            self.table.column(name)

    def _order_clause(self, order_by: Optional[str], direction: str) -> str:
        if order_by is None:
            return ""
        self.table.column(order_by)
        return f" ORDER BY {quote(order_by)} {'DESC' if str(direction).upper() == 'DESC' else 'ASC'}"

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def save(self, entity: Entity) -> int:
        """Insert or update ``entity``; returns the number of affected rows.

        If a row with the entity's primary key exists, every non-key
        column is updated.  Otherwise a new row is inserted and, when the
        key is an unset auto-increment column, the generated key is
        written back into ``entity``.
        """
        self._check_columns(entity.keys())
        if self.get_by_pk(self._entity_key(entity)) is not None:
            return self._update(entity)
        return self._create(entity)

    def _update(self, entity: Entity) -> int:
        columns = self.table.non_key_columns
        if not columns:
            # Nothing but key columns; the row already holds every value.
            return 0
        assignments = ", ".join(f"{quote(c.name)} = ?" for c in columns)
        sql = f"UPDATE {quote(self.table.name)} SET {assignments} WHERE {self._key_clause()}"
        params = [c.coerce(entity.get(c.name)) for c in columns]
        params.extend(self._key_values(self._entity_key(entity)))
        return self._write(sql, params).rowcount

    def _create(self, entity: Entity) -> int:
        columns = [
            c for c in self.table.columns
            if not (c.auto_increment and entity.get(c.name) is None)
        ]
        names = ", ".join(quote(c.name) for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {quote(self.table.name)} ({names}) VALUES ({placeholders})"
        cursor = self._write(sql, [c.coerce(entity.get(c.name)) for c in columns])
        if cursor.rowcount == 0:
            return 0
        for c in self.table.primary_key:
            if c.auto_increment and entity.get(c.name) is None:
                entity[c.name] = cursor.lastrowid
        return cursor.rowcount

    def get_by_pk(self, key: Any) -> Optional[Entity]:
        """Return the row whose primary key equals ``key``, or ``None``.

        Composite keys are given as a tuple in key-column order.  A key
        that is (or contains) ``None`` returns ``None`` without querying.
        """
        values = self._key_values(key)
        if values is None:
            return None
        sql = f"SELECT {self._fields} FROM {quote(self.table.name)} WHERE ({self._key_clause()}) LIMIT 1"
        row = self._execute(sql, values).fetchone()
        if row is None:
            return None
        return self._to_entity(row)

    def get_all(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        order_by: Optional[str] = None,
        direction: str = "ASC",
    ) -> List[Entity]:
        """Return every row of the table.

        ``page`` is 1-indexed and requires ``page_size``.  Without
        pagination the whole table is loaded into memory, so only use
        it on small tables.
        """
        sql = f"SELECT {self._fields} FROM {quote(self.table.name)}"
        sql += self._order_clause(order_by, direction)
        params: List[Any] = []
        if page is not None:
            if page_size is None:
                raise ValueError("page_size is required when page is given")
            sql += " LIMIT ? OFFSET ?"
            params.extend([int(page_size), (int(page) - 1) * int(page_size)])
        return self._fetch(sql, params)

    def search(
        self,
        example: Mapping[str, Any],
        order_by: Optional[str] = None,
        direction: str = "ASC",
        offset: int = 0,
        limit: Optional[int] = None,
        like: Optional[Mapping[str, str]] = None,
    ) -> List[Entity]:
        """Return the rows matching every non-null column of ``example``.

        Each entry of ``like`` maps a column to a substring that the
        column must contain (case-sensitive).  With no constraint at all
        this is ``get_all()`` without ordering or pagination.

        Example::

            store.search({"owner_id": 42}, order_by="name")
            store.search({}, like={"name": "Prep"})
        """
        self._check_columns(example.keys())
        clauses: List[str] = []
        params: List[Any] = []
        for c in self.table.columns:
            value = example.get(c.name)
            if value is not None:
                clauses.append(f"{quote(c.name)} = ?")
                params.append(c.coerce(value))
        for name, value in (like or {}).items():
            self.table.column(name)
            clauses.append(f"{quote(name)} LIKE {like_literal(value)} ESCAPE '\\'")
        if not clauses:
            return self.get_all()

        sql = f"SELECT {self._fields} FROM {quote(self.table.name)}"
        sql += " WHERE (" + " AND ".join(clauses) + ")"
        sql += self._order_clause(order_by, direction)
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([int(limit), int(offset)])
        return self._fetch(sql, params)

    def by_range(
        self,
        low: Mapping[str, Any],
        high: Mapping[str, Any],
        order_by: Optional[str] = None,
        direction: str = "ASC",
    ) -> List[Entity]:
        """Return the rows lying between two criteria entities.

        A column set in both entities must fall between the two values
        (in either order); a column set in only one must equal it; a
        column set in neither is not constrained.  When nothing is
        constrained every row is returned.
        """
        self._check_columns(low.keys())
        self._check_columns(high.keys())
        clauses: List[str] = []
        params: List[Any] = []
        for c in self.table.columns:
            a = c.coerce(low.get(c.name))
            b = c.coerce(high.get(c.name))
            if a is not None and b is not None:
                clauses.append(f"{quote(c.name)} BETWEEN ? AND ?")
                params.extend([min(a, b), max(a, b)])
            elif a is not None or b is not None:
                clauses.append(f"{quote(c.name)} = ?")
                params.append(b if a is None else a)
        if not clauses:
            return self.get_all(order_by=order_by, direction=direction)

        sql = f"SELECT {self._fields} FROM {quote(self.table.name)}"
        sql += " WHERE (" + " AND ".join(clauses) + ")"
        sql += self._order_clause(order_by, direction)
        return self._fetch(sql, params)

    def delete(self, entity: Mapping[str, Any]) -> int:
        """Delete the row with the entity's primary key.

        Raises ``NotFoundError`` if there is no such row.
        """
        values = self._key_values(self._entity_key(entity))
        if values is None or self.get_by_pk(values) is None:
            raise NotFoundError("Record not found", self.table.name)
        sql = f"DELETE FROM {quote(self.table.name)} WHERE {self._key_clause()}"
        return self._write(sql, values).rowcount
