"""
==========================================
Data Manipulation Language (DML) builders.
==========================================

Fluent builders for INSERT, UPDATE and DELETE statements. They share the
placeholder engine with SELECT, so every value is bound, never inlined.

Builders:
- InsertBuilder: INSERT INTO ... VALUES ... [ON CONFLICT] [RETURNING]
- UpdateBuilder: UPDATE ... SET ... [WHERE] [RETURNING]
- DeleteBuilder: DELETE FROM ... [WHERE] [RETURNING]

Placeholder order:
- INSERT numbers VALUES row-major: left to right, then top to bottom
- UPDATE numbers the SET assignments first, then WHERE
- ON CONFLICT and RETURNING never carry parameters

Usage:
    from sqlcompose.dml import delete_from, insert_into, update
    from sqlcompose.predicates import Eq, Lt

    insert_sql, args = (
        insert_into("users")
        .columns("name", "email")
        .values("Alice", "a@x.com")
        .values("Bob", "b@x.com")
        .build()
    )
    # INSERT INTO users (name, email) VALUES ($1, $2), ($3, $4)

    update_sql, args = (
        update("users")
        .set("name", "Bob")
        .where(Eq("uuid", "abc-123"))
        .returning("uuid")
        .build()
    )
    # UPDATE users SET name = $1 WHERE uuid = $2 RETURNING uuid

    delete_sql, args = delete_from("sessions").where(Lt("expires_at", cutoff)).build()
"""

from typing import Any, List, Optional, Tuple

from sqlcompose.errors import QueryBuildError
from sqlcompose.params import StatementWriter
from sqlcompose.predicates import Predicate
from sqlcompose.query_builder import StatementBuilder


def _write_returning(writer: StatementWriter, columns: List[str]) -> None:
    if columns:
        writer.write(f" RETURNING {', '.join(columns)}")


class InsertBuilder(StatementBuilder):
    """Fluent INSERT builder. Create one with ``insert_into()``."""

    def __init__(self, table: str):
        self._table = table
        self._columns: List[str] = []
        self._rows: List[Tuple[Any, ...]] = []
        self._on_conflict: Optional[str] = None
        self._returning: List[str] = []

    def columns(self, *columns: str) -> "InsertBuilder":
        """Set the target column names."""
        self._columns = list(columns)
        return self

    def values(self, *values: Any) -> "InsertBuilder":
        """Add one row of values. Call repeatedly for a multi-row insert."""
        self._rows.append(tuple(values))
        return self

    def on_conflict(self, action: str) -> "InsertBuilder":
        """
        Append an ON CONFLICT clause after VALUES.

        Args:
            action: Clause body, e.g. ``"DO NOTHING"`` or
                ``"(email) DO UPDATE SET name = EXCLUDED.name"``
        """
        self._on_conflict = action
        return self

    def returning(self, *columns: str) -> "InsertBuilder":
        """Set the RETURNING clause (PostgreSQL extension)."""
        self._returning = list(columns)
        return self

    def _render(self, writer: StatementWriter) -> None:
        if not self._rows:
            raise QueryBuildError(f"INSERT INTO {self._table} has no VALUES rows")

        writer.write(f"INSERT INTO {self._table}")
        if self._columns:
            writer.write(f" ({', '.join(self._columns)})")

        row_sql = []
        for number, row in enumerate(self._rows, start=1):
            if self._columns and len(row) != len(self._columns):
                raise QueryBuildError(
                    f"INSERT INTO {self._table}: row {number} has {len(row)} value(s) "
                    f"for {len(self._columns)} column(s)"
                )
            markers = [writer.bind(value) for value in row]
            row_sql.append(f"({', '.join(markers)})")
        writer.write(f" VALUES {', '.join(row_sql)}")

        if self._on_conflict:
            writer.write(f" ON CONFLICT {self._on_conflict}")

        _write_returning(writer, self._returning)


class UpdateBuilder(StatementBuilder):
    """Fluent UPDATE builder. Create one with ``update()``."""

    def __init__(self, table: str):
        self._table = table
        self._assignments: List[Tuple[str, Any]] = []
        self._where: List[Predicate] = []
        self._returning: List[str] = []

    def set(self, column: str, value: Any) -> "UpdateBuilder":
        """Add a ``column = value`` assignment to the SET clause."""
        self._assignments.append((column, value))
        return self

    def where(self, *predicates: Predicate) -> "UpdateBuilder":
        """Append predicates to the WHERE clause (ANDed together)."""
        self._where.extend(predicates)
        return self

    def returning(self, *columns: str) -> "UpdateBuilder":
        """Set the RETURNING clause (PostgreSQL extension)."""
        self._returning = list(columns)
        return self

    def _render(self, writer: StatementWriter) -> None:
        if not self._assignments:
            raise QueryBuildError(f"UPDATE {self._table} has no SET assignments")

        assignments = [f"{column} = {writer.bind(value)}" for column, value in self._assignments]
        writer.write(f"UPDATE {self._table} SET {', '.join(assignments)}")
        writer.write_predicates("WHERE", self._where)
        _write_returning(writer, self._returning)


class DeleteBuilder(StatementBuilder):
    """Fluent DELETE builder. Create one with ``delete_from()``."""

    def __init__(self, table: str):
        self._table = table
        self._where: List[Predicate] = []
        self._returning: List[str] = []

    def where(self, *predicates: Predicate) -> "DeleteBuilder":
        """Append predicates to the WHERE clause (ANDed together)."""
        self._where.extend(predicates)
        return self

    def returning(self, *columns: str) -> "DeleteBuilder":
        """Set the RETURNING clause (PostgreSQL extension)."""
        self._returning = list(columns)
        return self

    def _render(self, writer: StatementWriter) -> None:
        writer.write(f"DELETE FROM {self._table}")
        writer.write_predicates("WHERE", self._where)
        _write_returning(writer, self._returning)


def insert_into(table: str) -> InsertBuilder:
    """Start an INSERT statement for ``table``."""
    return InsertBuilder(table)


def update(table: str) -> UpdateBuilder:
    """Start an UPDATE statement for ``table``."""
    return UpdateBuilder(table)


def delete_from(table: str) -> DeleteBuilder:
    """Start a DELETE statement for ``table``."""
    return DeleteBuilder(table)
