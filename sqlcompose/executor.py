"""
=======================================
Statement execution through SQLAlchemy.
=======================================

Runs builders against a database and maps result rows onto caller types.

Statements are rendered with ``build_named()`` and the ``@name`` markers
are turned into SQLAlchemy ``:name`` binds for ``text()``, so the driver's
own parameter style never leaks into the builders.

Classes:
    Database: execute / fetch_one / fetch_all over a SQLAlchemy Engine
    RowMapper: explicit (column, field) mapping from a row to an object

Example:
    >>> from dataclasses import dataclass
    >>> from sqlcompose.executor import Database, RowMapper
    >>> from sqlcompose.predicates import Eq
    >>> from sqlcompose.query_builder import select
    >>>
    >>> @dataclass
    ... class User:
    ...     uuid: str
    ...     display_name: str
    >>>
    >>> users = RowMapper(User, [("uuid", "uuid"), ("name", "display_name")])
    >>> db = Database.from_config()
    >>> user = db.fetch_one(select("uuid", "name").from_("users").where(Eq("uuid", uid)), users)
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from core.config import config
from core.logger import get_logger
from sqlcompose.bridge import NAMED_PARAM_RE
from sqlcompose.debug import inline_args
from sqlcompose.errors import NotFoundError, QueryExecutionError
from sqlcompose.query_builder import StatementBuilder
from utils.database_utils import create_sqlalchemy_engine

logger = get_logger(__name__)

# A colon that text() would read as the start of a bind parameter
_BARE_COLON_RE = re.compile(r"(?<![:\w\\]):(?=\w)")

RowFactory = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class RowMapper:
    """Build an object from a result row using an explicit column mapping.

    Attributes:
        factory: Callable receiving the mapped values as keyword arguments
        fields: Ordered ``(column, field)`` pairs; when None every column is
            passed under its own name

    Columns not listed in ``fields`` are discarded.
    """

    factory: Callable[..., Any]
    fields: Optional[Sequence[Tuple[str, str]]] = None

    def __call__(self, row: Mapping[str, Any]) -> Any:
        if self.fields is None:
            return self.factory(**dict(row))

        values = {}
        for column, field in self.fields:
            if column not in row:
                raise QueryExecutionError(
                    f"Result has no column {column!r} for field {field!r}; "
                    f"columns are {', '.join(row.keys())}"
                )
            values[field] = row[column]
        return self.factory(**values)


def to_bind_sql(sql: str, args: Mapping[str, Any]) -> str:
    """
    Convert ``@name`` markers into SQLAlchemy ``:name`` binds.

    Only names present in ``args`` are converted. Colons already present
    in the text that SQLAlchemy would mistake for binds are escaped first;
    ``::`` casts are left alone. A bind directly followed by a cast is
    parenthesized, so ``@p1::uuid`` becomes ``(:p1)::uuid``.

    Args:
        sql: SQL text rendered with named markers
        args: Bound values keyed by marker name

    Returns:
        SQL text suitable for ``sqlalchemy.text()``
    """
    def _bind(match: "re.Match") -> str:
        if match.group(1) not in args:
            return match.group(0)
        # text() ignores a bind followed by a colon, as in @p1::uuid
        if match.string.startswith(":", match.end()):
            return f"(:{match.group(1)})"
        return f":{match.group(1)}"

    escaped = _BARE_COLON_RE.sub(r"\\:", sql)
    return NAMED_PARAM_RE.sub(_bind, escaped)


class Database:
    """Execute statement builders on a SQLAlchemy engine.

    Each call runs in its own transaction (``engine.begin()``), so INSERT /
    UPDATE / DELETE with RETURNING can be read through ``fetch_one`` and
    ``fetch_all`` and are committed on success.

    Attributes:
        engine: SQLAlchemy Engine used for every call
        echo_sql: Log each statement at DEBUG with its values inlined
    """

    def __init__(self, engine: Engine, echo_sql: Optional[bool] = None):
        self.engine = engine
        self.echo_sql = config.echo_sql if echo_sql is None else echo_sql

    @classmethod
    def from_config(cls, **engine_options: Any) -> "Database":
        """Create a Database from ``core.config`` settings.

        Args:
            **engine_options: Overrides passed to create_sqlalchemy_engine

        Returns:
            Database bound to a new engine
        """
        return cls(create_sqlalchemy_engine(**engine_options))

    def _prepare(self, builder: StatementBuilder) -> Tuple[TextClause, Dict[str, Any]]:
        sql, args = builder.build_named()
        if self.echo_sql:
            logger.debug(f"Executing: {inline_args(sql, args)}")
        return text(to_bind_sql(sql, args)), args

    def execute(self, builder: StatementBuilder) -> int:
        """
        Execute a statement that returns no rows of interest.

        Args:
            builder: INSERT, UPDATE, DELETE or any other statement builder

        Returns:
            Number of rows affected as reported by the driver

        Raises:
            QueryExecutionError: If the database rejects the statement
        """
        statement, args = self._prepare(builder)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement, args)
                return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Statement failed: {e}")
            raise QueryExecutionError(f"Statement failed: {e}") from e

    def fetch_all(self, builder: StatementBuilder, mapper: Optional[RowFactory] = None) -> List[Any]:
        """
        Execute a query and map every row.

        Args:
            builder: Statement producing rows
            mapper: Row factory such as a RowMapper; rows are returned as
                dicts when omitted

        Returns:
            List of mapped rows, possibly empty

        Raises:
            QueryExecutionError: If the database rejects the statement
        """
        mapper = mapper or dict
        statement, args = self._prepare(builder)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement, args)
                return [mapper(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            logger.error(f"Query failed: {e}")
            raise QueryExecutionError(f"Query failed: {e}") from e

    def fetch_one(self, builder: StatementBuilder, mapper: Optional[RowFactory] = None) -> Any:
        """
        Execute a query and map its first row.

        Args:
            builder: Statement producing rows
            mapper: Row factory such as a RowMapper; the row is returned as
                a dict when omitted

        Returns:
            The first mapped row

        Raises:
            NotFoundError: If the query returned no rows
            QueryExecutionError: If the database rejects the statement
        """
        mapper = mapper or dict
        statement, args = self._prepare(builder)
        try:
            with self.engine.begin() as conn:
                row = conn.execute(statement, args).mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"Query failed: {e}")
            raise QueryExecutionError(f"Query failed: {e}") from e

        if row is None:
            raise NotFoundError(f"No rows returned by: {statement.text}")
        return mapper(row)
