"""
=========================
SELECT statement builder.
=========================

This module provides the fluent SELECT builder and the pieces shared by
every statement builder.

Builders:
- StatementBuilder: base class providing build() / build_named()
- SelectBuilder: SELECT with joins, WHERE, GROUP BY, HAVING, ORDER BY,
  LIMIT and OFFSET

Enumerations:
- JoinType: INNER, LEFT, RIGHT, FULL
- OrderDir: ASC, DESC

Placeholders are numbered by one cursor per build, threaded through the
clauses in the order they appear in the text: WHERE, HAVING, LIMIT,
OFFSET. Builders keep no cursor state, so build() can be called any
number of times with identical results.

Builders are mutable and unsynchronised: build them from one thread. Once
a builder is no longer mutated, build() may be called from any thread.

Usage:
    from sqlcompose.predicates import Eq, Gt
    from sqlcompose.query_builder import OrderDir, select

    query = (
        select("uuid", "name")
        .from_("alerts")
        .where(Eq("uuid", "abc-123"))
        .order_by("created", OrderDir.DESC)
        .limit(1)
    )
    sql, args = query.build()
    # SELECT uuid, name FROM alerts WHERE uuid = $1 ORDER BY created DESC LIMIT $2
    # ['abc-123', 1]

    sql, args = query.build_named()
    # SELECT uuid, name FROM alerts WHERE uuid = @p1 ORDER BY created DESC LIMIT @p2
    # {'p1': 'abc-123', 'p2': 1}
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from core.logger import get_logger
from sqlcompose.params import NAMED, POSITIONAL, Args, ParamStyle, StatementWriter
from sqlcompose.predicates import Predicate

logger = get_logger(__name__)


class JoinType(Enum):
    """Type of SQL JOIN and its rendering."""

    INNER = "INNER JOIN"
    LEFT = "LEFT JOIN"
    RIGHT = "RIGHT JOIN"
    FULL = "FULL JOIN"

    def __str__(self) -> str:
        return self.value


class OrderDir(Enum):
    """Sort direction for ORDER BY."""

    ASC = "ASC"
    DESC = "DESC"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Join:
    """A ``<type> <table> ON <left> = <right>`` clause."""

    join_type: JoinType
    table: str
    left: str
    right: str

    def __str__(self) -> str:
        return f"{self.join_type} {self.table} ON {self.left} = {self.right}"


@dataclass(frozen=True)
class OrderBy:
    """A single ORDER BY term."""

    column: str
    direction: OrderDir = OrderDir.ASC

    def __str__(self) -> str:
        return f"{self.column} {self.direction}"


class StatementBuilder(ABC):
    """Base class for statement builders.

    Subclasses implement ``_render`` against a fresh ``StatementWriter``;
    the writer owns the cursor and bound values for a single build.
    """

    @abstractmethod
    def _render(self, writer: StatementWriter) -> None:
        """Write the statement into ``writer``."""

    def build(self, style: ParamStyle = POSITIONAL) -> Tuple[str, Args]:
        """
        Render the statement.

        Args:
            style: Placeholder strategy; positional ``$n`` by default

        Returns:
            Tuple of (SQL text, list of values for positional style or
            dict of values for named style)
        """
        writer = StatementWriter(style)
        self._render(writer)
        sql, args = writer.result()
        logger.debug(f"Built {style.name} statement: {sql}")
        return sql, args

    def build_named(self) -> Tuple[str, Dict[str, Any]]:
        """Render the statement with ``@p1, @p2, ...`` markers and a dict of values."""
        return self.build(NAMED)

    def __str__(self) -> str:
        return self.build()[0]


class SelectBuilder(StatementBuilder):
    """Fluent SELECT builder. Create one with ``select()``."""

    def __init__(self, *columns: str):
        self._distinct = False
        self._columns: List[str] = list(columns)
        self._from: Optional[str] = None
        self._joins: List[Join] = []
        self._where: List[Predicate] = []
        self._group_by: List[str] = []
        self._having: List[Predicate] = []
        self._order_by: List[OrderBy] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    def distinct(self) -> "SelectBuilder":
        """Mark the query as SELECT DISTINCT."""
        self._distinct = True
        return self

    def from_(self, table: str) -> "SelectBuilder":
        """Set the source table; may carry an alias, e.g. ``"users u"``."""
        self._from = table
        return self

    def join(self, join_type: JoinType, table: str, left: str, right: str) -> "SelectBuilder":
        """Add a ``<join_type> table ON left = right`` clause."""
        self._joins.append(Join(join_type, table, left, right))
        return self

    def inner_join(self, table: str, left: str, right: str) -> "SelectBuilder":
        return self.join(JoinType.INNER, table, left, right)

    def left_join(self, table: str, left: str, right: str) -> "SelectBuilder":
        return self.join(JoinType.LEFT, table, left, right)

    def right_join(self, table: str, left: str, right: str) -> "SelectBuilder":
        return self.join(JoinType.RIGHT, table, left, right)

    def full_join(self, table: str, left: str, right: str) -> "SelectBuilder":
        return self.join(JoinType.FULL, table, left, right)

    def where(self, *predicates: Predicate) -> "SelectBuilder":
        """Append predicates to the WHERE clause (ANDed together)."""
        self._where.extend(predicates)
        return self

    def group_by(self, *columns: str) -> "SelectBuilder":
        self._group_by.extend(columns)
        return self

    def having(self, *predicates: Predicate) -> "SelectBuilder":
        """Append predicates to the HAVING clause (ANDed together)."""
        self._having.extend(predicates)
        return self

    def order_by(self, column: str, direction: Union[OrderDir, str] = OrderDir.ASC) -> "SelectBuilder":
        """
        Add an ORDER BY term.

        Args:
            column: Column or expression to sort by
            direction: OrderDir member, or ``"asc"`` / ``"desc"``
        """
        if isinstance(direction, str):
            direction = OrderDir(direction.upper())
        self._order_by.append(OrderBy(column, direction))
        return self

    def limit(self, n: int) -> "SelectBuilder":
        self._limit = n
        return self

    def offset(self, n: int) -> "SelectBuilder":
        self._offset = n
        return self

    def _render(self, writer: StatementWriter) -> None:
        select_keyword = "SELECT DISTINCT" if self._distinct else "SELECT"
        writer.write(f"{select_keyword} {', '.join(self._columns)}")

        if self._from:
            writer.write(f" FROM {self._from}")

        for join in self._joins:
            writer.write(f" {join}")

        writer.write_predicates("WHERE", self._where)

        if self._group_by:
            writer.write(f" GROUP BY {', '.join(self._group_by)}")

        writer.write_predicates("HAVING", self._having)

        if self._order_by:
            writer.write(f" ORDER BY {', '.join(str(term) for term in self._order_by)}")

        if self._limit is not None:
            writer.write(f" LIMIT {writer.bind(self._limit)}")

        if self._offset is not None:
            writer.write(f" OFFSET {writer.bind(self._offset)}")


def select(*columns: str) -> SelectBuilder:
    """
    Start a SELECT statement.

    Args:
        columns: Column list; use ``"*"`` for all columns

    Returns:
        A new SelectBuilder
    """
    return SelectBuilder(*columns)


def pagination(page: int, page_size: int) -> Dict[str, int]:
    """
    Calculate LIMIT and OFFSET for 1-based pagination.

    Args:
        page: Page number (1-based)
        page_size: Number of rows per page

    Returns:
        Dictionary with ``limit`` and ``offset`` values

    Raises:
        ValueError: If page or page_size is smaller than 1

    Example:
        >>> window = pagination(3, 20)
        >>> select("*").from_("logs").limit(window['limit']).offset(window['offset'])
    """
    if page < 1 or page_size < 1:
        raise ValueError(f"page and page_size must be >= 1, got page={page}, page_size={page_size}")
    return {
        'limit': page_size,
        'offset': (page - 1) * page_size
    }
