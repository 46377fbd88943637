"""
================================
Predicates for WHERE and HAVING.
================================

Each predicate is an immutable value object that renders itself as a SQL
fragment given the current cursor, and reports the values it binds plus
the advanced cursor. Rendering is pure: the same predicate rendered at
the same cursor with the same style always yields the same result, so
predicate trees can be shared freely between builders and threads.

Predicates:
- Comparison: Eq, Neq, Gt, Gte, Lt, Lte
- Pattern: Like, ILike
- Set and range: In, Between
- Null checks: IsNull, IsNotNull
- Logical combinators: And, Or, Not
- Escape hatch: Raw

Column names are trusted identifiers and are written as-is. Only values
travel through placeholders.

Usage:
    from sqlcompose.predicates import And, Eq, Gt, In, Or, Raw

    cond = And(Eq("a", 1), Or(Eq("b", 2), Eq("c", 3)))
    cond.to_sql()
    # Rendered(sql='(a = $1 AND (b = $2 OR c = $3))', args=[1, 2, 3], cursor=4)

    # Operators build the same trees
    cond = Eq("a", 1) & (Eq("b", 2) | Eq("c", 3))

    # Raw fragments are renumbered into the surrounding cursor space
    Raw("(sender_id = $1 OR receiver_id = $1)", 42).to_sql(3)
    # Rendered(sql='(sender_id = $3 OR receiver_id = $3)', args=[42], cursor=4)
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Sequence, Tuple

from sqlcompose.bridge import DOLLAR_QUOTED_PATTERN
from sqlcompose.errors import MalformedFragmentError
from sqlcompose.params import FIRST_POSITION, POSITIONAL, ParamStyle, Rendered

# Dollar-quoted strings are matched whole so their bodies are never renumbered
POSITIONAL_MARKER_RE = re.compile(
    DOLLAR_QUOTED_PATTERN + r"|\$(?:(?P<index>[0-9]+)(?!\w)|(?P<word>\w+))",
    re.DOTALL
)


class Predicate(ABC):
    """A SQL condition that renders itself with placeholders."""

    @abstractmethod
    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        """
        Render the predicate starting at ``cursor``.

        Args:
            cursor: Next free placeholder position
            style: Placeholder strategy (positional or named)

        Returns:
            Rendered fragment, contributed values and advanced cursor
        """

    def __and__(self, other: "Predicate") -> "And":
        return And(self, other)

    def __or__(self, other: "Predicate") -> "Or":
        return Or(self, other)

    def __invert__(self) -> "Not":
        return Not(self)


# --- comparison and pattern predicates ---

@dataclass(frozen=True)
class _Comparison(Predicate):
    column: str
    value: Any

    operator: ClassVar[str] = ""

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        args = style.new_args()
        style.bind(args, cursor, self.value)
        return Rendered(f"{self.column} {self.operator} {style.marker(cursor)}", args, cursor + 1)


@dataclass(frozen=True)
class Eq(_Comparison):
    """``column = value``"""
    operator: ClassVar[str] = "="


@dataclass(frozen=True)
class Neq(_Comparison):
    """``column != value``"""
    operator: ClassVar[str] = "!="


@dataclass(frozen=True)
class Gt(_Comparison):
    """``column > value``"""
    operator: ClassVar[str] = ">"


@dataclass(frozen=True)
class Gte(_Comparison):
    """``column >= value``"""
    operator: ClassVar[str] = ">="


@dataclass(frozen=True)
class Lt(_Comparison):
    """``column < value``"""
    operator: ClassVar[str] = "<"


@dataclass(frozen=True)
class Lte(_Comparison):
    """``column <= value``"""
    operator: ClassVar[str] = "<="


@dataclass(frozen=True)
class Like(_Comparison):
    """``column LIKE pattern``"""
    operator: ClassVar[str] = "LIKE"


@dataclass(frozen=True)
class ILike(_Comparison):
    """``column ILIKE pattern`` (case-insensitive, PostgreSQL extension)."""
    operator: ClassVar[str] = "ILIKE"


# --- set and range predicates ---

@dataclass(frozen=True, init=False)
class In(Predicate):
    """
    ``column IN (v1, v2, ...)``, one placeholder per value.

    With no values this renders ``column IN ()``, which PostgreSQL treats
    as always false. It is not guarded; callers with possibly empty value
    lists should handle that case themselves.
    """

    column: str
    values: Tuple[Any, ...]

    def __init__(self, column: str, *values: Any):
        object.__setattr__(self, "column", column)
        object.__setattr__(self, "values", tuple(values))

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        args = style.new_args()
        markers = []
        for position, value in enumerate(self.values, start=cursor):
            style.bind(args, position, value)
            markers.append(style.marker(position))
        return Rendered(f"{self.column} IN ({', '.join(markers)})", args, cursor + len(self.values))


@dataclass(frozen=True)
class Between(Predicate):
    """``column BETWEEN low AND high``; low binds before high."""

    column: str
    low: Any
    high: Any

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        args = style.new_args()
        style.bind(args, cursor, self.low)
        style.bind(args, cursor + 1, self.high)
        sql = f"{self.column} BETWEEN {style.marker(cursor)} AND {style.marker(cursor + 1)}"
        return Rendered(sql, args, cursor + 2)


# --- null predicates ---

@dataclass(frozen=True)
class IsNull(Predicate):
    """``column IS NULL``"""

    column: str

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        return Rendered(f"{self.column} IS NULL", style.new_args(), cursor)


@dataclass(frozen=True)
class IsNotNull(Predicate):
    """``column IS NOT NULL``"""

    column: str

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        return Rendered(f"{self.column} IS NOT NULL", style.new_args(), cursor)


# --- logical combinators ---

def combine_predicates(
    predicates: Sequence[Predicate],
    operator: str,
    cursor: int,
    style: ParamStyle
) -> Rendered:
    """
    Join predicates with ``operator``, threading the cursor left to right.

    No predicates render as an empty string. A single predicate renders
    exactly as itself. Two or more are wrapped in one pair of parentheses.

    Args:
        predicates: Child predicates in declaration order
        operator: ``AND`` or ``OR``
        cursor: Cursor for the first child
        style: Placeholder strategy

    Returns:
        Combined rendering
    """
    if not predicates:
        return Rendered("", style.new_args(), cursor)
    if len(predicates) == 1:
        return predicates[0].to_sql(cursor, style)

    parts = []
    args = style.new_args()
    current = cursor

    for predicate in predicates:
        sql, child_args, following = predicate.to_sql(current, style)
        style.check_consumed(child_args, current, following, predicate)
        style.merge(args, child_args)
        parts.append(sql)
        current = following

    return Rendered("(" + f" {operator} ".join(parts) + ")", args, current)


@dataclass(frozen=True, init=False)
class And(Predicate):
    """All child predicates hold."""

    predicates: Tuple[Predicate, ...]

    def __init__(self, *predicates: Predicate):
        object.__setattr__(self, "predicates", tuple(predicates))

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        return combine_predicates(self.predicates, "AND", cursor, style)


@dataclass(frozen=True, init=False)
class Or(Predicate):
    """At least one child predicate holds."""

    predicates: Tuple[Predicate, ...]

    def __init__(self, *predicates: Predicate):
        object.__setattr__(self, "predicates", tuple(predicates))

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        return combine_predicates(self.predicates, "OR", cursor, style)


@dataclass(frozen=True)
class Not(Predicate):
    """``NOT (inner)``"""

    predicate: Predicate

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        sql, args, following = self.predicate.to_sql(cursor, style)
        return Rendered(f"NOT ({sql})", args, following)


# --- raw predicate ---

@dataclass(frozen=True, init=False)
class Raw(Predicate):
    """
    Literal SQL fragment with its own placeholders.

    Positional markers ``$1, $2, ...`` refer to ``args`` and are shifted by
    one linear offset into the surrounding cursor space, so a marker used
    twice still points at a single value. Named markers ``@name`` refer to
    ``named_args``. Markers inside dollar-quoted strings are never touched.

    In a positional build, named markers are translated to positions
    following the positional args. In a named build, they are left as-is
    and ``named_args`` are merged unchanged; keeping those names clear of
    the generated ``p1, p2, ...`` names is up to the caller.

    ``named_args`` is stored as (name, value) pairs sorted by name, so a Raw
    predicate is hashable whenever its values are.

    Example:
        >>> from sqlcompose.params import NAMED
        >>> Raw("follower_id = $1 AND following_id = $2", 10, 20).to_sql(5).sql
        'follower_id = $5 AND following_id = $6'
        >>> Raw("owner = @uid OR editor = @uid", uid=7).to_sql(1, NAMED).sql
        'owner = @uid OR editor = @uid'

    Raises:
        MalformedFragmentError: From ``to_sql`` when a ``$`` marker is not a
            usable index
    """

    fragment: str
    args: Tuple[Any, ...]
    named_args: Tuple[Tuple[str, Any], ...]

    def __init__(self, fragment: str, *args: Any, **named_args: Any):
        object.__setattr__(self, "fragment", fragment)
        object.__setattr__(self, "args", tuple(args))
        object.__setattr__(self, "named_args", tuple(sorted(named_args.items())))

    def _index(self, match: "re.Match") -> Optional[int]:
        """Return the 1-based value index of a ``$`` marker, or None to keep it."""
        if match.group("quoted") is not None:
            return None
        if match.group("word") is not None:
            raise MalformedFragmentError(self.fragment, match.group(0), "positional index must be numeric")

        index = int(match.group("index"))
        if index < 1:
            raise MalformedFragmentError(self.fragment, match.group(0), "positional indexes start at 1")
        if index > len(self.args):
            raise MalformedFragmentError(
                self.fragment,
                match.group(0),
                f"only {len(self.args)} positional value(s) supplied"
            )
        return index

    def to_sql(self, cursor: int = FIRST_POSITION, style: ParamStyle = POSITIONAL) -> Rendered:
        def _shift(match: "re.Match") -> str:
            index = self._index(match)
            if index is None:
                return match.group(0)
            return style.marker(index + cursor - 1)

        sql = POSITIONAL_MARKER_RE.sub(_shift, self.fragment)

        args = style.new_args()
        for position, value in enumerate(self.args, start=cursor):
            style.bind(args, position, value)
        following = cursor + len(self.args)

        if self.named_args:
            sql, following = style.bind_named(sql, args, dict(self.named_args), following)
        return Rendered(sql, args, following)
