"""
=====================================
Placeholder minting and cursor state.
=====================================

Both addressing schemes share one predicate engine. What differs between
them is captured by a ``ParamStyle`` strategy:

- PositionalStyle: markers ``$1, $2, ...`` and a ``list`` of values
  aligned 1:1 with the marker numbers.
- NamedStyle: markers ``@p1, @p2, ...`` and a ``dict`` mapping each name
  to its value.

The cursor is a plain ``int`` starting at 1 in both schemes. Positional
markers use it directly; named markers mint ``p<cursor>`` from it.

``StatementWriter`` is the per-build accumulator used by the statement
builders. A new writer is created for every ``build()`` call so builders
never hold cursor state, which keeps ``build()`` idempotent.

Example:
    >>> from sqlcompose.params import NAMED, POSITIONAL
    >>> from sqlcompose.predicates import Eq
    >>>
    >>> Eq("uuid", "abc-123").to_sql(1, POSITIONAL)
    Rendered(sql='uuid = $1', args=['abc-123'], cursor=2)
    >>> Eq("uuid", "abc-123").to_sql(1, NAMED)
    Rendered(sql='uuid = @p1', args={'p1': 'abc-123'}, cursor=2)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Tuple, Union

from sqlcompose.bridge import named_to_positional
from sqlcompose.errors import ParameterConflictError, PlaceholderMismatchError

Args = Union[List[Any], Dict[str, Any]]

FIRST_POSITION = 1


class Rendered(NamedTuple):
    """Result of rendering a predicate at a given cursor.

    Attributes:
        sql: SQL fragment with placeholders
        args: Values contributed by the fragment (list or dict)
        cursor: Next free cursor position after the fragment
    """

    sql: str
    args: Args
    cursor: int


class ParamStyle(ABC):
    """Strategy that mints placeholder markers and collects bound values."""

    name: str = ""

    @abstractmethod
    def marker(self, position: int) -> str:
        """Return the placeholder text for a cursor position."""

    @abstractmethod
    def new_args(self) -> Args:
        """Return an empty argument collection."""

    @abstractmethod
    def bind(self, args: Args, position: int, value: Any) -> None:
        """Record ``value`` as the value of the placeholder at ``position``."""

    @abstractmethod
    def merge(self, args: Args, other: Args) -> None:
        """Merge a child's argument collection into ``args`` in place."""

    @abstractmethod
    def bind_named(
        self,
        sql: str,
        args: Args,
        named_args: Mapping[str, Any],
        cursor: int
    ) -> Tuple[str, int]:
        """Bind caller-named ``@name`` values found in a raw fragment.

        Returns:
            Tuple of (possibly rewritten SQL, advanced cursor)
        """

    @abstractmethod
    def check_consumed(self, args: Args, start: int, end: int, source: Any) -> None:
        """Verify that advancing the cursor from start to end matches ``args``.

        Raises:
            PlaceholderMismatchError: If the advance and values disagree
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PositionalStyle(ParamStyle):
    """``$n`` markers with an ordered list of values."""

    name = "positional"

    def marker(self, position: int) -> str:
        return f"${position}"

    def new_args(self) -> List[Any]:
        return []

    def bind(self, args: List[Any], position: int, value: Any) -> None:
        args.append(value)

    def merge(self, args: List[Any], other: List[Any]) -> None:
        args.extend(other)

    def bind_named(
        self,
        sql: str,
        args: List[Any],
        named_args: Mapping[str, Any],
        cursor: int
    ) -> Tuple[str, int]:
        sql, values = named_to_positional(sql, named_args, start=cursor)
        args.extend(values)
        return sql, cursor + len(values)

    def check_consumed(self, args: List[Any], start: int, end: int, source: Any) -> None:
        if end - start != len(args):
            raise PlaceholderMismatchError(
                f"{source!r} advanced the cursor from {start} to {end} "
                f"but contributed {len(args)} value(s)"
            )


class NamedStyle(ParamStyle):
    """``@pN`` markers with a name -> value mapping."""

    name = "named"
    prefix = "p"

    def param_name(self, position: int) -> str:
        return f"{self.prefix}{position}"

    def marker(self, position: int) -> str:
        return f"@{self.param_name(position)}"

    def new_args(self) -> Dict[str, Any]:
        return {}

    def bind(self, args: Dict[str, Any], position: int, value: Any) -> None:
        self.merge(args, {self.param_name(position): value})

    def merge(self, args: Dict[str, Any], other: Dict[str, Any]) -> None:
        for key, value in other.items():
            if key in args:
                existing = args[key]
                if not (existing is value or existing == value):
                    raise ParameterConflictError(key, existing, value)
            args[key] = value

    def bind_named(
        self,
        sql: str,
        args: Dict[str, Any],
        named_args: Mapping[str, Any],
        cursor: int
    ) -> Tuple[str, int]:
        # Caller names do not consume the pN counter
        self.merge(args, dict(named_args))
        return sql, cursor

    def check_consumed(self, args: Dict[str, Any], start: int, end: int, source: Any) -> None:
        # Caller-named Raw parameters may add extra keys; only minted ones are counted
        missing = [
            self.param_name(position)
            for position in range(start, end)
            if self.param_name(position) not in args
        ]
        if missing:
            raise PlaceholderMismatchError(
                f"{source!r} advanced the cursor from {start} to {end} "
                f"but bound no value for {', '.join(missing)}"
            )


POSITIONAL = PositionalStyle()
NAMED = NamedStyle()


class StatementWriter:
    """Accumulates SQL text, bound values and the cursor for one build.

    Attributes:
        style: Placeholder strategy used for this statement
        args: Argument collection built so far
        cursor: Next free placeholder position
    """

    def __init__(self, style: ParamStyle = POSITIONAL):
        self.style = style
        self.args = style.new_args()
        self.cursor = FIRST_POSITION
        self._parts: List[str] = []

    def write(self, text: str) -> None:
        """Append structural (non-parameterized) SQL text."""
        self._parts.append(text)

    def bind(self, value: Any) -> str:
        """Bind ``value`` at the current cursor and return its marker."""
        marker = self.style.marker(self.cursor)
        self.style.bind(self.args, self.cursor, value)
        self.cursor += 1
        return marker

    def render(self, predicate: Any) -> str:
        """Render one predicate at the current cursor and absorb its values."""
        start = self.cursor
        fragment, args, cursor = predicate.to_sql(start, self.style)
        self.style.check_consumed(args, start, cursor, predicate)
        self.style.merge(self.args, args)
        self.cursor = cursor
        return fragment

    def write_predicates(self, keyword: str, predicates: Iterable[Any]) -> None:
        """Render a clause of top-level predicates joined with AND.

        No parentheses are added around the clause. Predicates rendering
        to an empty fragment (e.g. ``And()``) are skipped, and the keyword
        is omitted when nothing is left.

        Args:
            keyword: Clause keyword such as ``WHERE`` or ``HAVING``
            predicates: Top-level predicates in declaration order
        """
        fragments = [fragment for fragment in map(self.render, predicates) if fragment]
        if fragments:
            self.write(f" {keyword} " + " AND ".join(fragments))

    def result(self) -> Tuple[str, Args]:
        """Return the finished SQL text and argument collection."""
        return "".join(self._parts), self.args
