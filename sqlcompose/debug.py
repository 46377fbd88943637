"""
====================================
Debug rendering with inlined values.
====================================

Replaces every placeholder with a SQL literal of its bound value so a
statement can be read in logs. The output is NOT safe to execute: string
escaping is limited to doubling single quotes. Use ``build()`` for
anything that reaches a database.

Literal formatting:
- str: single-quoted, embedded ``'`` doubled
- None: NULL
- bool: TRUE / FALSE
- anything else: ``str(value)``

Example:
    >>> from sqlcompose.debug import to_sql
    >>> from sqlcompose.predicates import Eq
    >>> from sqlcompose.query_builder import select
    >>> to_sql(select("*").from_("t").where(Eq("name", "O'Brien")))
    "SELECT * FROM t WHERE name = 'O''Brien'"
"""

import re
from typing import Any, Mapping, Sequence, Union

from sqlcompose.bridge import NAMED_PARAM_RE
from sqlcompose.query_builder import StatementBuilder

POSITIONAL_PARAM_RE = re.compile(r"\$(\d+)")


def format_value(value: Any) -> str:
    """Return the SQL literal text of ``value`` for debug output."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return str(value)


def inline_args(sql: str, args: Union[Sequence[Any], Mapping[str, Any]]) -> str:
    """
    Substitute bound values into rendered SQL.

    Positional markers are matched with their full numeral in a single
    pass, so ``$1`` is never replaced inside ``$10`` and inlined literals
    are never rescanned. Markers without a value are left untouched.

    Args:
        sql: SQL with ``$n`` markers (list args) or ``@name`` markers (dict args)
        args: Values as returned by ``build()`` or ``build_named()``

    Returns:
        SQL text with literals in place of markers
    """
    if isinstance(args, Mapping):
        def _named(match: "re.Match") -> str:
            name = match.group(1)
            return format_value(args[name]) if name in args else match.group(0)

        return NAMED_PARAM_RE.sub(_named, sql)

    def _positional(match: "re.Match") -> str:
        index = int(match.group(1))
        if 1 <= index <= len(args):
            return format_value(args[index - 1])
        return match.group(0)

    return POSITIONAL_PARAM_RE.sub(_positional, sql)


def to_sql(builder: StatementBuilder, named: bool = False) -> str:
    """
    Render a builder with its values inlined, for logging only.

    Args:
        builder: Any statement builder
        named: Render through the named style instead of positional

    Returns:
        Non-executable SQL text
    """
    sql, args = builder.build_named() if named else builder.build()
    return inline_args(sql, args)
