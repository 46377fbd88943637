"""
===========================================
Named-to-positional placeholder conversion.
===========================================

Converts SQL rendered with ``@name`` markers into ``$1, $2, ...`` markers
plus an ordered value list, for drivers that only bind by position.

Positions are assigned by first occurrence in the text, scanning left to
right. A name seen again later reuses its position, so ``a = @id OR b =
@id`` becomes ``a = $1 OR b = $1`` with a single value. The mapping's
iteration order never influences the result.

Text inside PostgreSQL dollar-quoted strings (``$$...$$``, ``$tag$...$tag$``)
is not scanned for markers.

Example:
    >>> from sqlcompose.bridge import named_to_positional
    >>> named_to_positional("a = @id OR b = @id", {"id": 42})
    ('a = $1 OR b = $1', [42])
"""

import re
from typing import Any, Dict, List, Mapping, Tuple

from core.logger import get_logger
from sqlcompose.errors import MissingArgumentError

logger = get_logger(__name__)

NAMED_PARAM_RE = re.compile(r"@(\w+)")

# Matches a whole dollar-quoted string so markers inside it are left alone
DOLLAR_QUOTED_PATTERN = r"(?P<quoted>(?P<tag>\$(?:[A-Za-z_]\w*)?\$).*?(?P=tag))"

NAMED_MARKER_RE = re.compile(DOLLAR_QUOTED_PATTERN + r"|@(?P<name>\w+)", re.DOTALL)


def named_to_positional(
    sql: str,
    args: Mapping[str, Any],
    start: int = 1
) -> Tuple[str, List[Any]]:
    """
    Rewrite ``@name`` markers as positional ``$n`` markers.

    Args:
        sql: SQL text containing ``@name`` markers
        args: Mapping from marker name to bound value
        start: Position assigned to the first distinct name

    Returns:
        Tuple of (positional SQL, values ordered by position)

    Raises:
        MissingArgumentError: If a marker name has no entry in ``args``
    """
    positions: Dict[str, int] = {}
    values: List[Any] = []

    def _replace(match: "re.Match") -> str:
        if match.group("quoted") is not None:
            return match.group(0)

        name = match.group("name")
        if name not in positions:
            if name not in args:
                raise MissingArgumentError(name, sql)
            positions[name] = start + len(values)
            values.append(args[name])
        return f"${positions[name]}"

    result = NAMED_MARKER_RE.sub(_replace, sql)

    unused = set(args) - set(positions)
    if unused:
        logger.debug(f"Dropped unreferenced named parameters: {', '.join(sorted(unused))}")

    return result, values
