"""
================================
Exceptions raised by sqlcompose.
================================

Every error is raised synchronously to the caller of ``build()``, the
named-to-positional bridge or the executor. There is no retry and no
partial result: a failure means the statement cannot be executed safely.

Hierarchy:
    SQLComposeError
        MalformedFragmentError   - Raw fragment with unparseable markers
        MissingArgumentError     - marker name without a bound value
        PlaceholderMismatchError - cursor advance != values contributed
        ParameterConflictError   - named key rebound to another value
        QueryBuildError          - statement cannot be assembled
        QueryExecutionError      - driver/SQLAlchemy failure
            NotFoundError        - single-row fetch returned no rows
"""

from typing import Any, Optional


class SQLComposeError(Exception):
    """Base class for all sqlcompose errors."""
    pass


class MalformedFragmentError(SQLComposeError):
    """Raised when a Raw fragment contains a marker that cannot be renumbered.

    Attributes:
        fragment: The offending SQL fragment
        marker: The marker text that failed to parse
    """

    def __init__(self, fragment: str, marker: str, reason: str):
        self.fragment = fragment
        self.marker = marker
        super().__init__(f"Malformed marker {marker!r} in raw fragment {fragment!r}: {reason}")


class MissingArgumentError(SQLComposeError):
    """Raised when a named marker has no entry in the argument mapping."""

    def __init__(self, name: str, sql: Optional[str] = None):
        self.name = name
        self.sql = sql
        message = f"No value bound for named parameter @{name}"
        if sql is not None:
            message += f" in {sql!r}"
        super().__init__(message)


class PlaceholderMismatchError(SQLComposeError):
    """Raised when a predicate advances the cursor inconsistently with its values.

    This is a programming defect in a predicate implementation, not a
    caller error.
    """
    pass


class ParameterConflictError(SQLComposeError):
    """Raised when a named parameter is bound twice to different values."""

    def __init__(self, name: str, existing: Any, value: Any):
        self.name = name
        super().__init__(
            f"Named parameter @{name} already bound to {existing!r}, "
            f"refusing to rebind it to {value!r}"
        )


class QueryBuildError(SQLComposeError):
    """Raised when a builder holds a statement that cannot be rendered."""
    pass


class QueryExecutionError(SQLComposeError):
    """Raised when the database driver rejects or fails a statement."""
    pass


class NotFoundError(QueryExecutionError):
    """Raised when a single-row fetch returns zero rows."""
    pass
