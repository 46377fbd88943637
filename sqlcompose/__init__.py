"""
===============================================
sqlcompose: fluent, parameterized SQL builders.
===============================================

Build SELECT / INSERT / UPDATE / DELETE statements with chained method
calls and predicate objects, and get back SQL with placeholders plus the
values to bind. Nothing is ever interpolated into the SQL text.

The package is organised by concern:
    - params.py: cursor, placeholder styles ($n and @pN), StatementWriter
    - predicates.py: Eq, In, Between, And/Or/Not, Raw, ...
    - query_builder.py: select() and the shared StatementBuilder base
    - dml.py: insert_into(), update(), delete_from()
    - bridge.py: named_to_positional() for drivers without named binds
    - debug.py: to_sql() literal inlining for logs (never for execution)
    - executor.py: Database / RowMapper over SQLAlchemy
    - errors.py: exception hierarchy

Example:
    >>> from sqlcompose import Eq, Gt, select, to_sql
    >>>
    >>> query = select("*").from_("users").where(Eq("active", True), Gt("age", 18))
    >>> query.build()
    ('SELECT * FROM users WHERE active = $1 AND age > $2', [True, 18])
    >>> query.build_named()
    ('SELECT * FROM users WHERE active = @p1 AND age > @p2', {'p1': True, 'p2': 18})
    >>> to_sql(query)
    'SELECT * FROM users WHERE active = TRUE AND age > 18'
"""

__version__ = "0.1.0"
__all__ = [
    # Builders
    'select', 'insert_into', 'update', 'delete_from', 'pagination',
    'SelectBuilder', 'InsertBuilder', 'UpdateBuilder', 'DeleteBuilder',
    'StatementBuilder', 'JoinType', 'OrderDir',
    # Predicates
    'Predicate', 'Eq', 'Neq', 'Gt', 'Gte', 'Lt', 'Lte', 'Like', 'ILike',
    'In', 'Between', 'IsNull', 'IsNotNull', 'And', 'Or', 'Not', 'Raw',
    # Placeholder styles
    'ParamStyle', 'PositionalStyle', 'NamedStyle', 'POSITIONAL', 'NAMED', 'Rendered',
    # Bridging and debugging
    'named_to_positional', 'to_sql', 'inline_args', 'format_value',
    # Execution
    'Database', 'RowMapper',
    # Errors
    'SQLComposeError', 'MalformedFragmentError', 'MissingArgumentError',
    'PlaceholderMismatchError', 'ParameterConflictError', 'QueryBuildError',
    'QueryExecutionError', 'NotFoundError',
]

from .bridge import named_to_positional
from .debug import format_value, inline_args, to_sql
from .dml import DeleteBuilder, InsertBuilder, UpdateBuilder, delete_from, insert_into, update
from .errors import (
    MalformedFragmentError,
    MissingArgumentError,
    NotFoundError,
    ParameterConflictError,
    PlaceholderMismatchError,
    QueryBuildError,
    QueryExecutionError,
    SQLComposeError,
)
from .executor import Database, RowMapper
from .params import NAMED, POSITIONAL, NamedStyle, ParamStyle, PositionalStyle, Rendered
from .predicates import (
    And,
    Between,
    Eq,
    Gt,
    Gte,
    ILike,
    In,
    IsNotNull,
    IsNull,
    Like,
    Lt,
    Lte,
    Neq,
    Not,
    Or,
    Predicate,
    Raw,
)
from .query_builder import (
    JoinType,
    OrderDir,
    SelectBuilder,
    StatementBuilder,
    pagination,
    select,
)
