"""
==========================
Utility Functions Package.
==========================

Reusable helpers for database connectivity.

Modules:
    database_utils: Connection strings and SQLAlchemy engine creation
"""

__version__ = "0.1.0"
__all__ = [
    'get_connection_string',
    'create_sqlalchemy_engine',
]

from .database_utils import create_sqlalchemy_engine, get_connection_string
