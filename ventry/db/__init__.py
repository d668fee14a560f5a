"""Database package initialization.

This module exposes the public interface of the database package.
"""

from .db_core import (
    Database,
    DatabaseConfig,
    DatabaseError,
    ConnectionError,
    SessionError,
    SchemaError,
    EventNotFoundError,
)
from .operations import execute_in_transaction
from .schema import SchemaCapabilities, ensure_schema

__all__ = [
    # Core database classes
    'Database',
    'DatabaseConfig',

    # Exceptions
    'DatabaseError',
    'ConnectionError',
    'SessionError',
    'SchemaError',
    'EventNotFoundError',

    # Schema management
    'SchemaCapabilities',
    'ensure_schema',

    # Utilities
    'execute_in_transaction',
]
