"""Schema creation and additive migrations.

ensure_schema() is idempotent and meant to run on every process start. It
creates the core tables and indexes when absent, adds columns introduced by
later schema revisions, and reports which optional columns are available.
"""

import logging
from dataclasses import dataclass
from typing import Set, Tuple

from sqlalchemy import Engine, inspect

from ..models import Base
from ..models.attendee import ATTENDEE_COLUMNS
from .db_core import Database, ConnectionError, SchemaError

logger = logging.getLogger(__name__)

# Columns added after the first schema revision: (table, column, SQL type)
ADDITIVE_MIGRATIONS: Tuple[Tuple[str, str, str], ...] = (
    ('attendees', 'email', 'VARCHAR'),
    ('attendees', 'phone', 'VARCHAR'),
    ('attendees', 'check_in_time', 'VARCHAR'),
)

@dataclass(frozen=True)
class SchemaCapabilities:
    """
    Which optional attendee columns the connected database actually has.

    Produced once by ensure_schema() and consumed by the attendee repository,
    which leaves missing columns out of its statements.
    """
    has_email: bool = True
    has_phone: bool = True
    has_check_in_time: bool = True

    @classmethod
    def from_columns(cls, columns: Set[str]) -> 'SchemaCapabilities':
        return cls(
            has_email='email' in columns,
            has_phone='phone' in columns,
            has_check_in_time='check_in_time' in columns,
        )

    def supports(self, column: str) -> bool:
        """Whether the attendees table has the given column."""
        return getattr(self, f'has_{column}', True)

    @property
    def attendee_columns(self) -> Tuple[str, ...]:
        """Attendee columns that can be selected and written."""
        return tuple(name for name in ATTENDEE_COLUMNS if self.supports(name))

    @property
    def degraded(self) -> bool:
        return not (self.has_email and self.has_phone and self.has_check_in_time)

def _existing_columns(engine: Engine, table_name: str) -> Set[str]:
    return {column['name'] for column in inspect(engine).get_columns(table_name)}

def _add_column(engine: Engine, table_name: str, column_name: str, column_type: str) -> None:
    with engine.begin() as conn:
        conn.exec_driver_sql(
            f'ALTER TABLE {table_name} ADD COLUMN {column_name} {column_type}'
        )

def _create_core_tables(engine: Engine) -> None:
    """Create missing tables, then any missing indexes on existing ones."""
    existing_tables = set(inspect(engine).get_table_names())
    missing = [
        table for table in Base.metadata.sorted_tables
        if table.name not in existing_tables
    ]
    if missing:
        logger.info(f"Creating tables: {', '.join(table.name for table in missing)}")
    Base.metadata.create_all(engine, checkfirst=True)

    for table in Base.metadata.sorted_tables:
        for index in table.indexes:
            index.create(engine, checkfirst=True)

def _apply_migrations(engine: Engine) -> None:
    """Add columns from later schema revisions; failures are logged and skipped."""
    for table_name, column_name, column_type in ADDITIVE_MIGRATIONS:
        try:
            if column_name in _existing_columns(engine, table_name):
                continue
            logger.info(f"Adding column {table_name}.{column_name}")
            _add_column(engine, table_name, column_name, column_type)
        except Exception as e:
            logger.warning(
                f"Migration adding {table_name}.{column_name} failed, "
                f"continuing without it: {e}"
            )

def ensure_schema(database: Database) -> SchemaCapabilities:
    """
    Ensure the events and attendees tables exist and are up to date.

    Safe to call any number of times. Creating the core tables is fatal on
    failure; a failing additive migration only reduces the capabilities
    reported back.

    Args:
        database: Store handle to initialize

    Returns:
        SchemaCapabilities describing the optional columns available

    Raises:
        SchemaError: If the core tables cannot be created or inspected
    """
    if not database.engine:
        raise ConnectionError("Database engine not initialized")

    engine = database.engine
    try:
        _create_core_tables(engine)
    except Exception as e:
        raise SchemaError(f"Failed to initialize database schema: {e}") from e

    _apply_migrations(engine)

    try:
        capabilities = SchemaCapabilities.from_columns(
            _existing_columns(engine, 'attendees')
        )
    except Exception as e:
        raise SchemaError(f"Failed to inspect database schema: {e}") from e

    if capabilities.degraded:
        logger.warning(f"Running with reduced attendee columns: {capabilities}")
    else:
        logger.info("Database schema initialized successfully")
    return capabilities
