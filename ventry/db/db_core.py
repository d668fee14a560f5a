"""Core database functionality and configuration.

This module provides the store handle: an explicit Database object owning a
SQLAlchemy engine and session factory, passed to the repositories at
construction time.
"""

from contextlib import contextmanager
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Generator

from sqlalchemy import create_engine, Engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..config.environment import DATABASE_PATH, SQL_ECHO

logger = logging.getLogger(__name__)

class DatabaseConfig:
    """Database configuration settings."""

    def __init__(
        self,
        sqlite_path: Optional[Path] = None,
        url: Optional[str] = None,
        echo: Optional[bool] = None
    ):
        """
        Initialize database configuration.

        Args:
            sqlite_path: Path to the SQLite database file. Defaults to
                         VENTRY_DATABASE_PATH (or data/ventry.db)
            url: Full SQLAlchemy SQLite URL; takes precedence over sqlite_path
                 (e.g. 'sqlite://' for an in-memory database)
            echo: Whether to echo SQL statements. Defaults to VENTRY_SQL_ECHO

        Raises:
            ValueError: If the URL does not point to a SQLite database
        """
        if url is not None and not url.startswith('sqlite'):
            raise ValueError(f"Only SQLite databases are supported, got: {url}")

        self.url = url
        self.sqlite_path = None if url else Path(sqlite_path or DATABASE_PATH)
        self.echo = SQL_ECHO if echo is None else echo

    @classmethod
    def in_memory(cls, echo: bool = False) -> 'DatabaseConfig':
        """Configuration for a private in-memory database."""
        return cls(url='sqlite://', echo=echo)

    @property
    def connection_url(self) -> str:
        """Get the database connection URL."""
        if self.url:
            return self.url
        if not self.sqlite_path:
            raise ValueError("SQLite path not configured")
        return f"sqlite:///{self.sqlite_path}"

    def get_engine_args(self) -> Dict[str, Any]:
        """Get SQLAlchemy engine arguments based on configuration."""
        # One shared connection; the async facade uses it from its worker thread
        return {
            "echo": self.echo,
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }

class DatabaseError(Exception):
    """Base exception for database-related errors."""
    pass

class ConnectionError(DatabaseError):
    """Raised when there are issues connecting to the database."""
    pass

class SessionError(DatabaseError):
    """Raised when a transaction fails and has been rolled back."""
    pass

class SchemaError(DatabaseError):
    """Raised when the core tables cannot be created."""
    pass

class EventNotFoundError(DatabaseError):
    """Raised when an attendee mutation targets an event that does not exist."""

    def __init__(self, event_id: str):
        super().__init__(f"Event with ID {event_id} not found")
        self.event_id = event_id

def _enable_sqlite_transactions(engine: Engine) -> None:
    """
    Put pysqlite into explicit transaction mode with foreign keys enforced.

    pysqlite defers BEGIN until the first DML statement, which would leave the
    reads of a read-modify-write mutation outside its transaction.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

class Database:
    """Store handle owning the engine and the session factory."""

    def __init__(self, config: Optional[DatabaseConfig] = None):
        """Initialize the database handle and its engine."""
        self.config = config or DatabaseConfig()
        self.engine: Optional[Engine] = None
        self._session_factory = sessionmaker(expire_on_commit=False)

        # Initialize engine on creation
        self._setup_engine()

    def _setup_engine(self) -> None:
        """Set up the SQLAlchemy engine."""
        try:
            if self.config.sqlite_path:
                self.config.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                self.config.connection_url,
                **self.config.get_engine_args()
            )
            _enable_sqlite_transactions(self.engine)
            self._session_factory.configure(bind=self.engine)
        except Exception as e:
            raise ConnectionError(f"Failed to create database engine: {e}") from e

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Everything executed on the yielded session commits together when the
        block exits normally. Any exception rolls the whole transaction back;
        driver errors are re-raised as SessionError, domain errors raised by
        the block itself (DatabaseError, ValidationError) pass through as-is.

        Example:
            with database.session() as session:
                session.execute(insert(Attendee.__table__).values(...))
                session.execute(update(Event.__table__).values(...))
                # Both statements commit, or neither does

        Raises:
            SessionError: If the underlying engine fails mid-transaction
            ConnectionError: If the engine has been disposed
        """
        if not self.engine:
            raise ConnectionError("Database engine not initialized")

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except (DatabaseError, ValueError):
            session.rollback()
            raise
        except Exception as e:
            session.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise SessionError(f"Database session error: {e}") from e
        finally:
            session.close()

    def dispose(self) -> None:
        """Release the engine and its connection."""
        if self.engine:
            self.engine.dispose()
            self.engine = None
