"""Database operations and utilities.

This module provides the transaction wrapper every multi-statement mutation
goes through. There is no retry logic: callers decide whether to retry.
"""

import logging
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import IntegrityError

from .db_core import Database, DatabaseError

logger = logging.getLogger(__name__)

# Type variable for generic return type
T = TypeVar('T')

def execute_in_transaction(
    database: Database,
    operation: Callable[..., T],
    *args: Any,
    **kwargs: Any
) -> T:
    """
    Execute a database operation within a single atomic transaction.

    The operation receives the session as its first argument. Every statement
    it executes commits together; if it raises, nothing it wrote survives.

    Args:
        database: Store handle to open the transaction on
        operation: Callable that performs the database operation
        *args: Positional arguments to pass to the operation
        **kwargs: Keyword arguments to pass to the operation

    Returns:
        The result of the operation

    Raises:
        DatabaseError: If a constraint is violated
        SessionError: If the engine fails mid-transaction

    Example:
        def rename_attendee(session, attendee_id: str, name: str) -> bool:
            result = session.execute(
                update(Attendee.__table__)
                .where(Attendee.id == attendee_id)
                .values(name=name)
            )
            return result.rowcount > 0

        renamed = execute_in_transaction(
            database, rename_attendee, attendee_id="abc", name="New Name"
        )
    """
    with database.session() as session:
        try:
            return operation(session, *args, **kwargs)
        except IntegrityError as e:
            logger.error(f"Integrity error in {operation.__name__}: {e}")
            raise DatabaseError(f"Integrity error in transaction: {e}") from e
