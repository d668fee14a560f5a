"""Attendee repository.

Every mutation here changes an attendee row and the owning event's counters
in the same transaction, so attendees_count and checked_in_count always match
the attendee rows.
"""

import logging
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session

from ..db import Database, EventNotFoundError, execute_in_transaction
from ..db.schema import SchemaCapabilities
from ..models.attendee import Attendee, attendee_to_dict
from ..models.event import Event
from ..models.validation import ValidationError, validate_attendee_fields
from ..utils.timestamps import new_id, now_iso

logger = logging.getLogger(__name__)

attendees_table = Attendee.__table__
events_table = Event.__table__

@dataclass
class SkippedRow:
    """An import row that was not imported, with the reason."""
    index: int
    row: Dict[str, Any]
    reason: str

@dataclass
class ImportResult:
    """Outcome of a bulk attendee import."""
    imported: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[SkippedRow] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.imported)

def _adjust_event(
    session: Session,
    event_id: str,
    now: str,
    attendees_delta: int = 0,
    checked_in_delta: int = 0
) -> bool:
    """Shift an event's counters and stamp updated_at. False if the event is gone."""
    values: Dict[str, Any] = {'updated_at': now}
    if attendees_delta:
        values['attendees_count'] = events_table.c.attendees_count + attendees_delta
    if checked_in_delta:
        values['checked_in_count'] = events_table.c.checked_in_count + checked_in_delta
    result = session.execute(
        update(events_table)
        .where(events_table.c.id == event_id)
        .values(**values)
    )
    return result.rowcount > 0

def _fold(text: str) -> str:
    """Lowercase and strip accents so 'José' matches 'jose'."""
    decomposed = unicodedata.normalize('NFKD', text.casefold())
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))

class AttendeeRepository:
    """CRUD for attendees, scoped to their owning event."""

    def __init__(self, database: Database, capabilities: Optional[SchemaCapabilities] = None):
        """
        Args:
            database: Store handle
            capabilities: Optional columns available, as reported by
                          ensure_schema(). Defaults to the full column set.
        """
        self.database = database
        self.capabilities = capabilities or SchemaCapabilities()

    @property
    def _columns(self):
        return [attendees_table.c[name] for name in self.capabilities.attendee_columns]

    def _writable(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Drop the fields of a record that have no column in this database."""
        return {
            name: value for name, value in record.items()
            if self.capabilities.supports(name)
        }

    def _to_dict(self, row: Any) -> Dict[str, Any]:
        return attendee_to_dict(row, self.capabilities.attendee_columns)

    def _without_missing_columns(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Blank out values this database has no column for, with a warning."""
        dropped = [
            name for name, value in fields.items()
            if value is not None and not self.capabilities.supports(name)
        ]
        if dropped:
            logger.warning(f"Not storing {', '.join(dropped)}: column missing from database")
        return {
            name: value if self.capabilities.supports(name) else None
            for name, value in fields.items()
        }

    def _build_record(self, event_id: str, fields: Dict[str, Any], now: str) -> Dict[str, Any]:
        fields = self._without_missing_columns(fields)
        return {
            'id': new_id(),
            'event_id': event_id,
            'name': fields['name'],
            'email': fields['email'],
            'phone': fields['phone'],
            'checked_in': False,
            'check_in_time': None,
            'created_at': now,
            'updated_at': now,
        }

    def _insert_attendees(
        self,
        session: Session,
        event_id: str,
        records: List[Dict[str, Any]],
        now: str
    ) -> None:
        if not _adjust_event(session, event_id, now, attendees_delta=len(records)):
            raise EventNotFoundError(event_id)
        session.execute(
            insert(attendees_table),
            [self._writable(record) for record in records]
        )

    def add_attendee(self, event_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a new attendee for an event.

        The attendee row is inserted and the event's attendees_count raised by
        one in a single transaction.

        Args:
            event_id: Owning event
            data: Fields with a required 'name' and optional 'email'/'phone'

        Returns:
            The attendee record as stored

        Raises:
            ValidationError: If the name is blank or unknown fields are given
            EventNotFoundError: If the event does not exist
            SessionError: If the transaction fails (nothing is written)
        """
        fields = validate_attendee_fields(data)
        now = now_iso()
        record = self._build_record(event_id, fields, now)
        execute_in_transaction(self.database, self._insert_attendees, event_id, [record], now)
        logger.debug(f"Added attendee {record['id']} to event {event_id}")
        return record

    def import_attendees(self, event_id: str, rows: List[Dict[str, Any]]) -> ImportResult:
        """
        Add many attendees at once.

        Rows failing validation are skipped and reported. All valid rows are
        written, and the counter raised by their number, in one transaction:
        either the whole import lands or none of it does.
        """
        result = ImportResult()
        now = now_iso()
        for index, row in enumerate(rows):
            try:
                fields = validate_attendee_fields(row)
            except ValidationError as e:
                result.skipped.append(SkippedRow(index=index, row=row, reason=str(e)))
                continue
            result.imported.append(self._build_record(event_id, fields, now))

        if result.imported:
            execute_in_transaction(
                self.database, self._insert_attendees, event_id, result.imported, now
            )
        logger.info(
            f"Imported {result.imported_count} attendees into event {event_id}, "
            f"skipped {len(result.skipped)}"
        )
        return result

    def get_attendees(self, event_id: str) -> List[Dict[str, Any]]:
        """All attendees of an event, ordered by name (case-insensitive)."""
        with self.database.session() as session:
            rows = session.execute(
                select(*self._columns)
                .where(attendees_table.c.event_id == event_id)
            ).all()
        # SQLite's lower() only folds ASCII
        rows.sort(key=lambda row: (row.name.casefold(), row.id))
        return [self._to_dict(row) for row in rows]

    def get_attendee(self, attendee_id: str) -> Optional[Dict[str, Any]]:
        """A single attendee, or None if there is no such attendee."""
        with self.database.session() as session:
            row = session.execute(
                select(*self._columns).where(attendees_table.c.id == attendee_id)
            ).first()
            return self._to_dict(row) if row else None

    def search_attendees(self, event_id: str, query: str) -> List[Dict[str, Any]]:
        """
        Attendees of an event matching a free-text query.

        Names match ignoring case and accents, emails ignoring case, phone
        numbers as typed. A blank query returns every attendee.
        """
        attendees = self.get_attendees(event_id)
        query = (query or '').strip()
        if not query:
            return attendees

        folded = _fold(query)
        lowered = query.lower()
        return [
            attendee for attendee in attendees
            if folded in _fold(attendee['name'])
            or (attendee['email'] and lowered in attendee['email'].lower())
            or (attendee['phone'] and query in attendee['phone'])
        ]

    def _toggle_check_in(self, session: Session, attendee_id: str, now: str) -> bool:
        current = session.execute(
            select(attendees_table.c.event_id, attendees_table.c.checked_in)
            .where(attendees_table.c.id == attendee_id)
        ).first()
        if current is None:
            return False

        checked_in = not current.checked_in
        values: Dict[str, Any] = {'checked_in': checked_in, 'updated_at': now}
        if self.capabilities.has_check_in_time:
            values['check_in_time'] = now if checked_in else None
        session.execute(
            update(attendees_table)
            .where(attendees_table.c.id == attendee_id)
            .values(**values)
        )
        _adjust_event(session, current.event_id, now, checked_in_delta=1 if checked_in else -1)
        return True

    def toggle_check_in(self, attendee_id: str) -> bool:
        """
        Flip an attendee between checked in and not checked in.

        Checking in stamps check_in_time, checking out clears it. The event's
        checked_in_count moves with it in the same transaction.

        Returns:
            bool: False if the attendee does not exist
        """
        toggled = execute_in_transaction(
            self.database, self._toggle_check_in, attendee_id, now_iso()
        )
        if toggled:
            logger.debug(f"Toggled check-in of attendee {attendee_id}")
        return toggled

    def _update_attendee(
        self,
        session: Session,
        attendee_id: str,
        changes: Dict[str, Any],
        now: str
    ) -> bool:
        event_id = session.execute(
            select(attendees_table.c.event_id).where(attendees_table.c.id == attendee_id)
        ).scalar_one_or_none()
        if event_id is None:
            return False

        session.execute(
            update(attendees_table)
            .where(attendees_table.c.id == attendee_id)
            .values(**self._writable(self._without_missing_columns(changes)), updated_at=now)
        )
        _adjust_event(session, event_id, now)
        return True

    def update_attendee(self, attendee_id: str, data: Dict[str, Any]) -> bool:
        """
        Edit an attendee's name, email or phone.

        Returns:
            bool: False if the attendee does not exist. An empty update
                  succeeds without touching storage.

        Raises:
            ValidationError: On a blank name or any other field
        """
        changes = validate_attendee_fields(data, partial=True)
        if not changes:
            return True
        return execute_in_transaction(
            self.database, self._update_attendee, attendee_id, changes, now_iso()
        )

    def _delete_attendee(self, session: Session, attendee_id: str, now: str) -> bool:
        current = session.execute(
            select(attendees_table.c.event_id, attendees_table.c.checked_in)
            .where(attendees_table.c.id == attendee_id)
        ).first()
        if current is None:
            return False

        session.execute(delete(attendees_table).where(attendees_table.c.id == attendee_id))
        _adjust_event(
            session,
            current.event_id,
            now,
            attendees_delta=-1,
            checked_in_delta=-1 if current.checked_in else 0
        )
        return True

    def delete_attendee(self, attendee_id: str) -> bool:
        """
        Remove an attendee and shrink the event's counters accordingly.

        Returns:
            bool: False if the attendee does not exist
        """
        deleted = execute_in_transaction(
            self.database, self._delete_attendee, attendee_id, now_iso()
        )
        if deleted:
            logger.debug(f"Deleted attendee {attendee_id}")
        return deleted
