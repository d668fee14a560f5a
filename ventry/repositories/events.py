"""Event repository.

The attendees_count and checked_in_count fields are owned by the attendee
repository: they start at zero here and are never written by callers.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, insert, select, update

from ..db import Database, DatabaseError
from ..models.event import Event, event_summary, event_to_dict
from ..models.validation import validate_event_fields
from ..utils.timestamps import new_id, now_iso
from .attendees import AttendeeRepository

logger = logging.getLogger(__name__)

events_table = Event.__table__

class EventRepository:
    """CRUD for events."""

    def __init__(self, database: Database, attendees: Optional[AttendeeRepository] = None):
        """
        Args:
            database: Store handle
            attendees: Repository used to attach attendees in get_event_by_id
        """
        self.database = database
        self.attendees = attendees or AttendeeRepository(database)

    def add_event(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create an event.

        Args:
            data: 'title', 'date' and 'time' are required; 'location',
                  'notes' and 'expected_attendees' are optional

        Returns:
            The record exactly as inserted, counters at zero

        Raises:
            ValidationError: On missing/invalid fields or fields the
                             repository owns (id, counters, timestamps)
        """
        fields = validate_event_fields(data)
        now = now_iso()
        record = {
            'id': new_id(),
            **fields,
            'attendees_count': 0,
            'checked_in_count': 0,
            'created_at': now,
            'updated_at': now,
        }
        with self.database.session() as session:
            session.execute(insert(events_table).values(**record))
        logger.debug(f"Created event {record['id']}")
        return record

    def get_events(self) -> List[Dict[str, Any]]:
        """All events, most recent date and time first."""
        with self.database.session() as session:
            rows = session.execute(
                select(events_table)
                .order_by(events_table.c.date.desc(), events_table.c.time.desc())
            ).all()
            return [event_to_dict(row) for row in rows]

    def get_event_summaries(self) -> List[Dict[str, Any]]:
        """Id, title, date and counters of every event, in listing order."""
        return [event_summary(event) for event in self.get_events()]

    def get_event_by_id(self, event_id: str) -> Optional[Dict[str, Any]]:
        """
        Get an event together with its attendees.

        If loading the attendees fails the event is still returned, with an
        empty attendee list.

        Returns:
            The event record with an 'attendees' list, or None if not found
        """
        with self.database.session() as session:
            row = session.execute(
                select(events_table).where(events_table.c.id == event_id)
            ).first()
        if row is None:
            return None

        event = event_to_dict(row)
        try:
            event['attendees'] = self.attendees.get_attendees(event_id)
        except DatabaseError as e:
            logger.warning(f"Returning event {event_id} without attendees: {e}")
            event['attendees'] = []
        return event

    def update_event(self, event_id: str, data: Dict[str, Any]) -> bool:
        """
        Update the supplied fields of an event.

        Returns:
            bool: True if a row was updated, False if no such event. An empty
                  update returns True without touching storage.

        Raises:
            ValidationError: On invalid values or fields callers may not set
        """
        changes = validate_event_fields(data, partial=True)
        if not changes:
            return True

        with self.database.session() as session:
            result = session.execute(
                update(events_table)
                .where(events_table.c.id == event_id)
                .values(**changes, updated_at=now_iso())
            )
            updated = result.rowcount > 0
        if updated:
            logger.debug(f"Updated event {event_id}: {', '.join(changes)}")
        return updated

    def delete_event(self, event_id: str) -> bool:
        """
        Delete an event; its attendees go with it through the cascading key.

        Returns:
            bool: True if the event existed and was removed
        """
        with self.database.session() as session:
            result = session.execute(
                delete(events_table).where(events_table.c.id == event_id)
            )
            deleted = result.rowcount > 0
        if deleted:
            logger.debug(f"Deleted event {event_id}")
        return deleted
