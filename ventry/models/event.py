"""Event model definition."""

from typing import Any, Dict
from sqlalchemy import Column, Integer, String, Text, Index

from .base import Base

class Event(Base):
    """
    Event model representing a locally managed event.

    Fields:
        id: Unique identifier, generated by the repository
        title: Event title
        date: Calendar date of the event (YYYY-MM-DD)
        time: Time of day of the event (HH:MM:SS)
        location: Where the event takes place (optional)
        notes: Free-form notes (optional)
        expected_attendees: Planning estimate of the head count (optional)
        attendees_count: Number of registered attendees (repository-maintained)
        checked_in_count: Number of checked-in attendees (repository-maintained)
        created_at: When this event was created (ISO-8601)
        updated_at: When this event or one of its attendees last changed (ISO-8601)
    """
    __tablename__ = 'events'
    __table_args__ = (
        Index('idx_events_date_time', 'date', 'time'),
        Index('idx_events_created_at', 'created_at'),
    )

    # Required fields
    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    date = Column(String, nullable=False)
    time = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    # Derived counters
    attendees_count = Column(Integer, nullable=False, default=0)
    checked_in_count = Column(Integer, nullable=False, default=0)

    # Optional fields
    location = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    expected_attendees = Column(Integer, nullable=True)

EVENT_COLUMNS = tuple(column.name for column in Event.__table__.columns)

def event_to_dict(row: Any) -> Dict[str, Any]:
    """Convert a result row of the events table to a plain record."""
    mapping = row._mapping
    return {name: mapping[name] for name in EVENT_COLUMNS}

def event_summary(event: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce an event record to the fields shown in event listings."""
    return {
        'id': event['id'],
        'title': event['title'],
        'date': event['date'],
        'attendees_count': event['attendees_count'],
        'checked_in_count': event['checked_in_count'],
    }
