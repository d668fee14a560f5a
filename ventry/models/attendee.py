"""Attendee model definition."""

from typing import Any, Dict, Iterable
from sqlalchemy import Column, Boolean, ForeignKey, String, Index

from .base import Base

class Attendee(Base):
    """
    Attendee registered for exactly one event.

    Fields:
        id: Unique identifier, generated by the repository
        event_id: Owning event; deleting the event deletes the attendee
        name: Attendee name
        email: Contact email (optional, added in a later schema revision)
        phone: Contact phone (optional, added in a later schema revision)
        checked_in: Whether the attendee is currently checked in
        check_in_time: When the attendee was checked in (optional, added in a
                       later schema revision)
        created_at: When this attendee was created (ISO-8601)
        updated_at: When this attendee last changed (ISO-8601)
    """
    __tablename__ = 'attendees'
    __table_args__ = (
        Index('idx_attendees_event_id', 'event_id'),
    )

    # Required fields
    id = Column(String, primary_key=True)
    event_id = Column(
        String,
        ForeignKey('events.id', ondelete='CASCADE'),
        nullable=False
    )
    name = Column(String, nullable=False)
    checked_in = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    # Optional fields, introduced after the first schema revision
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    check_in_time = Column(String, nullable=True)

ATTENDEE_COLUMNS = tuple(column.name for column in Attendee.__table__.columns)

def attendee_to_dict(row: Any, columns: Iterable[str] = ATTENDEE_COLUMNS) -> Dict[str, Any]:
    """
    Convert a result row of the attendees table to a plain record.

    Columns not present in the row (not selected because the database lacks
    them) come back as None so callers always see the full set of keys.
    """
    mapping = row._mapping
    selected = set(columns)
    record = {}
    for name in ATTENDEE_COLUMNS:
        record[name] = mapping[name] if name in selected else None
    record['checked_in'] = bool(record['checked_in'])
    return record
