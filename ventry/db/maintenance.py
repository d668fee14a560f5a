"""Database maintenance utilities.

This module contains read-only integrity checks. Counters are kept in sync
by the repositories' transactions; nothing here rewrites them.
"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import case, func, select

from ..models.attendee import Attendee
from ..models.event import Event
from .db_core import Database

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class CounterDrift:
    """An event whose stored counters disagree with its attendee rows."""
    event_id: str
    title: str
    stored_attendees: int
    actual_attendees: int
    stored_checked_in: int
    actual_checked_in: int

    def __str__(self) -> str:
        return (
            f"{self.title} ({self.event_id}): "
            f"attendees {self.stored_attendees} stored vs {self.actual_attendees} actual, "
            f"checked in {self.stored_checked_in} stored vs {self.actual_checked_in} actual"
        )

def find_counter_drift(database: Database) -> List[CounterDrift]:
    """
    Compare every event's stored counters with a fresh count of its attendees.

    Returns:
        List of events whose counters drifted; empty when all are consistent
    """
    events = Event.__table__
    attendees = Attendee.__table__

    counts = (
        select(
            attendees.c.event_id,
            func.count().label('total'),
            func.sum(case((attendees.c.checked_in.is_(True), 1), else_=0)).label('checked_in'),
        )
        .group_by(attendees.c.event_id)
        .subquery()
    )
    actual_total = func.coalesce(counts.c.total, 0)
    actual_checked_in = func.coalesce(counts.c.checked_in, 0)

    with database.session() as session:
        rows = session.execute(
            select(
                events.c.id,
                events.c.title,
                events.c.attendees_count,
                events.c.checked_in_count,
                actual_total.label('actual_total'),
                actual_checked_in.label('actual_checked_in'),
            )
            .select_from(events.outerjoin(counts, counts.c.event_id == events.c.id))
            .where(
                (events.c.attendees_count != actual_total)
                | (events.c.checked_in_count != actual_checked_in)
            )
            .order_by(events.c.date.desc(), events.c.time.desc())
        ).all()

    drift = [
        CounterDrift(
            event_id=row.id,
            title=row.title,
            stored_attendees=row.attendees_count,
            actual_attendees=row.actual_total,
            stored_checked_in=row.checked_in_count,
            actual_checked_in=row.actual_checked_in,
        )
        for row in rows
    ]
    if drift:
        logger.warning(f"Found {len(drift)} events with drifted counters")
    return drift
