import pytest
from sqlalchemy import func, select

from ventry.db import Database, DatabaseConfig, ensure_schema
from ventry.models import Attendee, Event
from ventry.repositories import AttendeeRepository, EventRepository


@pytest.fixture
def database():
    """Fresh in-memory database for each test"""
    db = Database(DatabaseConfig.in_memory())
    yield db
    db.dispose()


@pytest.fixture
def capabilities(database):
    return ensure_schema(database)


@pytest.fixture
def attendee_repo(database, capabilities):
    return AttendeeRepository(database, capabilities)


@pytest.fixture
def event_repo(database, attendee_repo):
    return EventRepository(database, attendee_repo)


@pytest.fixture
def launch_event(event_repo):
    return event_repo.add_event({"title": "Launch", "date": "2025-06-01", "time": "18:00:00"})


def count_attendee_rows(database, event_id, checked_in=None):
    """Count attendee rows straight from the table, bypassing the counters"""
    attendees = Attendee.__table__
    query = select(func.count()).select_from(attendees).where(attendees.c.event_id == event_id)
    if checked_in is not None:
        query = query.where(attendees.c.checked_in.is_(checked_in))
    with database.session() as session:
        return session.execute(query).scalar_one()


def stored_counters(database, event_id):
    """(attendees_count, checked_in_count) as stored on the event row"""
    events = Event.__table__
    with database.session() as session:
        row = session.execute(
            select(events.c.attendees_count, events.c.checked_in_count)
            .where(events.c.id == event_id)
        ).one()
    return row.attendees_count, row.checked_in_count


def assert_counters_consistent(database, event_id):
    attendees_count, checked_in_count = stored_counters(database, event_id)
    assert attendees_count == count_attendee_rows(database, event_id)
    assert checked_in_count == count_attendee_rows(database, event_id, checked_in=True)
    assert 0 <= checked_in_count <= attendees_count
