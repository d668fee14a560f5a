"""Repositories over the events and attendees tables."""

from .attendees import AttendeeRepository, ImportResult, SkippedRow
from .events import EventRepository

__all__ = ['AttendeeRepository', 'EventRepository', 'ImportResult', 'SkippedRow']
