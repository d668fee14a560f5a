"""Models package initialization."""

from .base import Base
from .event import Event
from .attendee import Attendee
from .validation import ValidationError

__all__ = ['Base', 'Event', 'Attendee', 'ValidationError']
