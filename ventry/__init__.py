"""Local-first storage for events and their attendees."""

from .store import EventStore

__all__ = ['EventStore']
