"""Asynchronous facade over the repositories.

EventStore gives UI-facing callers a uniform awaitable API. Each call is
handed to a single worker thread, so the event loop never blocks on storage
and every transaction runs to completion before the next one starts.

Usage:
    async with EventStore(Database(DatabaseConfig())) as store:
        event = await store.create_event({
            'title': 'Launch', 'date': '2025-06-01', 'time': '18:00:00'
        })
        attendee = await store.add_attendee(event['id'], {'name': 'Ada'})
        await store.toggle_check_in(attendee['id'])

Calls awaited one after another observe each other's writes. Calls started
concurrently (e.g. with asyncio.gather) are executed one at a time in
submission order, but callers should not rely on any particular order.
"""

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .db import (
    ConnectionError,
    Database,
    DatabaseConfig,
    SchemaCapabilities,
    SessionError,
    ensure_schema,
)
from .repositories import AttendeeRepository, EventRepository, ImportResult

logger = logging.getLogger(__name__)

T = TypeVar('T')

class EventStore:
    """Awaitable access to events and attendees."""

    def __init__(self, database: Optional[Database] = None, config: Optional[DatabaseConfig] = None):
        """
        Args:
            database: Store handle to use. If omitted one is created from
                      config and disposed again by close()
            config: Configuration for the database created when no handle
                    is passed
        """
        self._owns_database = database is None
        self.database = database or Database(config)
        self.capabilities: Optional[SchemaCapabilities] = None
        self._events: Optional[EventRepository] = None
        self._attendees: Optional[AttendeeRepository] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='ventry-store')
        self._closed = False

    async def __aenter__(self) -> 'EventStore':
        await self.ensure_schema()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        if self._closed:
            raise ConnectionError("Event store closed")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args))

    @property
    def events(self) -> EventRepository:
        if self._events is None:
            raise SessionError("Event store not initialized, call ensure_schema() first")
        return self._events

    @property
    def attendees(self) -> AttendeeRepository:
        if self._attendees is None:
            raise SessionError("Event store not initialized, call ensure_schema() first")
        return self._attendees

    async def ensure_schema(self) -> SchemaCapabilities:
        """
        Create or migrate the schema and wire up the repositories.

        Raises:
            SchemaError: If the core tables cannot be created
        """
        capabilities = await self._run(ensure_schema, self.database)
        self.capabilities = capabilities
        self._attendees = AttendeeRepository(self.database, capabilities)
        self._events = EventRepository(self.database, self._attendees)
        logger.info("Event store ready")
        return capabilities

    # Events

    async def list_events(self) -> List[Dict[str, Any]]:
        return await self._run(self.events.get_events)

    async def list_event_summaries(self) -> List[Dict[str, Any]]:
        return await self._run(self.events.get_event_summaries)

    async def get_event(self, event_id: str) -> Optional[Dict[str, Any]]:
        return await self._run(self.events.get_event_by_id, event_id)

    async def create_event(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self._run(self.events.add_event, fields)

    async def update_event(self, event_id: str, fields: Dict[str, Any]) -> bool:
        return await self._run(self.events.update_event, event_id, fields)

    async def delete_event(self, event_id: str) -> bool:
        return await self._run(self.events.delete_event, event_id)

    # Attendees

    async def list_attendees(self, event_id: str) -> List[Dict[str, Any]]:
        return await self._run(self.attendees.get_attendees, event_id)

    async def search_attendees(self, event_id: str, query: str) -> List[Dict[str, Any]]:
        return await self._run(self.attendees.search_attendees, event_id, query)

    async def get_attendee(self, attendee_id: str) -> Optional[Dict[str, Any]]:
        return await self._run(self.attendees.get_attendee, attendee_id)

    async def add_attendee(self, event_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self._run(self.attendees.add_attendee, event_id, fields)

    async def import_attendees(self, event_id: str, rows: List[Dict[str, Any]]) -> ImportResult:
        return await self._run(self.attendees.import_attendees, event_id, rows)

    async def update_attendee(self, attendee_id: str, fields: Dict[str, Any]) -> bool:
        return await self._run(self.attendees.update_attendee, attendee_id, fields)

    async def toggle_check_in(self, attendee_id: str) -> bool:
        return await self._run(self.attendees.toggle_check_in, attendee_id)

    async def delete_attendee(self, attendee_id: str) -> bool:
        return await self._run(self.attendees.delete_attendee, attendee_id)

    async def close(self) -> None:
        """Wait for queued work, stop the worker and release the database."""
        if self._closed:
            return
        self._closed = True
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, functools.partial(self._executor.shutdown, wait=True))
        if self._owns_database:
            self.database.dispose()
