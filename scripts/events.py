#!/usr/bin/env python3

"""
This script provides a command-line interface for inspecting the local
Ventry database.

This script handles:
- Creating or migrating the schema
- Listing events with their counters
- Showing a single event with its attendees
- Checking that stored counters match the attendee rows

The database path defaults to VENTRY_DATABASE_PATH (or data/ventry.db) and
can be overridden with --db.

For usage information, run:
    python events.py --help

Common use cases:
    # Create tables and apply pending migrations
    python events.py init

    # List all events
    python events.py list

    # Show one event and its attendees
    python events.py show 3f2a9c...

    # Verify counters, exit status 1 on drift
    python events.py check
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to Python path
sys.path.append(str(Path(__file__).parent.parent))

from ventry.db import Database, DatabaseConfig, ensure_schema
from ventry.db.maintenance import find_counter_drift
from ventry.repositories import AttendeeRepository, EventRepository
from ventry.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

def open_database(db_path: Optional[str]) -> Database:
    """Open the database at the given path (or the configured default)."""
    config = DatabaseConfig(sqlite_path=Path(db_path) if db_path else None)
    return Database(config)

def format_event(event: Dict[str, Any]) -> str:
    return (
        f"{event['date']} {event['time']}  {event['title']}"
        f"  [{event['checked_in_count']}/{event['attendees_count']} checked in]"
        f"  id={event['id']}"
    )

def print_events_info(events: List[Dict[str, Any]]) -> None:
    """Print one summary line per event."""
    logger.info(f"Found {len(events)} events")
    for event in events:
        logger.info(format_event(event))

def show_event(events: EventRepository, event_id: str) -> bool:
    """Print an event with its attendees. Returns False if not found."""
    event = events.get_event_by_id(event_id)
    if not event:
        logger.error(f"No event found with ID {event_id}")
        return False

    logger.info(format_event(event))
    if event['location']:
        logger.info(f"Location: {event['location']}")
    if event['notes']:
        logger.info(f"Notes: {event['notes']}")
    for attendee in event['attendees']:
        mark = 'x' if attendee['checked_in'] else ' '
        contact = ', '.join(filter(None, [attendee['email'], attendee['phone']]))
        logger.info(f"  [{mark}] {attendee['name']}" + (f" <{contact}>" if contact else ''))
    return True

def check_counters(database: Database) -> bool:
    """Report counter drift. Returns True when all counters are consistent."""
    drift = find_counter_drift(database)
    if not drift:
        logger.info("All event counters match their attendees")
        return True
    for entry in drift:
        logger.error(str(entry))
    return False

def main() -> int:
    """Main entry point for the script"""
    parser = argparse.ArgumentParser(
        description='Ventry local database tool',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Create or migrate the schema
  events.py init

  # List events in a specific database file
  events.py --db /tmp/ventry.db list

  # View a specific event by ID
  events.py show 3f2a9c...

  # Check counters
  events.py check
        """
    )
    parser.add_argument('--db', help='Path to the SQLite database file')
    parser.add_argument('--quiet', action='store_true', help='Only log warnings and errors')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')
    subparsers.add_parser('init', help='Create tables and apply migrations')
    subparsers.add_parser('list', help='List events')
    show_parser = subparsers.add_parser('show', help='Show specific event')
    show_parser.add_argument('event_id', help='ID of the event to show')
    subparsers.add_parser('check', help='Check event counters against attendee rows')

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return 2

    setup_logging('WARNING' if args.quiet else None)

    database = open_database(args.db)
    try:
        capabilities = ensure_schema(database)
        attendees = AttendeeRepository(database, capabilities)
        events = EventRepository(database, attendees)

        if args.command == 'init':
            logger.info(f"Schema ready: {capabilities}")
        elif args.command == 'list':
            print_events_info(events.get_events())
        elif args.command == 'show':
            if not show_event(events, args.event_id):
                return 1
        elif args.command == 'check':
            if not check_counters(database):
                return 1
        return 0
    finally:
        database.dispose()

if __name__ == "__main__":
    sys.exit(main())
