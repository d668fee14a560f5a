"""Timestamp and identifier helpers shared by the repositories."""

import uuid
from datetime import datetime, timezone

def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds')

def new_id() -> str:
    """Generate an opaque, unique record identifier."""
    return uuid.uuid4().hex
