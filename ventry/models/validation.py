"""Input validation and normalization for event and attendee fields.

Everything here runs before a repository touches storage, so a
ValidationError always means nothing was written.
"""

from datetime import date, time
from typing import Any, Dict, Optional

class ValidationError(ValueError):
    """Raised when caller-supplied fields are invalid."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

def require_text(field: str, value: Any) -> str:
    """Return the stripped value of a required text field."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "is required")
    return value.strip()

def optional_text(field: str, value: Any) -> Optional[str]:
    """Return the stripped value of an optional text field, or None if blank."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    value = value.strip()
    return value or None

def event_date(value: Any) -> str:
    """Validate a calendar date and return it as YYYY-MM-DD."""
    text = require_text('date', value)
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        raise ValidationError('date', f"'{text}' is not a YYYY-MM-DD date") from None

def event_time(value: Any) -> str:
    """Validate a time of day and return it as HH:MM:SS."""
    text = require_text('time', value)
    try:
        parsed = time.fromisoformat(text)
    except ValueError:
        raise ValidationError('time', f"'{text}' is not a HH:MM:SS time") from None
    if parsed.tzinfo is not None:
        raise ValidationError('time', "must not carry a timezone")
    return parsed.replace(microsecond=0).isoformat()

def expected_attendees(value: Any) -> Optional[int]:
    """Validate the optional planning estimate of attendees."""
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError('expected_attendees', "must be an integer")
    if value < 0:
        raise ValidationError('expected_attendees', "must not be negative")
    return value

EVENT_FIELD_VALIDATORS = {
    'title': lambda value: require_text('title', value),
    'date': event_date,
    'time': event_time,
    'location': lambda value: optional_text('location', value),
    'notes': lambda value: optional_text('notes', value),
    'expected_attendees': expected_attendees,
}

ATTENDEE_FIELD_VALIDATORS = {
    'name': lambda value: require_text('name', value),
    'email': lambda value: optional_text('email', value),
    'phone': lambda value: optional_text('phone', value),
}

def _validate(
    data: Dict[str, Any],
    validators: Dict[str, Any],
    partial: bool
) -> Dict[str, Any]:
    unknown = [key for key in data if key not in validators]
    if unknown:
        raise ValidationError(unknown[0], "cannot be set")

    if partial:
        return {key: validators[key](value) for key, value in data.items()}
    return {key: validator(data.get(key)) for key, validator in validators.items()}

def validate_event_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Validate and normalize event fields.

    Args:
        data: Caller-supplied fields
        partial: If True only the supplied fields are validated and returned
                 (updates); otherwise every editable field is returned with
                 absent optionals set to None (creation)

    Raises:
        ValidationError: On unknown or protected fields, or invalid values
    """
    return _validate(data, EVENT_FIELD_VALIDATORS, partial)

def validate_attendee_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate and normalize attendee fields (see validate_event_fields)."""
    return _validate(data, ATTENDEE_FIELD_VALIDATORS, partial)
