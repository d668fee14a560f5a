import pytest

from ventry.models.validation import (
    ValidationError,
    event_time,
    validate_attendee_fields,
    validate_event_fields,
)


class TestEventFields:

    def test_creation_fills_absent_optionals_with_none(self):
        fields = validate_event_fields({"title": " Launch ", "date": "2025-06-01", "time": "18:00:00"})

        assert fields == {
            "title": "Launch",
            "date": "2025-06-01",
            "time": "18:00:00",
            "location": None,
            "notes": None,
            "expected_attendees": None,
        }

    def test_partial_returns_only_supplied_fields(self):
        assert validate_event_fields({"notes": " hi "}, partial=True) == {"notes": "hi"}
        assert validate_event_fields({}, partial=True) == {}

    @pytest.mark.parametrize("value, expected", [
        ("18:00", "18:00:00"),
        ("18:00:00", "18:00:00"),
        ("07:05:09", "07:05:09"),
    ])
    def test_time_is_normalized(self, value, expected):
        assert event_time(value) == expected

    @pytest.mark.parametrize("value", ["25:00:00", "18:00:00+02:00", "noon", ""])
    def test_bad_times(self, value):
        with pytest.raises(ValidationError) as excinfo:
            event_time(value)

        assert excinfo.value.field == "time"

    @pytest.mark.parametrize("value", [True, 1.5, "10"])
    def test_expected_attendees_must_be_integer(self, value):
        with pytest.raises(ValidationError):
            validate_event_fields({"expected_attendees": value}, partial=True)

    def test_zero_expected_attendees_allowed(self):
        assert validate_event_fields({"expected_attendees": 0}, partial=True) == {"expected_attendees": 0}


class TestAttendeeFields:

    def test_blank_contacts_become_none(self):
        assert validate_attendee_fields({"name": "Ada", "email": " ", "phone": ""}) == {
            "name": "Ada", "email": None, "phone": None,
        }

    def test_error_message_names_the_field(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_attendee_fields({"name": "   "})

        assert excinfo.value.field == "name"
        assert excinfo.value.message == "is required"
        assert str(excinfo.value) == "name: is required"

    def test_non_string_contact_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_attendee_fields({"name": "Ada", "phone": 5550100})

        assert excinfo.value.field == "phone"
