import pytest

from ventry.db import SessionError
from ventry.models import ValidationError

from tests.conftest import count_attendee_rows


class TestAddEvent:

    def test_create_and_retrieve(self, event_repo):
        """Scenario: a new event starts with zero counters and no attendees"""
        event = event_repo.add_event({"title": "Launch", "date": "2025-06-01", "time": "18:00:00"})

        assert event["attendees_count"] == 0
        assert event["checked_in_count"] == 0
        assert event["id"]
        assert event["created_at"] == event["updated_at"]

        loaded = event_repo.get_event_by_id(event["id"])
        assert loaded["attendees"] == []
        assert {key: loaded[key] for key in event} == event

    def test_absent_optionals_are_stored_as_none(self, event_repo, launch_event):
        loaded = event_repo.get_event_by_id(launch_event["id"])

        assert loaded["location"] is None
        assert loaded["notes"] is None
        assert loaded["expected_attendees"] is None

    def test_blank_optionals_are_stored_as_none(self, event_repo):
        event = event_repo.add_event({
            "title": "Launch", "date": "2025-06-01", "time": "18:00:00",
            "location": "   ", "notes": "",
        })

        assert event["location"] is None
        assert event_repo.get_event_by_id(event["id"])["notes"] is None

    def test_optional_fields_are_kept(self, event_repo):
        event = event_repo.add_event({
            "title": "Launch", "date": "2025-06-01", "time": "18:00",
            "location": " Oslo ", "notes": "Bring badges", "expected_attendees": 120,
        })

        loaded = event_repo.get_event_by_id(event["id"])
        assert loaded["location"] == "Oslo"
        assert loaded["notes"] == "Bring badges"
        assert loaded["expected_attendees"] == 120
        assert loaded["time"] == "18:00:00"

    def test_ids_are_unique(self, event_repo):
        fields = {"title": "Launch", "date": "2025-06-01", "time": "18:00:00"}
        ids = {event_repo.add_event(fields)["id"] for _ in range(20)}

        assert len(ids) == 20

    @pytest.mark.parametrize("fields, bad_field", [
        ({"date": "2025-06-01", "time": "18:00:00"}, "title"),
        ({"title": "  ", "date": "2025-06-01", "time": "18:00:00"}, "title"),
        ({"title": "Launch", "date": "01/06/2025", "time": "18:00:00"}, "date"),
        ({"title": "Launch", "date": "2025-06-01", "time": "6pm"}, "time"),
        ({"title": "Launch", "date": "2025-06-01", "time": "18:00:00", "expected_attendees": -1}, "expected_attendees"),
        ({"title": "Launch", "date": "2025-06-01", "time": "18:00:00", "attendees_count": 5}, "attendees_count"),
        ({"title": "Launch", "date": "2025-06-01", "time": "18:00:00", "id": "mine"}, "id"),
    ])
    def test_invalid_fields_are_rejected(self, event_repo, fields, bad_field):
        with pytest.raises(ValidationError) as excinfo:
            event_repo.add_event(fields)

        assert excinfo.value.field == bad_field
        assert event_repo.get_events() == []


class TestGetEvents:

    def test_ordered_by_date_then_time_descending(self, event_repo):
        for title, date, time in [
            ("Breakfast", "2025-06-01", "08:00:00"),
            ("Next month", "2025-07-01", "09:00:00"),
            ("Dinner", "2025-06-01", "19:30:00"),
            ("Last year", "2024-12-31", "23:00:00"),
        ]:
            event_repo.add_event({"title": title, "date": date, "time": time})

        titles = [event["title"] for event in event_repo.get_events()]

        assert titles == ["Next month", "Dinner", "Breakfast", "Last year"]

    def test_listing_has_no_attendees_key(self, event_repo, launch_event):
        events = event_repo.get_events()

        assert len(events) == 1
        assert "attendees" not in events[0]

    def test_summaries(self, event_repo, attendee_repo, launch_event):
        attendee = attendee_repo.add_attendee(launch_event["id"], {"name": "Ada"})
        attendee_repo.add_attendee(launch_event["id"], {"name": "Grace"})
        attendee_repo.toggle_check_in(attendee["id"])

        assert event_repo.get_event_summaries() == [{
            "id": launch_event["id"],
            "title": "Launch",
            "date": "2025-06-01",
            "attendees_count": 2,
            "checked_in_count": 1,
        }]


class TestGetEventById:

    def test_missing_event_is_none(self, event_repo):
        assert event_repo.get_event_by_id("does-not-exist") is None

    def test_includes_attendees_sorted_by_name(self, event_repo, attendee_repo, launch_event):
        for name in ["charlie", "Alice", "bob"]:
            attendee_repo.add_attendee(launch_event["id"], {"name": name})

        loaded = event_repo.get_event_by_id(launch_event["id"])

        assert [a["name"] for a in loaded["attendees"]] == ["Alice", "bob", "charlie"]

    def test_attendee_failure_still_returns_event(self, event_repo, attendee_repo, launch_event, monkeypatch, caplog):
        def broken(event_id):
            raise SessionError("no such table: attendees")

        monkeypatch.setattr(attendee_repo, "get_attendees", broken)

        loaded = event_repo.get_event_by_id(launch_event["id"])

        assert loaded["title"] == "Launch"
        assert loaded["attendees"] == []
        assert "without attendees" in caplog.text


class TestUpdateEvent:

    def test_updates_only_supplied_fields(self, event_repo, launch_event):
        assert event_repo.update_event(launch_event["id"], {"location": "Main hall"}) is True

        loaded = event_repo.get_event_by_id(launch_event["id"])
        assert loaded["location"] == "Main hall"
        assert loaded["title"] == "Launch"
        assert loaded["created_at"] == launch_event["created_at"]
        assert loaded["updated_at"] >= launch_event["updated_at"]

    def test_clearing_an_optional_field(self, event_repo):
        event = event_repo.add_event({
            "title": "Launch", "date": "2025-06-01", "time": "18:00:00", "notes": "draft",
        })

        event_repo.update_event(event["id"], {"notes": None})

        assert event_repo.get_event_by_id(event["id"])["notes"] is None

    def test_missing_event_returns_false(self, event_repo):
        assert event_repo.update_event("does-not-exist", {"title": "Renamed"}) is False

    def test_empty_update_is_noop_success(self, event_repo, launch_event, database, monkeypatch):
        def no_storage():
            raise AssertionError("storage must not be touched")

        monkeypatch.setattr(database, "session", no_storage)

        assert event_repo.update_event(launch_event["id"], {}) is True

    @pytest.mark.parametrize("fields", [
        {"id": "other"},
        {"created_at": "2020-01-01T00:00:00"},
        {"attendees_count": 10},
        {"checked_in_count": 1},
        {"title": ""},
    ])
    def test_rejected_fields_leave_event_untouched(self, event_repo, launch_event, fields):
        with pytest.raises(ValidationError):
            event_repo.update_event(launch_event["id"], fields)

        loaded = event_repo.get_event_by_id(launch_event["id"])
        assert loaded["updated_at"] == launch_event["updated_at"]
        assert loaded["attendees_count"] == 0


class TestDeleteEvent:

    def test_delete(self, event_repo, launch_event):
        assert event_repo.delete_event(launch_event["id"]) is True
        assert event_repo.get_event_by_id(launch_event["id"]) is None
        assert event_repo.delete_event(launch_event["id"]) is False

    def test_cascades_to_attendees(self, event_repo, attendee_repo, launch_event, database):
        """Deleting an event with N attendees leaves no orphaned rows"""
        for name in ["Ada", "Grace", "Linus"]:
            attendee = attendee_repo.add_attendee(launch_event["id"], {"name": name})
        attendee_repo.toggle_check_in(attendee["id"])
        assert count_attendee_rows(database, launch_event["id"]) == 3

        assert event_repo.delete_event(launch_event["id"]) is True

        assert attendee_repo.get_attendees(launch_event["id"]) == []
        assert count_attendee_rows(database, launch_event["id"]) == 0
        assert attendee_repo.get_attendee(attendee["id"]) is None

    def test_other_events_keep_their_attendees(self, event_repo, attendee_repo, launch_event):
        other = event_repo.add_event({"title": "Afterparty", "date": "2025-06-01", "time": "22:00:00"})
        attendee_repo.add_attendee(other["id"], {"name": "Ada"})

        event_repo.delete_event(launch_event["id"])

        assert len(attendee_repo.get_attendees(other["id"])) == 1
        assert event_repo.get_event_by_id(other["id"])["attendees_count"] == 1
