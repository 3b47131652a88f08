"""Tests for the file-backed JSON datastore."""

import json

import pytest

from trippal.core.errors import NotFoundError, TransportError
from trippal.models import ActivityDocument, DayDocument, Trip
from trippal.storage import JSONStore


@pytest.fixture
def db(tmp_path):
    return JSONStore(tmp_path / "data" / "db.json")


class TestJSONStore:
    """Tests for JSONStore."""

    def test_missing_file_is_empty(self, db):
        """Test that a new datastore has no records."""
        assert db.list_trips() == []
        assert db.list_days("trip-1") == []
        assert db.list_activities("trip-1") == []

    def test_trip_round_trip(self, db, trip):
        """Test creating and reading a trip."""
        db.create_trip(trip)
        loaded = db.get_trip("trip-1")
        assert loaded.title == "Goa Beach Vacation"
        assert [t.id for t in db.list_trips()] == ["trip-1"]

    def test_file_layout(self, db, trip):
        """Test that records are written in json-server layout."""
        db.create_trip(trip)
        db.create_day(DayDocument(id="day-1", trip_id="trip-1", title="Day 1", activity_ids=["a-1"]))

        data = json.loads(db.db_path.read_text())
        assert set(data) == {"trips", "days", "activities"}
        assert data["days"][0]["tripId"] == "trip-1"
        assert data["days"][0]["activityIds"] == ["a-1"]
        assert data["trips"][0]["timeZone"] == "UTC"

    def test_days_filtered_by_trip(self, db):
        """Test that listing only returns the trip's days."""
        db.create_day(DayDocument(id="d1", trip_id="trip-1", title="Day 1"))
        db.create_day(DayDocument(id="d2", trip_id="trip-2", title="Day 1"))
        assert [d.id for d in db.list_days("trip-1")] == ["d1"]

    def test_update_and_delete_day(self, db):
        """Test replacing and removing a day."""
        db.create_day(DayDocument(id="d1", trip_id="trip-1", title="Day 1"))
        db.update_day("d1", DayDocument(id="d1", trip_id="trip-1", title="Arrival"))
        assert db.list_days("trip-1")[0].title == "Arrival"

        db.delete_day("d1")
        assert db.list_days("trip-1") == []

    def test_activity_crud(self, db):
        """Test the activity collection."""
        doc = ActivityDocument(id="a1", trip_id="trip-1", day_id="d1", content="Beach", type="leisure")
        db.create_activity(doc)
        db.update_activity("a1", doc.model_copy(update={"notes": "Bring towels"}))
        assert db.list_activities("trip-1")[0].notes == "Bring towels"
        db.delete_activity("a1")
        assert db.list_activities("trip-1") == []

    def test_missing_records(self, db):
        """Test that unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            db.get_trip("nope")
        with pytest.raises(NotFoundError):
            db.update_day("nope", DayDocument(id="nope", trip_id="t", title="x"))
        with pytest.raises(NotFoundError):
            db.delete_activity("nope")

    def test_duplicate_create(self, db):
        """Test that creating an existing id fails."""
        day = DayDocument(id="d1", trip_id="trip-1", title="Day 1")
        db.create_day(day)
        with pytest.raises(TransportError) as exc_info:
            db.create_day(day)
        assert exc_info.value.status_code == 409

    def test_corrupt_file(self, db):
        """Test that an unreadable file raises TransportError."""
        db.db_path.write_text("{not json")
        with pytest.raises(TransportError):
            db.list_trips()

    @pytest.mark.parametrize("content", ["[]", '"trips"', '{"days": {"d1": {}}}'])
    def test_unexpected_file_layout(self, db, content):
        """Test that valid JSON of the wrong shape raises TransportError."""
        db.db_path.write_text(content)
        with pytest.raises(TransportError):
            db.list_days("trip-1")

    def test_delete_trip_cascades(self, db, trip):
        """Test deleting a trip removes its days and activities."""
        db.create_trip(trip)
        db.create_day(DayDocument(id="d1", trip_id="trip-1", title="Day 1"))
        db.create_activity(ActivityDocument(id="a1", trip_id="trip-1", day_id="d1", content="x"))
        db.create_trip(Trip(id="trip-2", title="Other"))
        db.create_day(DayDocument(id="d2", trip_id="trip-2", title="Day 1"))

        db.delete_trip("trip-1")

        assert [t.id for t in db.list_trips()] == ["trip-2"]
        assert db.list_days("trip-1") == []
        assert db.list_activities("trip-1") == []
        assert len(db.list_days("trip-2")) == 1
