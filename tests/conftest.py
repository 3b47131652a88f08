"""Shared fixtures for itinerary tests."""

import pytest

from trippal.core.store import ItineraryStore
from trippal.models import Activity, Day, Itinerary, Trip


def build_itinerary(layout: dict[str, list[str]]) -> Itinerary:
    """Build an itinerary from ``{day_id: [activity_id, ...]}`` in order."""
    days = {
        day_id: Day(id=day_id, title=f"Day {i + 1}", activity_ids=tuple(activity_ids))
        for i, (day_id, activity_ids) in enumerate(layout.items())
    }
    activities = {
        activity_id: Activity(id=activity_id, content=f"Activity {activity_id}")
        for activity_ids in layout.values()
        for activity_id in activity_ids
    }
    return Itinerary(day_order=tuple(layout), days=days, activities=activities)


@pytest.fixture
def make_itinerary():
    return build_itinerary


@pytest.fixture
def build_store():
    """Factory for stores with fixed, readable ids."""

    def _build(layout: dict[str, list[str]]) -> ItineraryStore:
        return ItineraryStore(build_itinerary(layout))

    return _build


@pytest.fixture
def store(build_store):
    return build_store({"D1": ["A1", "A2", "A3"], "D2": ["A4"], "D3": []})


@pytest.fixture
def trip():
    return Trip(id="trip-1", title="Goa Beach Vacation", location="Goa, India")
