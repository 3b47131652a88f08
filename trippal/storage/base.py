"""Data-access protocol for trips, days and activities."""

from typing import Protocol

from trippal.models import ActivityDocument, DayDocument, Trip


class DataAccess(Protocol):
    """Persistence collaborator used by a planner session.

    Implementations raise ``TransportError`` when the backend cannot be
    used and ``NotFoundError`` when a record id is unknown.
    """

    def list_trips(self) -> list[Trip]:
        """List all trips."""
        ...

    def get_trip(self, trip_id: str) -> Trip:
        """Get a trip by id."""
        ...

    def create_trip(self, trip: Trip) -> Trip:
        """Create a trip record."""
        ...

    def list_days(self, trip_id: str) -> list[DayDocument]:
        """List the days of a trip."""
        ...

    def list_activities(self, trip_id: str) -> list[ActivityDocument]:
        """List the activities of a trip."""
        ...

    def create_day(self, day: DayDocument) -> DayDocument:
        ...

    def update_day(self, day_id: str, day: DayDocument) -> DayDocument:
        ...

    def delete_day(self, day_id: str) -> None:
        ...

    def create_activity(self, activity: ActivityDocument) -> ActivityDocument:
        ...

    def update_activity(self, activity_id: str, activity: ActivityDocument) -> ActivityDocument:
        ...

    def delete_activity(self, activity_id: str) -> None:
        ...
