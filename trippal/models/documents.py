"""Persisted document shapes for the json-server style datastore."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .itinerary import Activity, ActivityFields, Day


class DayDocument(BaseModel):
    """One day as stored in the ``days`` collection."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    trip_id: str
    title: str
    activity_ids: list[str] = Field(default_factory=list)
    position: Optional[int] = None  # index in day_order; None for legacy rows

    @classmethod
    def from_day(cls, day: Day, trip_id: str, position: int | None = None) -> "DayDocument":
        return cls(
            id=day.id,
            trip_id=trip_id,
            title=day.title,
            activity_ids=list(day.activity_ids),
            position=position,
        )

    def to_day(self) -> Day:
        return Day(id=self.id, title=self.title, activity_ids=tuple(self.activity_ids))


class ActivityDocument(ActivityFields):
    """One activity as stored in the ``activities`` collection."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    trip_id: str
    day_id: str

    @classmethod
    def from_activity(cls, activity: Activity, trip_id: str, day_id: str) -> "ActivityDocument":
        return cls(trip_id=trip_id, day_id=day_id, **activity.model_dump())

    def to_activity(self) -> Activity:
        return Activity(**self.model_dump(exclude={"trip_id", "day_id"}))
