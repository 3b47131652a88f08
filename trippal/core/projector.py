"""Read-side view of an itinerary: days in order with their activities."""

import logging
from dataclasses import dataclass

from trippal.models import Activity, Itinerary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayView:
    """A day column ready for display."""

    day_id: str
    title: str
    position: int
    activities: tuple[Activity, ...]

    @property
    def is_empty(self) -> bool:
        return not self.activities


def project_day(itinerary: Itinerary, day_id: str, position: int = 0) -> DayView | None:
    """Resolve one day's activity ids into activities.

    Ids without a matching activity are skipped. Returns None if the day
    itself does not exist.
    """
    day = itinerary.days.get(day_id)
    if day is None:
        return None

    activities = []
    for activity_id in day.activity_ids:
        activity = itinerary.activities.get(activity_id)
        if activity is None:
            logger.warning("Skipping dangling activity %s in day %s", activity_id, day_id)
            continue
        activities.append(activity)

    return DayView(day_id=day.id, title=day.title, position=position, activities=tuple(activities))


def project_itinerary(itinerary: Itinerary) -> list[DayView]:
    """Materialize every day in ``day_order``."""
    views = []
    for day_id in itinerary.day_order:
        view = project_day(itinerary, day_id, position=len(views))
        if view is None:
            logger.warning("Skipping dangling day %s in day_order", day_id)
            continue
        views.append(view)
    return views
