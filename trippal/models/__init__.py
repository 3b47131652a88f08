from .itinerary import (
    Activity,
    ActivityDraft,
    ActivityType,
    Attachment,
    Day,
    Expense,
    Itinerary,
    Reminder,
    Trip,
    new_id,
)
from .documents import ActivityDocument, DayDocument
from .drag import DAY_BOARD_ID, DropIntent, DropKind, DropLocation

__all__ = [
    "Activity",
    "ActivityDraft",
    "ActivityType",
    "Attachment",
    "Day",
    "Expense",
    "Itinerary",
    "Reminder",
    "Trip",
    "new_id",
    "ActivityDocument",
    "DayDocument",
    "DAY_BOARD_ID",
    "DropIntent",
    "DropKind",
    "DropLocation",
]
