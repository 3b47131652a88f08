from datetime import date as DateType, datetime, time as TimeType
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p")


def parse_date(v) -> DateType | None:
    """Read a trip date: a date, or an ISO string as sent by the date picker."""
    if not v:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, DateType):
        return v
    try:
        return DateType.fromisoformat(str(v).strip()[:10])
    except ValueError:
        return None


def parse_time(v: str | None) -> TimeType | None:
    """Read an activity time typed as 24-hour or 12-hour clock."""
    if not v:
        return None
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(v.strip(), fmt).time()
        except ValueError:
            continue
    return None


def new_id(prefix: str) -> str:
    """Generate a unique entity id such as ``day-<uuid>``."""
    return f"{prefix}-{uuid4()}"


class ActivityType(str, Enum):
    MEAL = "meal"
    ATTRACTION = "attraction"
    LEISURE = "leisure"
    TRAVEL = "travel"
    OTHER = "other"


# Map common free-form variations to valid enum values
ACTIVITY_TYPE_ALIASES = {
    "food": "meal",
    "dining": "meal",
    "restaurant": "meal",
    "breakfast": "meal",
    "lunch": "meal",
    "dinner": "meal",
    "sightseeing": "attraction",
    "museum": "attraction",
    "tour": "attraction",
    "visit": "attraction",
    "cultural": "attraction",
    "relaxation": "leisure",
    "beach": "leisure",
    "shopping": "leisure",
    "spa": "leisure",
    "rest": "leisure",
    "transport": "travel",
    "flight": "travel",
    "train": "travel",
    "bus": "travel",
    "taxi": "travel",
    "transfer": "travel",
}


class Expense(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("expense"))
    amount: Decimal = Field(ge=0)
    description: str
    currency: str = "USD"
    date: datetime = Field(default_factory=datetime.now)

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or "USD"
        return v


class Reminder(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: new_id("reminder"))
    time: str
    message: str
    is_active: bool = True


class Attachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("attachment"))
    name: str
    type: str = "application/octet-stream"
    size: int = Field(default=0, ge=0)
    url: Optional[str] = None


class ActivityFields(BaseModel):
    """Editable fields shared by activities and activity drafts."""

    content: str
    time: Optional[str] = None
    type: ActivityType = ActivityType.ATTRACTION
    location: Optional[str] = None
    notes: Optional[str] = None
    expenses: tuple[Expense, ...] = ()
    reminders: tuple[Reminder, ...] = ()
    attachments: tuple[Attachment, ...] = ()

    @field_validator("type", mode="before")
    @classmethod
    def normalize_activity_type(cls, v):
        """Normalize activity type to handle free-form variations."""
        if v is None:
            return ActivityType.OTHER
        if isinstance(v, ActivityType):
            return v
        if isinstance(v, str):
            v_lower = v.lower().strip()
            # Check aliases first
            if v_lower in ACTIVITY_TYPE_ALIASES:
                v_lower = ACTIVITY_TYPE_ALIASES[v_lower]
            try:
                return ActivityType(v_lower)
            except ValueError:
                return ActivityType.OTHER
        return v

    @field_validator("time", mode="before")
    @classmethod
    def normalize_time(cls, v):
        """Store parseable times as HH:MM, keep anything else as typed."""
        if v is None:
            return None
        if isinstance(v, TimeType):
            return v.strftime("%H:%M")
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            parsed = parse_time(v)
            return parsed.strftime("%H:%M") if parsed else v
        return v

    @field_validator("location", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ActivityDraft(ActivityFields):
    """Form data for an activity that has not been assigned an id yet."""

    @field_validator("content")
    @classmethod
    def content_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("activity content must not be blank")
        return v.strip()

    def to_activity(self, activity_id: str) -> "Activity":
        return Activity(id=activity_id, **self.model_dump())


class Activity(ActivityFields):
    model_config = ConfigDict(frozen=True)

    id: str

    def start_time(self) -> TimeType | None:
        return parse_time(self.time)

    def total_expenses(self) -> dict[str, Decimal]:
        """Sum expenses per currency."""
        totals: dict[str, Decimal] = {}
        for expense in self.expenses:
            totals[expense.currency] = totals.get(expense.currency, Decimal("0")) + expense.amount
        return totals


class Day(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    activity_ids: tuple[str, ...] = ()

    @field_validator("activity_ids")
    @classmethod
    def unique_activity_ids(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(set(v)) != len(v):
            raise ValueError("activity_ids must not contain duplicates")
        return v


class Itinerary(BaseModel):
    """Snapshot of one trip's days and activities.

    ``day_order`` holds the display order, ``days`` and ``activities`` are
    flat entity maps keyed by id. Snapshots are never mutated: the store
    builds a new one for every change.
    """

    model_config = ConfigDict(frozen=True)

    day_order: tuple[str, ...] = ()
    days: dict[str, Day] = Field(default_factory=dict)
    activities: dict[str, Activity] = Field(default_factory=dict)

    @model_validator(mode="after")
    def unique_day_order(self):
        if len(set(self.day_order)) != len(self.day_order):
            raise ValueError("day_order must not contain duplicates")
        return self

    def get_day(self, day_id: str) -> Optional[Day]:
        return self.days.get(day_id)

    def get_activity(self, activity_id: str) -> Optional[Activity]:
        return self.activities.get(activity_id)

    def total_days(self) -> int:
        return len(self.day_order)

    def owner_index(self) -> dict[str, str]:
        """Map each referenced activity id to the id of the day holding it."""
        owners = {}
        for day in self.days.values():
            for activity_id in day.activity_ids:
                owners[activity_id] = day.id
        return owners


class Trip(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: new_id("trip"))
    title: str = "My Trip"
    location: Optional[str] = None
    start_date: DateType | None = None
    end_date: DateType | None = None
    type: str = "leisure"
    time_zone: str = "UTC"

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_date_fields(cls, v):
        """Parse date strings to date objects."""
        return parse_date(v)

    def duration_days(self) -> int | None:
        if self.start_date is None or self.end_date is None:
            return None
        return (self.end_date - self.start_date).days + 1
