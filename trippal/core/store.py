"""In-memory itinerary store.

The store owns the current ``Itinerary`` snapshot and is the only place
that changes it. Every public mutation validates its arguments first and
then commits a complete new snapshot, so a failed call leaves the previous
state untouched and callers can keep any earlier snapshot for rollback.
"""

import logging
from typing import Any, Iterable

from trippal.models import (
    DAY_BOARD_ID,
    Activity,
    ActivityDocument,
    ActivityDraft,
    Day,
    DayDocument,
    DropIntent,
    DropKind,
    Itinerary,
    new_id,
)
from trippal.models.itinerary import ActivityFields

from .errors import (
    CorruptItineraryError,
    InvalidMoveError,
    LastDayError,
    UnknownActivityError,
    UnknownDayError,
)
from .reconciler import clamp_index, splice, transfer

logger = logging.getLogger(__name__)

EDITABLE_ACTIVITY_FIELDS = frozenset(ActivityFields.model_fields)


def default_day_title(position: int) -> str:
    """Title for the day shown at 1-based ``position``."""
    return f"Day {position}"


def validate_itinerary(itinerary: Itinerary) -> None:
    """Check the invariants the store relies on.

    Raises:
        CorruptItineraryError: describing the first violation found
    """
    if not itinerary.day_order:
        raise CorruptItineraryError("Itinerary must contain at least one day")

    if set(itinerary.day_order) != set(itinerary.days):
        raise CorruptItineraryError("day_order does not match the set of days")

    owners: dict[str, str] = {}
    for key, day in itinerary.days.items():
        if key != day.id:
            raise CorruptItineraryError(f"Day stored under '{key}' has id '{day.id}'")
        for activity_id in day.activity_ids:
            if activity_id in owners:
                raise CorruptItineraryError(
                    f"Activity '{activity_id}' is listed in both "
                    f"'{owners[activity_id]}' and '{day.id}'"
                )
            if activity_id not in itinerary.activities:
                raise CorruptItineraryError(
                    f"Day '{day.id}' references missing activity '{activity_id}'"
                )
            owners[activity_id] = day.id

    for key, activity in itinerary.activities.items():
        if key != activity.id:
            raise CorruptItineraryError(f"Activity stored under '{key}' has id '{activity.id}'")
        if key not in owners:
            raise CorruptItineraryError(f"Activity '{key}' does not belong to any day")


class ItineraryStore:
    """Holds one trip's itinerary and applies edits to it."""

    def __init__(self, itinerary: Itinerary | None = None):
        if itinerary is None:
            itinerary = self._default_itinerary(1)
        validate_itinerary(itinerary)
        self._itinerary = self._copy(itinerary)
        self._owners = self._itinerary.owner_index()

    @classmethod
    def with_default_days(cls, count: int = 1) -> "ItineraryStore":
        """Create a store with ``count`` empty days titled ``Day 1..n``."""
        return cls(cls._default_itinerary(max(1, count)))

    @classmethod
    def from_documents(
        cls,
        days: Iterable[DayDocument],
        activities: Iterable[ActivityDocument],
    ) -> "ItineraryStore":
        """Build a store from persisted documents.

        Days are ordered by ``position`` (documents without one keep their
        listing order, after the positioned ones). Ids that point nowhere
        are dropped, and activities missing from their day's id list are
        appended to it, so slightly inconsistent data still loads.
        """
        day_docs = sorted(
            days, key=lambda d: (d.position is None, d.position if d.position is not None else 0)
        )
        activity_docs = {doc.id: doc for doc in activities}

        claimed: set[str] = set()
        day_ids: dict[str, list[str]] = {}
        for doc in day_docs:
            ids = []
            for activity_id in doc.activity_ids:
                if activity_id not in activity_docs:
                    logger.warning("Dropping missing activity %s from day %s", activity_id, doc.id)
                    continue
                if activity_id in claimed:
                    logger.warning("Activity %s listed twice, keeping first owner", activity_id)
                    continue
                claimed.add(activity_id)
                ids.append(activity_id)
            day_ids[doc.id] = ids

        for activity_id, doc in activity_docs.items():
            if activity_id in claimed:
                continue
            if doc.day_id not in day_ids:
                logger.warning("Dropping activity %s: day %s does not exist", activity_id, doc.day_id)
                continue
            claimed.add(activity_id)
            day_ids[doc.day_id].append(activity_id)

        if not day_docs:
            return cls.with_default_days(1)

        itinerary = Itinerary(
            day_order=tuple(doc.id for doc in day_docs),
            days={
                doc.id: Day(id=doc.id, title=doc.title, activity_ids=tuple(day_ids[doc.id]))
                for doc in day_docs
            },
            activities={
                activity_id: activity_docs[activity_id].to_activity()
                for activity_id in activity_docs
                if activity_id in claimed
            },
        )
        return cls(itinerary)

    @staticmethod
    def _default_itinerary(count: int) -> Itinerary:
        days = [Day(id=new_id("day"), title=default_day_title(i + 1)) for i in range(count)]
        return Itinerary(day_order=tuple(d.id for d in days), days={d.id: d for d in days})

    # -- reads ---------------------------------------------------------

    @property
    def snapshot(self) -> Itinerary:
        """The current itinerary.

        The returned value is a copy; changing its maps does not affect the
        store.
        """
        return self._copy(self._itinerary)

    @property
    def day_order(self) -> tuple[str, ...]:
        return self._itinerary.day_order

    def get_day(self, day_id: str) -> Day:
        return self._require_day(day_id)

    def get_activity(self, activity_id: str) -> Activity:
        activity = self._itinerary.activities.get(activity_id)
        if activity is None:
            raise UnknownActivityError(activity_id)
        return activity

    def owner_of(self, activity_id: str) -> str:
        """Return the id of the day that holds ``activity_id``."""
        try:
            return self._owners[activity_id]
        except KeyError:
            raise UnknownActivityError(activity_id) from None

    def check_invariants(self) -> None:
        validate_itinerary(self._itinerary)

    # -- day operations ------------------------------------------------

    def reorder_days(self, source_index: int, dest_index: int) -> Itinerary:
        new_order = splice(self._itinerary.day_order, source_index, dest_index)
        if source_index == dest_index:
            return self.snapshot
        return self._commit(
            self._itinerary.model_copy(update={"day_order": tuple(new_order)}),
            "reorder_days %d -> %d",
            source_index,
            dest_index,
        )

    def add_day(self, title: str | None = None) -> Day:
        if title is None or not title.strip():
            title = default_day_title(len(self._itinerary.day_order) + 1)
        day = Day(id=new_id("day"), title=title.strip())
        self._commit(
            self._itinerary.model_copy(
                update={
                    "day_order": self._itinerary.day_order + (day.id,),
                    "days": {**self._itinerary.days, day.id: day},
                }
            ),
            "add_day %s",
            day.id,
        )
        return day

    def remove_day(self, day_id: str) -> Itinerary:
        """Remove a day together with every activity it holds."""
        day = self._require_day(day_id)
        if len(self._itinerary.day_order) <= 1:
            raise LastDayError(day_id)

        doomed = set(day.activity_ids)
        days = {k: v for k, v in self._itinerary.days.items() if k != day_id}
        activities = {k: v for k, v in self._itinerary.activities.items() if k not in doomed}
        day_order = tuple(d for d in self._itinerary.day_order if d != day_id)

        return self._commit(
            self._itinerary.model_copy(
                update={"day_order": day_order, "days": days, "activities": activities}
            ),
            "remove_day %s (cascade %d activities)",
            day_id,
            len(doomed),
        )

    def rename_day(self, day_id: str, new_title: str) -> Itinerary:
        day = self._require_day(day_id)
        renamed = day.model_copy(update={"title": new_title})
        return self._commit(
            self._itinerary.model_copy(update={"days": {**self._itinerary.days, day_id: renamed}}),
            "rename_day %s",
            day_id,
        )

    # -- activity operations -------------------------------------------

    def reorder_activities(self, day_id: str, source_index: int, dest_index: int) -> Itinerary:
        day = self._require_day(day_id)
        new_ids = splice(day.activity_ids, source_index, dest_index)
        if source_index == dest_index:
            return self.snapshot
        return self._commit(
            self._replace_days(day.model_copy(update={"activity_ids": tuple(new_ids)})),
            "reorder_activities %s %d -> %d",
            day_id,
            source_index,
            dest_index,
        )

    def move_activity(
        self, activity_id: str, from_day_id: str, to_day_id: str, dest_index: int
    ) -> Itinerary:
        """Move an activity to ``dest_index`` of another day.

        Moving within one day is handed to ``reorder_activities``; asking
        for the position it already has raises ``InvalidMoveError``.
        """
        from_day = self._require_day(from_day_id)
        to_day = self._require_day(to_day_id)
        if activity_id not in from_day.activity_ids:
            raise UnknownActivityError(activity_id, f"in day '{from_day_id}'")

        if from_day_id == to_day_id:
            current = from_day.activity_ids.index(activity_id)
            target = clamp_index(dest_index, len(from_day.activity_ids) - 1)
            if target == current:
                raise InvalidMoveError(
                    f"Activity '{activity_id}' is already at position {current} of "
                    f"day '{from_day_id}'; nothing to move"
                )
            return self.reorder_activities(from_day_id, current, target)

        new_source, new_dest = transfer(from_day.activity_ids, to_day.activity_ids, activity_id, dest_index)
        return self._commit(
            self._replace_days(
                from_day.model_copy(update={"activity_ids": tuple(new_source)}),
                to_day.model_copy(update={"activity_ids": tuple(new_dest)}),
            ),
            "move_activity %s %s -> %s[%d]",
            activity_id,
            from_day_id,
            to_day_id,
            dest_index,
        )

    def add_activity(self, day_id: str, draft: ActivityDraft) -> Activity:
        day = self._require_day(day_id)
        activity = draft.to_activity(new_id("activity"))
        updated_day = day.model_copy(update={"activity_ids": day.activity_ids + (activity.id,)})
        self._commit(
            self._itinerary.model_copy(
                update={
                    "days": {**self._itinerary.days, day_id: updated_day},
                    "activities": {**self._itinerary.activities, activity.id: activity},
                }
            ),
            "add_activity %s to %s",
            activity.id,
            day_id,
        )
        return activity

    def remove_activity(self, activity_id: str, day_id: str) -> Itinerary:
        day = self._require_day(day_id)
        if activity_id not in day.activity_ids:
            raise UnknownActivityError(activity_id, f"in day '{day_id}'")

        updated_day = day.model_copy(
            update={"activity_ids": tuple(a for a in day.activity_ids if a != activity_id)}
        )
        activities = {k: v for k, v in self._itinerary.activities.items() if k != activity_id}
        return self._commit(
            self._itinerary.model_copy(
                update={
                    "days": {**self._itinerary.days, day_id: updated_day},
                    "activities": activities,
                }
            ),
            "remove_activity %s from %s",
            activity_id,
            day_id,
        )

    def update_activity(self, activity_id: str, **changes: Any) -> Activity:
        """Replace editable fields of an activity.

        Raises:
            UnknownActivityError: if the activity does not exist
            ValueError: for unknown fields, an id change or invalid values
        """
        current = self.get_activity(activity_id)
        unknown = set(changes) - EDITABLE_ACTIVITY_FIELDS
        if unknown:
            raise ValueError(f"Cannot update activity field(s): {', '.join(sorted(unknown))}")

        updated = Activity.model_validate({**current.model_dump(), **changes, "id": activity_id})
        self._commit(
            self._itinerary.model_copy(
                update={"activities": {**self._itinerary.activities, activity_id: updated}}
            ),
            "update_activity %s (%s)",
            activity_id,
            ", ".join(sorted(changes)),
        )
        return updated

    # -- drag and drop -------------------------------------------------

    def apply_drop(self, intent: DropIntent) -> bool:
        """Apply a drag release to the itinerary.

        Returns:
            True if the itinerary changed, False for drops outside any
            list or back onto the starting position
        """
        if intent.is_noop():
            logger.debug("Ignoring drop of %s: no change in position", intent.item_id)
            return False

        source, destination = intent.source, intent.destination

        if intent.kind == DropKind.DAY:
            if source.container_id != DAY_BOARD_ID or destination.container_id != DAY_BOARD_ID:
                raise InvalidMoveError("Days can only be dropped onto the day board")
            self._expect_at(self._itinerary.day_order, source.index, intent.item_id, DAY_BOARD_ID)
            self.reorder_days(source.index, destination.index)
            return True

        day = self._require_day(source.container_id)
        self._expect_at(day.activity_ids, source.index, intent.item_id, day.id)
        if source.container_id == destination.container_id:
            self.reorder_activities(day.id, source.index, destination.index)
        else:
            self.move_activity(intent.item_id, day.id, destination.container_id, destination.index)
        return True

    # -- snapshots -----------------------------------------------------

    def restore(self, itinerary: Itinerary) -> Itinerary:
        """Replace the current state with an earlier snapshot."""
        validate_itinerary(itinerary)
        return self._commit(self._copy(itinerary), "restore snapshot")

    # -- internals -----------------------------------------------------

    def _require_day(self, day_id: str) -> Day:
        day = self._itinerary.days.get(day_id)
        if day is None:
            raise UnknownDayError(day_id)
        return day

    @staticmethod
    def _expect_at(ids: tuple[str, ...], index: int, item_id: str, container_id: str) -> None:
        if index < 0 or index >= len(ids) or ids[index] != item_id:
            raise InvalidMoveError(
                f"'{item_id}' is not at position {index} of '{container_id}'; "
                "the board is out of date"
            )

    def _replace_days(self, *days: Day) -> Itinerary:
        updated = dict(self._itinerary.days)
        for day in days:
            updated[day.id] = day
        return self._itinerary.model_copy(update={"days": updated})

    @staticmethod
    def _copy(itinerary: Itinerary) -> Itinerary:
        return itinerary.model_copy(
            update={"days": dict(itinerary.days), "activities": dict(itinerary.activities)}
        )

    def _commit(self, itinerary: Itinerary, action: str, *args: Any) -> Itinerary:
        self._itinerary = itinerary
        self._owners = itinerary.owner_index()
        logger.debug(action, *args)
        return self.snapshot
