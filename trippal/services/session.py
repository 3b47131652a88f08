"""
Planner session: one user's editing lifecycle for a trip.

Each edit is applied to the in-memory store first, then the touched
documents are written through the data-access collaborator. A failed
write does not undo the edit; it is recorded as ``last_failure`` so the
caller can ``rollback()`` or ``retry()``.

While a failure is outstanding the datastore may hold any mix of the
unsaved states, so every later write resynchronises from all of them.
The first such write that succeeds clears the failure.
"""

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Any, Callable

from trippal.core.errors import PersistenceError
from trippal.core.projector import DayView, project_itinerary
from trippal.core.store import ItineraryStore
from trippal.models import (
    Activity,
    ActivityDraft,
    Day,
    DropIntent,
    Itinerary,
    Trip,
)
from trippal.storage.base import DataAccess

from .sync import diff_snapshots, resync_changes, write_changes

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


@dataclass(frozen=True)
class PersistenceFailure:
    """Edits that were applied in memory but could not be saved.

    ``previous`` is the last state known to be saved and ``operation`` the
    first edit after it. ``attempted`` and ``error`` describe the most
    recent failed write.
    """

    operation: str
    previous: Itinerary
    attempted: Itinerary
    error: PersistenceError


class PlannerSession:
    """Drives an ``ItineraryStore`` and keeps a datastore in step with it."""

    def __init__(
        self,
        trip: Trip,
        store: ItineraryStore | None = None,
        data_access: DataAccess | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        raise_on_persistence_error: bool = False,
    ):
        self.trip = trip
        self.store = store or ItineraryStore()
        self.data_access = data_access
        self.raise_on_persistence_error = raise_on_persistence_error
        self.last_failure: PersistenceFailure | None = None
        self._unsaved: list[Itinerary] = []
        self._undo: deque[Itinerary] = deque(maxlen=max(0, history_limit))
        self._redo: list[Itinerary] = []

    @classmethod
    def open(cls, data_access: DataAccess, trip_id: str, **kwargs: Any) -> "PlannerSession":
        """
        Load a trip and its itinerary from the datastore.

        A trip without stored days gets a default first day, which is saved
        right away.

        Raises:
            PersistenceError: if the trip cannot be loaded
        """
        trip = data_access.get_trip(trip_id)
        days = data_access.list_days(trip_id)
        activities = data_access.list_activities(trip_id)
        store = ItineraryStore.from_documents(days, activities)
        session = cls(trip, store, data_access, **kwargs)
        if not days:
            session._persist("initialize", Itinerary(), store.snapshot)
        logger.info("Opened trip %s with %d day(s)", trip_id, len(store.day_order))
        return session

    @classmethod
    def create(
        cls, data_access: DataAccess, trip: Trip, num_days: int | None = None, **kwargs: Any
    ) -> "PlannerSession":
        """Create a new trip with empty days and save it.

        ``num_days`` defaults to the trip's date range, or one day.
        """
        if num_days is None:
            num_days = trip.duration_days() or 1
        data_access.create_trip(trip)
        store = ItineraryStore.with_default_days(num_days)
        session = cls(trip, store, data_access, **kwargs)
        session._persist("initialize", Itinerary(), store.snapshot)
        return session

    # -- reads ---------------------------------------------------------

    @property
    def snapshot(self) -> Itinerary:
        return self.store.snapshot

    def views(self) -> list[DayView]:
        return project_itinerary(self.store.snapshot)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    # -- edits ---------------------------------------------------------

    def reorder_days(self, source_index: int, dest_index: int) -> Itinerary:
        return self._apply("reorder_days", self.store.reorder_days, source_index, dest_index)

    def reorder_activities(self, day_id: str, source_index: int, dest_index: int) -> Itinerary:
        return self._apply(
            "reorder_activities", self.store.reorder_activities, day_id, source_index, dest_index
        )

    def move_activity(
        self, activity_id: str, from_day_id: str, to_day_id: str, dest_index: int
    ) -> Itinerary:
        return self._apply(
            "move_activity", self.store.move_activity, activity_id, from_day_id, to_day_id, dest_index
        )

    def add_day(self, title: str | None = None) -> Day:
        return self._apply("add_day", self.store.add_day, title)

    def remove_day(self, day_id: str) -> Itinerary:
        return self._apply("remove_day", self.store.remove_day, day_id)

    def rename_day(self, day_id: str, new_title: str) -> Itinerary:
        return self._apply("rename_day", self.store.rename_day, day_id, new_title)

    def add_activity(self, day_id: str, draft: ActivityDraft) -> Activity:
        return self._apply("add_activity", self.store.add_activity, day_id, draft)

    def remove_activity(self, activity_id: str, day_id: str) -> Itinerary:
        return self._apply("remove_activity", self.store.remove_activity, activity_id, day_id)

    def update_activity(self, activity_id: str, **changes: Any) -> Activity:
        return self._apply(
            "update_activity", lambda: self.store.update_activity(activity_id, **changes)
        )

    def apply_drop(self, intent: DropIntent) -> bool:
        return self._apply("apply_drop", self.store.apply_drop, intent)

    # -- history and recovery ------------------------------------------

    def undo(self) -> bool:
        """Step back to the snapshot before the last edit."""
        if not self._undo:
            return False
        current = self.store.snapshot
        previous = self._undo.pop()
        self._redo.append(current)
        self.store.restore(previous)
        self._persist("undo", current, previous, tolerant=True)
        return True

    def redo(self) -> bool:
        """Re-apply the last undone edit."""
        if not self._redo:
            return False
        current = self.store.snapshot
        following = self._redo.pop()
        self._undo.append(current)
        self.store.restore(following)
        self._persist("redo", current, following, tolerant=True)
        return True

    def rollback(self) -> bool:
        """Return to the last saved state, dropping every unsaved edit.

        Returns:
            False if there is no recorded failure
        """
        failure = self.last_failure
        if failure is None:
            return False
        current = self.store.snapshot
        self._drop_history_after(failure.previous)
        self._redo.clear()
        self.store.restore(failure.previous)
        self._persist("rollback", current, failure.previous, tolerant=True)
        logger.info("Rolled back unsaved edits since %s", failure.operation)
        return True

    def retry(self) -> bool:
        """Write all unsaved edits again.

        Returns:
            True once the datastore has accepted them
        """
        failure = self.last_failure
        if failure is None:
            return True
        return self._persist(failure.operation, failure.previous, self.store.snapshot, tolerant=True)

    # -- internals -----------------------------------------------------

    def _apply(self, operation: str, mutate: Callable[..., Any], *args: Any) -> Any:
        before = self.store.snapshot
        result = mutate(*args)
        after = self.store.snapshot
        if after == before:
            return result

        self._undo.append(before)
        self._redo.clear()
        self._persist(operation, before, after)
        return result

    def _persist(
        self, operation: str, before: Itinerary, after: Itinerary, tolerant: bool = False
    ) -> bool:
        if self.data_access is None:
            return True

        failure = self.last_failure
        if failure is None:
            changes = diff_snapshots(before, after, self.trip.id)
        else:
            changes = resync_changes(self._unsaved + [before], after, self.trip.id)
            tolerant = True

        try:
            if not changes.is_empty():
                write_changes(self.data_access, changes, tolerant=tolerant)
        except PersistenceError as e:
            logger.warning("Saving %s failed: %s", operation, e)
            if failure is None:
                self.last_failure = PersistenceFailure(
                    operation=operation, previous=before, attempted=after, error=e
                )
                self._unsaved = [before, after]
            else:
                self.last_failure = replace(failure, attempted=after, error=e)
                self._unsaved.append(after)
            if self.raise_on_persistence_error:
                raise
            return False

        if failure is not None:
            logger.info("Datastore back in sync after failed %s", failure.operation)
        self.last_failure = None
        self._unsaved = []
        logger.debug("Saved %s (%d write(s))", operation, changes.count())
        return True

    def _drop_history_after(self, snapshot: Itinerary) -> None:
        # Undo entries are the snapshot objects passed to _persist, so
        # match by identity.
        if not any(entry is snapshot for entry in self._undo):
            return
        while self._undo.pop() is not snapshot:
            pass
