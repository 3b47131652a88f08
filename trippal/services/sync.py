"""
Translate snapshot transitions into datastore writes.

A store mutation turns one snapshot into another; ``diff_snapshots``
works out which day and activity documents that transition touched, and
``write_changes`` sends them through a ``DataAccess`` implementation.
"""

import logging
from dataclasses import dataclass, field

from trippal.core.errors import NotFoundError
from trippal.models import ActivityDocument, DayDocument, Itinerary
from trippal.storage.base import DataAccess

logger = logging.getLogger(__name__)


@dataclass
class ChangeSet:
    """Documents to write for one snapshot transition."""

    days_created: list[DayDocument] = field(default_factory=list)
    days_updated: list[DayDocument] = field(default_factory=list)
    days_deleted: list[str] = field(default_factory=list)
    activities_created: list[ActivityDocument] = field(default_factory=list)
    activities_updated: list[ActivityDocument] = field(default_factory=list)
    activities_deleted: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.days_created
            or self.days_updated
            or self.days_deleted
            or self.activities_created
            or self.activities_updated
            or self.activities_deleted
        )

    def count(self) -> int:
        return (
            len(self.days_created)
            + len(self.days_updated)
            + len(self.days_deleted)
            + len(self.activities_created)
            + len(self.activities_updated)
            + len(self.activities_deleted)
        )

    def merge(self, other: "ChangeSet") -> None:
        """Add the writes of ``other`` for records not already covered."""
        day_ids = {doc.id for doc in self.days_created + self.days_updated}
        activity_ids = {doc.id for doc in self.activities_created + self.activities_updated}
        for target, docs, seen in (
            (self.days_created, other.days_created, day_ids),
            (self.days_updated, other.days_updated, day_ids),
            (self.activities_created, other.activities_created, activity_ids),
            (self.activities_updated, other.activities_updated, activity_ids),
        ):
            for doc in docs:
                if doc.id not in seen:
                    seen.add(doc.id)
                    target.append(doc)
        for target, record_ids in (
            (self.days_deleted, other.days_deleted),
            (self.activities_deleted, other.activities_deleted),
        ):
            target.extend(record_id for record_id in record_ids if record_id not in target)


def _day_documents(itinerary: Itinerary, trip_id: str) -> dict[str, DayDocument]:
    return {
        day_id: DayDocument.from_day(itinerary.days[day_id], trip_id, position)
        for position, day_id in enumerate(itinerary.day_order)
        if day_id in itinerary.days
    }


def _activity_documents(itinerary: Itinerary, trip_id: str) -> dict[str, ActivityDocument]:
    owners = itinerary.owner_index()
    return {
        activity_id: ActivityDocument.from_activity(activity, trip_id, owners[activity_id])
        for activity_id, activity in itinerary.activities.items()
        if activity_id in owners
    }


def diff_snapshots(before: Itinerary, after: Itinerary, trip_id: str) -> ChangeSet:
    """Compute the document writes that turn ``before`` into ``after``."""
    changes = ChangeSet()

    old_days = _day_documents(before, trip_id)
    new_days = _day_documents(after, trip_id)
    for day_id, doc in new_days.items():
        if day_id not in old_days:
            changes.days_created.append(doc)
        elif doc != old_days[day_id]:
            changes.days_updated.append(doc)
    changes.days_deleted = [day_id for day_id in old_days if day_id not in new_days]

    old_activities = _activity_documents(before, trip_id)
    new_activities = _activity_documents(after, trip_id)
    for activity_id, doc in new_activities.items():
        if activity_id not in old_activities:
            changes.activities_created.append(doc)
        elif doc != old_activities[activity_id]:
            changes.activities_updated.append(doc)
    changes.activities_deleted = [
        activity_id for activity_id in old_activities if activity_id not in new_activities
    ]

    return changes


def resync_changes(bases: list[Itinerary], after: Itinerary, trip_id: str) -> ChangeSet:
    """Writes that bring the datastore to ``after`` from any of ``bases``.

    Used when the stored state is only known to lie somewhere between
    several snapshots, e.g. after writes that failed part way through.
    """
    changes = ChangeSet()
    for base in bases:
        changes.merge(diff_snapshots(base, after, trip_id))
    return changes


def write_changes(data_access: DataAccess, changes: ChangeSet, tolerant: bool = False) -> None:
    """
    Send a change set to the datastore.

    Writes run in dependency order: new days, new and changed activities,
    changed days, then deletions. With ``tolerant=True`` the writes are
    idempotent: creates and updates fall back to each other and deleting
    a missing record is ignored. Used when the remote state is unknown,
    e.g. after a partially failed write.

    Raises:
        PersistenceError: on the first write that fails
    """
    if tolerant:
        for doc in changes.days_created + changes.days_updated:
            _upsert_day(data_access, doc)
        for doc in changes.activities_created + changes.activities_updated:
            _upsert_activity(data_access, doc)
        for activity_id in changes.activities_deleted:
            _delete_quietly(data_access.delete_activity, activity_id)
        for day_id in changes.days_deleted:
            _delete_quietly(data_access.delete_day, day_id)
        return

    for doc in changes.days_created:
        data_access.create_day(doc)
    for doc in changes.activities_created:
        data_access.create_activity(doc)
    for doc in changes.activities_updated:
        data_access.update_activity(doc.id, doc)
    for doc in changes.days_updated:
        data_access.update_day(doc.id, doc)
    for activity_id in changes.activities_deleted:
        data_access.delete_activity(activity_id)
    for day_id in changes.days_deleted:
        data_access.delete_day(day_id)


def _upsert_day(data_access: DataAccess, doc: DayDocument) -> None:
    try:
        data_access.update_day(doc.id, doc)
    except NotFoundError:
        data_access.create_day(doc)


def _upsert_activity(data_access: DataAccess, doc: ActivityDocument) -> None:
    try:
        data_access.update_activity(doc.id, doc)
    except NotFoundError:
        data_access.create_activity(doc)


def _delete_quietly(delete, record_id: str) -> None:
    try:
        delete(record_id)
    except NotFoundError:
        logger.debug("Record %s already gone", record_id)
