"""Tests for ItineraryStore mutations."""

import pytest

from trippal.core.errors import (
    CorruptItineraryError,
    InvalidMoveError,
    LastDayError,
    OutOfRangeError,
    UnknownActivityError,
    UnknownDayError,
)
from trippal.core.store import ItineraryStore
from trippal.models import (
    DAY_BOARD_ID,
    ActivityDocument,
    ActivityDraft,
    Day,
    DayDocument,
    DropIntent,
    DropKind,
    DropLocation,
    Itinerary,
)


def drop(kind, item_id, source, destination=None):
    return DropIntent(
        kind=kind,
        item_id=item_id,
        source=DropLocation(container_id=source[0], index=source[1]),
        destination=(
            DropLocation(container_id=destination[0], index=destination[1])
            if destination is not None
            else None
        ),
    )


class TestConstruction:
    """Tests for creating stores."""

    def test_default_store_has_one_day(self):
        """Test that a new store starts with a single empty day."""
        store = ItineraryStore()
        snapshot = store.snapshot
        assert len(snapshot.day_order) == 1
        day = snapshot.days[snapshot.day_order[0]]
        assert day.title == "Day 1"
        assert day.activity_ids == ()

    def test_with_default_days(self):
        """Test creating several numbered days."""
        store = ItineraryStore.with_default_days(3)
        titles = [store.get_day(d).title for d in store.day_order]
        assert titles == ["Day 1", "Day 2", "Day 3"]
        assert all(d.startswith("day-") for d in store.day_order)

    def test_rejects_itinerary_without_days(self):
        """Test that an itinerary must have at least one day."""
        with pytest.raises(CorruptItineraryError):
            ItineraryStore(Itinerary())

    def test_rejects_shared_activity(self, make_itinerary):
        """Test that an activity listed in two days is refused."""
        itinerary = make_itinerary({"D1": ["A1"], "D2": []})
        shared = itinerary.model_copy(
            update={"days": {**itinerary.days, "D2": Day(id="D2", title="Day 2", activity_ids=("A1",))}}
        )
        with pytest.raises(CorruptItineraryError):
            ItineraryStore(shared)

    def test_rejects_day_order_mismatch(self, make_itinerary):
        """Test that day_order must cover exactly the stored days."""
        itinerary = make_itinerary({"D1": [], "D2": []})
        broken = itinerary.model_copy(update={"day_order": ("D1",)})
        with pytest.raises(CorruptItineraryError):
            ItineraryStore(broken)

    def test_rejects_missing_activity(self, make_itinerary):
        """Test that day ids must resolve to activities."""
        itinerary = make_itinerary({"D1": ["A1"]})
        broken = itinerary.model_copy(update={"activities": {}})
        with pytest.raises(CorruptItineraryError):
            ItineraryStore(broken)


class TestFromDocuments:
    """Tests for loading a store from persisted documents."""

    def test_days_sorted_by_position(self):
        """Test that stored positions decide the day order."""
        days = [
            DayDocument(id="D2", trip_id="t", title="Two", position=1),
            DayDocument(id="D1", trip_id="t", title="One", position=0),
            DayDocument(id="D3", trip_id="t", title="Three"),
        ]
        store = ItineraryStore.from_documents(days, [])
        assert store.day_order == ("D1", "D2", "D3")

    def test_dangling_and_unlisted_activities(self):
        """Test that loading repairs inconsistent references."""
        days = [
            DayDocument(id="D1", trip_id="t", title="One", activity_ids=["A1", "A404"]),
            DayDocument(id="D2", trip_id="t", title="Two"),
        ]
        activities = [
            ActivityDocument(id="A1", trip_id="t", day_id="D1", content="Beach"),
            ActivityDocument(id="A2", trip_id="t", day_id="D2", content="Museum"),
            ActivityDocument(id="A3", trip_id="t", day_id="D9", content="Orphan"),
        ]
        store = ItineraryStore.from_documents(days, activities)

        assert store.get_day("D1").activity_ids == ("A1",)
        assert store.get_day("D2").activity_ids == ("A2",)
        assert "A3" not in store.snapshot.activities
        store.check_invariants()

    def test_no_days_creates_default(self):
        """Test that a trip without days gets one."""
        store = ItineraryStore.from_documents([], [])
        assert len(store.day_order) == 1


class TestReorderDays:
    """Tests for reorder_days."""

    def test_move_first_day_to_end(self, build_store):
        """Test moving D1 behind D3."""
        store = build_store({"D1": [], "D2": [], "D3": []})
        result = store.reorder_days(0, 2)
        assert result.day_order == ("D2", "D3", "D1")
        assert store.day_order == ("D2", "D3", "D1")

    def test_same_index_is_noop(self, store):
        """Test that an unchanged position keeps the order."""
        before = store.snapshot
        assert store.reorder_days(1, 1) == before

    @pytest.mark.parametrize("source,dest", [(3, 0), (0, 3), (-1, 1)])
    def test_out_of_range(self, store, source, dest):
        """Test invalid indices fail without changing anything."""
        before = store.snapshot
        with pytest.raises(OutOfRangeError):
            store.reorder_days(source, dest)
        assert store.snapshot == before

    def test_old_snapshot_is_preserved(self, store):
        """Test that earlier snapshots are not modified."""
        before = store.snapshot
        store.reorder_days(0, 2)
        assert before.day_order == ("D1", "D2", "D3")


class TestReorderActivities:
    """Tests for reorder_activities."""

    def test_last_to_first(self, store):
        """Test moving A3 to the front of D1."""
        result = store.reorder_activities("D1", 2, 0)
        assert result.days["D1"].activity_ids == ("A3", "A1", "A2")

    def test_single_activity_noop(self, store):
        """Test that reordering a one-element list changes nothing."""
        store.reorder_activities("D2", 0, 0)
        assert store.get_day("D2").activity_ids == ("A4",)

    def test_empty_day_out_of_range(self, store):
        """Test that an empty day has no valid index."""
        with pytest.raises(OutOfRangeError):
            store.reorder_activities("D3", 0, 0)

    def test_unknown_day(self, store):
        """Test reordering in a missing day."""
        with pytest.raises(UnknownDayError):
            store.reorder_activities("D9", 0, 1)


class TestMoveActivity:
    """Tests for move_activity."""

    def test_move_to_front_of_other_day(self, build_store):
        """Test moving A1 from D1 to the front of D2."""
        store = build_store({"D1": ["A1", "A2"], "D2": ["A3"]})
        result = store.move_activity("A1", "D1", "D2", 0)
        assert result.days["D1"].activity_ids == ("A2",)
        assert result.days["D2"].activity_ids == ("A1", "A3")
        assert store.owner_of("A1") == "D2"

    def test_move_only_activity_leaves_empty_day(self, store):
        """Test that a day can be emptied by a move."""
        store.move_activity("A4", "D2", "D1", 1)
        assert store.get_day("D2").activity_ids == ()
        assert store.get_day("D1").activity_ids == ("A1", "A4", "A2", "A3")
        store.check_invariants()

    def test_move_into_empty_day_clamps(self, store):
        """Test that the destination index is clamped to the list length."""
        store.move_activity("A2", "D1", "D3", 7)
        assert store.get_day("D3").activity_ids == ("A2",)

    def test_same_day_same_position_is_invalid(self, store):
        """Test that a move onto the current position is refused."""
        before = store.snapshot
        with pytest.raises(InvalidMoveError):
            store.move_activity("A2", "D1", "D1", 1)
        assert store.snapshot == before

    def test_same_day_new_position_reorders(self, store):
        """Test that a move within one day acts like a reorder."""
        store.move_activity("A1", "D1", "D1", 2)
        assert store.get_day("D1").activity_ids == ("A2", "A3", "A1")

    def test_unknown_days(self, store):
        """Test that both day ids must exist."""
        with pytest.raises(UnknownDayError):
            store.move_activity("A1", "D9", "D2", 0)
        with pytest.raises(UnknownDayError):
            store.move_activity("A1", "D1", "D9", 0)

    def test_activity_not_in_source_day(self, store):
        """Test moving an activity from a day that does not hold it."""
        before = store.snapshot
        with pytest.raises(UnknownActivityError):
            store.move_activity("A4", "D1", "D3", 0)
        assert store.snapshot == before

    def test_moves_preserve_all_ids(self, store):
        """Test that moves never lose or duplicate activities."""
        all_ids = sorted(store.snapshot.activities)
        store.move_activity("A1", "D1", "D3", 0)
        store.move_activity("A4", "D2", "D3", 1)
        store.move_activity("A1", "D3", "D2", 0)
        listed = [a for d in store.day_order for a in store.get_day(d).activity_ids]
        assert sorted(listed) == all_ids
        assert len(listed) == len(set(listed))
        store.check_invariants()


class TestDays:
    """Tests for adding, removing and renaming days."""

    def test_add_day_appends(self, store):
        """Test that new days go to the end with a numbered title."""
        day = store.add_day()
        assert store.day_order[-1] == day.id
        assert day.title == "Day 4"
        assert day.activity_ids == ()

    def test_add_day_with_title(self, store):
        """Test adding a titled day."""
        day = store.add_day("  Departure ")
        assert store.get_day(day.id).title == "Departure"

    def test_add_day_ids_are_unique(self, store):
        """Test that generated ids differ."""
        ids = {store.add_day().id for _ in range(5)}
        assert len(ids) == 5

    def test_remove_day_cascades(self, build_store):
        """Test that removing a day removes its activities."""
        store = build_store({"D1": ["A1"], "D2": []})
        result = store.remove_day("D1")
        assert result.day_order == ("D2",)
        assert "D1" not in result.days
        assert "A1" not in result.activities
        with pytest.raises(UnknownActivityError):
            store.owner_of("A1")

    def test_remove_last_day_fails(self, build_store):
        """Test that the only day cannot be removed."""
        store = build_store({"D1": ["A1"]})
        before = store.snapshot
        with pytest.raises(LastDayError):
            store.remove_day("D1")
        assert store.snapshot == before
        assert len(store.day_order) == 1

    def test_remove_unknown_day(self, store):
        """Test removing a missing day."""
        with pytest.raises(UnknownDayError):
            store.remove_day("D9")

    def test_rename_day(self, store):
        """Test renaming a day."""
        store.rename_day("D2", "Beach Day")
        assert store.get_day("D2").title == "Beach Day"
        assert store.get_day("D2").activity_ids == ("A4",)

    def test_rename_unknown_day(self, store):
        """Test renaming a missing day."""
        with pytest.raises(UnknownDayError):
            store.rename_day("D9", "Nope")


class TestActivities:
    """Tests for adding, removing and editing activities."""

    def test_add_activity_appends(self, store):
        """Test that a new activity goes to the end of its day."""
        activity = store.add_activity("D3", ActivityDraft(content="Airport Transfer", type="travel"))
        assert activity.id.startswith("activity-")
        assert store.get_day("D3").activity_ids == (activity.id,)
        assert store.owner_of(activity.id) == "D3"
        assert store.get_activity(activity.id).content == "Airport Transfer"

    def test_add_activity_unknown_day(self, store):
        """Test adding to a missing day."""
        with pytest.raises(UnknownDayError):
            store.add_activity("D9", ActivityDraft(content="Lost"))

    def test_remove_activity(self, store):
        """Test removing an activity from its day."""
        store.remove_activity("A2", "D1")
        assert store.get_day("D1").activity_ids == ("A1", "A3")
        assert "A2" not in store.snapshot.activities

    def test_remove_activity_from_wrong_day(self, store):
        """Test that stale day ids are refused."""
        before = store.snapshot
        with pytest.raises(UnknownActivityError):
            store.remove_activity("A2", "D2")
        assert store.snapshot == before

    def test_update_activity(self, store):
        """Test editing activity fields."""
        updated = store.update_activity("A1", notes="Book ahead", time="2:30 PM")
        assert updated.notes == "Book ahead"
        assert updated.time == "14:30"
        assert store.get_activity("A1") == updated

    def test_update_activity_rejects_unknown_fields(self, store):
        """Test that ids and unknown fields cannot be changed."""
        with pytest.raises(ValueError):
            store.update_activity("A1", id="A99")
        with pytest.raises(ValueError):
            store.update_activity("A1", rating=5)

    def test_update_missing_activity(self, store):
        """Test editing a missing activity."""
        with pytest.raises(UnknownActivityError):
            store.update_activity("A99", notes="x")


class TestApplyDrop:
    """Tests for drag release handling."""

    def test_drop_outside_lists(self, store):
        """Test that a drop with no destination is ignored."""
        assert store.apply_drop(drop(DropKind.ACTIVITY, "A1", ("D1", 0))) is False

    def test_drop_in_place(self, store):
        """Test that dropping where the drag started is ignored."""
        before = store.snapshot
        assert store.apply_drop(drop(DropKind.ACTIVITY, "A1", ("D1", 0), ("D1", 0))) is False
        assert store.apply_drop(drop(DropKind.DAY, "D1", (DAY_BOARD_ID, 0), (DAY_BOARD_ID, 0))) is False
        assert store.snapshot == before

    def test_day_drop(self, store):
        """Test reordering day columns."""
        assert store.apply_drop(drop(DropKind.DAY, "D3", (DAY_BOARD_ID, 2), (DAY_BOARD_ID, 0)))
        assert store.day_order == ("D3", "D1", "D2")

    def test_activity_drop_within_day(self, store):
        """Test reordering inside one day."""
        assert store.apply_drop(drop(DropKind.ACTIVITY, "A1", ("D1", 0), ("D1", 2)))
        assert store.get_day("D1").activity_ids == ("A2", "A3", "A1")

    def test_activity_drop_across_days(self, store):
        """Test moving into another day."""
        assert store.apply_drop(drop(DropKind.ACTIVITY, "A3", ("D1", 2), ("D3", 0)))
        assert store.get_day("D1").activity_ids == ("A1", "A2")
        assert store.get_day("D3").activity_ids == ("A3",)

    def test_stale_drop(self, store):
        """Test that a drop naming the wrong item is refused."""
        with pytest.raises(InvalidMoveError):
            store.apply_drop(drop(DropKind.ACTIVITY, "A2", ("D1", 0), ("D2", 0)))

    def test_day_dropped_into_day(self, store):
        """Test that a day cannot be dropped into an activity list."""
        with pytest.raises(InvalidMoveError):
            store.apply_drop(drop(DropKind.DAY, "D1", (DAY_BOARD_ID, 0), ("D2", 0)))

    def test_negative_source_index(self, store):
        """Test that a negative source position does not count from the end."""
        before = store.snapshot
        intent = DropIntent(
            kind=DropKind.ACTIVITY,
            item_id="A3",
            source=DropLocation.model_construct(container_id="D1", index=-1),
            destination=DropLocation(container_id="D2", index=0),
        )
        with pytest.raises(InvalidMoveError):
            store.apply_drop(intent)
        assert store.snapshot == before


class TestSnapshots:
    """Tests for snapshot isolation and restore."""

    def test_snapshot_is_a_copy(self, store):
        """Test that editing a returned snapshot does not change the store."""
        snapshot = store.snapshot
        snapshot.days.clear()
        snapshot.activities.clear()
        assert set(store.snapshot.days) == {"D1", "D2", "D3"}
        assert len(store.snapshot.activities) == 4

    def test_constructor_copies_input(self, make_itinerary):
        """Test that changing the itinerary passed in does not reach the store."""
        itinerary = make_itinerary({"D1": ["A1"], "D2": ["A2"]})
        store = ItineraryStore(itinerary)
        itinerary.days.pop("D2")
        itinerary.activities.pop("A1")

        store.check_invariants()
        assert set(store.snapshot.days) == {"D1", "D2"}
        assert store.get_activity("A1").id == "A1"

    def test_restore(self, store):
        """Test going back to an earlier snapshot."""
        before = store.snapshot
        store.remove_day("D1")
        store.restore(before)
        assert store.snapshot == before
        assert store.owner_of("A1") == "D1"

    def test_restore_rejects_corrupt_snapshot(self, store):
        """Test that restore validates its input."""
        before = store.snapshot
        with pytest.raises(CorruptItineraryError):
            store.restore(before.model_copy(update={"day_order": ("D1",)}))
        assert store.snapshot == before
