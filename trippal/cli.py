"""Command-line front end for editing trip itineraries."""

import argparse
import logging
import sys
from contextlib import contextmanager
from typing import Iterator

from trippal.config import Settings
from trippal.core.errors import ItineraryError, PersistenceError
from trippal.models import ActivityDraft, ActivityType, Trip
from trippal.services.api_client import TripApiClient
from trippal.services.budget import active_reminders, summarize_budget
from trippal.services.session import PlannerSession
from trippal.storage import DataAccess, JSONStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trippal", description="Trip itinerary planner")
    parser.add_argument("--db", help="Path to a local db.json datastore")
    parser.add_argument("--api", action="store_true", help="Use the REST API instead of a local file")
    parser.add_argument("--api-url", help="REST API base URL (implies --api)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("trips", help="List trips")

    p = sub.add_parser("new-trip", help="Create a trip")
    p.add_argument("title")
    p.add_argument("--days", type=int, help="Number of empty days to create")
    p.add_argument("--location")
    p.add_argument("--start", help="Start date (YYYY-MM-DD)")
    p.add_argument("--end", help="End date (YYYY-MM-DD)")

    for name, help_text in [
        ("show", "Show a trip's days and activities"),
        ("budget", "Show expense totals"),
        ("reminders", "List active reminders"),
    ]:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("trip_id")

    p = sub.add_parser("add-day", help="Append a day")
    p.add_argument("trip_id")
    p.add_argument("--title")

    p = sub.add_parser("remove-day", help="Remove a day and its activities")
    p.add_argument("trip_id")
    p.add_argument("day_id")

    p = sub.add_parser("rename-day", help="Rename a day")
    p.add_argument("trip_id")
    p.add_argument("day_id")
    p.add_argument("title")

    p = sub.add_parser("reorder-days", help="Move a day to another position")
    p.add_argument("trip_id")
    p.add_argument("source", type=int)
    p.add_argument("dest", type=int)

    p = sub.add_parser("add-activity", help="Add an activity to a day")
    p.add_argument("trip_id")
    p.add_argument("day_id")
    p.add_argument("content")
    p.add_argument("--time")
    p.add_argument("--type", default=ActivityType.ATTRACTION.value)
    p.add_argument("--location")
    p.add_argument("--notes")

    p = sub.add_parser("remove-activity", help="Remove an activity")
    p.add_argument("trip_id")
    p.add_argument("activity_id")
    p.add_argument("--day", help="Day holding the activity (defaults to its current day)")

    p = sub.add_parser("reorder-activities", help="Move an activity within its day")
    p.add_argument("trip_id")
    p.add_argument("day_id")
    p.add_argument("source", type=int)
    p.add_argument("dest", type=int)

    p = sub.add_parser("move-activity", help="Move an activity to another day")
    p.add_argument("trip_id")
    p.add_argument("activity_id")
    p.add_argument("to_day_id")
    p.add_argument("index", type=int, nargs="?", default=0)

    return parser


@contextmanager
def open_backend(args: argparse.Namespace, settings: Settings) -> Iterator[DataAccess]:
    if args.api or args.api_url:
        with TripApiClient(args.api_url or settings.api_url, timeout=settings.http_timeout) as client:
            yield client
    else:
        yield JSONStore(args.db or settings.db_path)


def print_itinerary(session: PlannerSession) -> None:
    trip = session.trip
    print(f"{trip.title} [{trip.id}]")
    if trip.location:
        print(f"  {trip.location}")
    for view in session.views():
        print(f"\n{view.position + 1}. {view.title} [{view.day_id}]")
        if view.is_empty:
            print("   (no activities yet)")
        for activity in view.activities:
            time = activity.time or "--:--"
            line = f"   - {time}  {activity.content} ({activity.type.value})"
            if activity.location:
                line += f" @ {activity.location}"
            print(f"{line} [{activity.id}]")


def print_budget(session: PlannerSession) -> None:
    summary = summarize_budget(session.snapshot)
    for day in summary.days:
        amounts = ", ".join(f"{v} {k}" for k, v in sorted(day.totals.items())) or "0"
        print(f"{day.title}: {amounts}")
    total = ", ".join(f"{v} {k}" for k, v in sorted(summary.totals.items())) or "0"
    print(f"Total: {total}")


def run(args: argparse.Namespace, settings: Settings) -> int:
    logger.debug("Running %s", args.command)
    with open_backend(args, settings) as backend:
        if args.command == "trips":
            for trip in backend.list_trips():
                print(f"{trip.id}  {trip.title}")
            return 0

        options = {"history_limit": settings.history_limit, "raise_on_persistence_error": True}

        if args.command == "new-trip":
            trip = Trip(
                title=args.title, location=args.location, start_date=args.start, end_date=args.end
            )
            session = PlannerSession.create(backend, trip, args.days, **options)
            print_itinerary(session)
            return 0

        session = PlannerSession.open(backend, args.trip_id, **options)

        if args.command == "budget":
            print_budget(session)
            return 0
        if args.command == "reminders":
            for entry in active_reminders(session.snapshot):
                r = entry.reminder
                print(f"{entry.day_title} {r.time}  {r.message} ({entry.activity_content})")
            return 0

        if args.command == "add-day":
            session.add_day(args.title)
        elif args.command == "remove-day":
            session.remove_day(args.day_id)
        elif args.command == "rename-day":
            session.rename_day(args.day_id, args.title)
        elif args.command == "reorder-days":
            session.reorder_days(args.source, args.dest)
        elif args.command == "add-activity":
            draft = ActivityDraft(
                content=args.content,
                time=args.time,
                type=args.type,
                location=args.location,
                notes=args.notes,
            )
            session.add_activity(args.day_id, draft)
        elif args.command == "remove-activity":
            day_id = args.day or session.store.owner_of(args.activity_id)
            session.remove_activity(args.activity_id, day_id)
        elif args.command == "reorder-activities":
            session.reorder_activities(args.day_id, args.source, args.dest)
        elif args.command == "move-activity":
            from_day_id = session.store.owner_of(args.activity_id)
            session.move_activity(args.activity_id, from_day_id, args.to_day_id, args.index)

        print_itinerary(session)
        return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return run(args, settings)
    except ItineraryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PersistenceError as e:
        print(f"Could not reach the datastore: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
