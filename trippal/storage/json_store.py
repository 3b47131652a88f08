import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from trippal.core.errors import NotFoundError, TransportError
from trippal.models import ActivityDocument, DayDocument, Trip

logger = logging.getLogger(__name__)

COLLECTIONS = ("trips", "days", "activities")


class JSONStore:
    """File-backed datastore in the json-server ``db.json`` layout.

    The file holds one list per collection (``trips``, ``days``,
    ``activities``) of camelCase records. Every write rewrites the whole
    file.
    """

    def __init__(self, db_path: Path | str = "db.json"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        """Read the database file, treating a missing file as empty."""
        if not self.db_path.exists():
            return {name: [] for name in COLLECTIONS}

        try:
            with open(self.db_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise TransportError(f"Cannot read datastore {self.db_path}: {e}") from e

        if not isinstance(data, dict):
            raise TransportError(f"Datastore {self.db_path} does not hold a JSON object")
        for name in COLLECTIONS:
            data.setdefault(name, [])
            if not isinstance(data[name], list):
                raise TransportError(f"Collection '{name}' in {self.db_path} is not a list")
        return data

    def _save(self, data: dict[str, list[dict[str, Any]]]) -> None:
        try:
            with open(self.db_path, "w") as f:
                json.dump(data, f, indent=2, default=str)
        except OSError as e:
            raise TransportError(f"Cannot write datastore {self.db_path}: {e}") from e

    @staticmethod
    def _dump(record: BaseModel) -> dict[str, Any]:
        return record.model_dump(mode="json", by_alias=True)

    @staticmethod
    def _find(rows: list[dict[str, Any]], record_id: str) -> int | None:
        for i, row in enumerate(rows):
            if row.get("id") == record_id:
                return i
        return None

    def _insert(self, collection: str, record: BaseModel) -> None:
        data = self._load()
        row = self._dump(record)
        if self._find(data[collection], row["id"]) is not None:
            raise TransportError(f"{collection} record '{row['id']}' already exists", status_code=409)
        data[collection].append(row)
        self._save(data)
        logger.debug("Created %s/%s", collection, row["id"])

    def _replace(self, collection: str, record_id: str, record: BaseModel) -> None:
        data = self._load()
        index = self._find(data[collection], record_id)
        if index is None:
            raise NotFoundError(collection, record_id)
        row = self._dump(record)
        row["id"] = record_id
        data[collection][index] = row
        self._save(data)
        logger.debug("Updated %s/%s", collection, record_id)

    def _remove(self, collection: str, record_id: str) -> None:
        data = self._load()
        index = self._find(data[collection], record_id)
        if index is None:
            raise NotFoundError(collection, record_id)
        del data[collection][index]
        self._save(data)
        logger.debug("Deleted %s/%s", collection, record_id)

    # Trips

    def list_trips(self) -> list[Trip]:
        return [Trip.model_validate(row) for row in self._load()["trips"]]

    def get_trip(self, trip_id: str) -> Trip:
        rows = self._load()["trips"]
        index = self._find(rows, trip_id)
        if index is None:
            raise NotFoundError("trips", trip_id)
        return Trip.model_validate(rows[index])

    def create_trip(self, trip: Trip) -> Trip:
        self._insert("trips", trip)
        return trip

    def delete_trip(self, trip_id: str) -> None:
        """Delete a trip together with its days and activities."""
        data = self._load()
        if self._find(data["trips"], trip_id) is None:
            raise NotFoundError("trips", trip_id)
        data["trips"] = [row for row in data["trips"] if row.get("id") != trip_id]
        data["days"] = [row for row in data["days"] if row.get("tripId") != trip_id]
        data["activities"] = [row for row in data["activities"] if row.get("tripId") != trip_id]
        self._save(data)

    # Days

    def list_days(self, trip_id: str) -> list[DayDocument]:
        return [
            DayDocument.model_validate(row)
            for row in self._load()["days"]
            if row.get("tripId") == trip_id
        ]

    def create_day(self, day: DayDocument) -> DayDocument:
        self._insert("days", day)
        return day

    def update_day(self, day_id: str, day: DayDocument) -> DayDocument:
        self._replace("days", day_id, day)
        return day

    def delete_day(self, day_id: str) -> None:
        self._remove("days", day_id)

    # Activities

    def list_activities(self, trip_id: str) -> list[ActivityDocument]:
        return [
            ActivityDocument.model_validate(row)
            for row in self._load()["activities"]
            if row.get("tripId") == trip_id
        ]

    def create_activity(self, activity: ActivityDocument) -> ActivityDocument:
        self._insert("activities", activity)
        return activity

    def update_activity(self, activity_id: str, activity: ActivityDocument) -> ActivityDocument:
        self._replace("activities", activity_id, activity)
        return activity

    def delete_activity(self, activity_id: str) -> None:
        self._remove("activities", activity_id)
