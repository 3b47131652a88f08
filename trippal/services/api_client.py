"""HTTP client for the json-server REST API that backs the board."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from trippal.core.errors import NotFoundError, TransportError
from trippal.models import ActivityDocument, DayDocument, Trip

logger = logging.getLogger(__name__)


class TripApiClient:
    """Client for ``/trips``, ``/days`` and ``/activities`` endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TripApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        collection: str,
        record_id: str | None = None,
        params: dict[str, str] | None = None,
        body: BaseModel | None = None,
    ) -> Any:
        """
        Send a request and decode the JSON answer.

        Raises:
            NotFoundError: when the server answers 404 for a record URL
            TransportError: for network failures and other error statuses
        """
        path = f"/{collection}" if record_id is None else f"/{collection}/{record_id}"
        json_body = body.model_dump(mode="json", by_alias=True) if body is not None else None

        try:
            response = self._client.request(method, path, params=params, json=json_body)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404 and record_id is not None:
            raise NotFoundError(collection, record_id)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("%s %s returned %d", method, path, response.status_code)
            raise TransportError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{method} {path} returned invalid JSON") from e

    # Trips

    def list_trips(self) -> list[Trip]:
        return [Trip.model_validate(row) for row in self._request("GET", "trips")]

    def get_trip(self, trip_id: str) -> Trip:
        return Trip.model_validate(self._request("GET", "trips", trip_id))

    def create_trip(self, trip: Trip) -> Trip:
        return Trip.model_validate(self._request("POST", "trips", body=trip))

    # Days

    def list_days(self, trip_id: str) -> list[DayDocument]:
        rows = self._request("GET", "days", params={"tripId": trip_id})
        return [DayDocument.model_validate(row) for row in rows]

    def create_day(self, day: DayDocument) -> DayDocument:
        return DayDocument.model_validate(self._request("POST", "days", body=day))

    def update_day(self, day_id: str, day: DayDocument) -> DayDocument:
        return DayDocument.model_validate(self._request("PUT", "days", day_id, body=day))

    def delete_day(self, day_id: str) -> None:
        self._request("DELETE", "days", day_id)

    # Activities

    def list_activities(self, trip_id: str) -> list[ActivityDocument]:
        rows = self._request("GET", "activities", params={"tripId": trip_id})
        return [ActivityDocument.model_validate(row) for row in rows]

    def create_activity(self, activity: ActivityDocument) -> ActivityDocument:
        return ActivityDocument.model_validate(self._request("POST", "activities", body=activity))

    def update_activity(self, activity_id: str, activity: ActivityDocument) -> ActivityDocument:
        return ActivityDocument.model_validate(
            self._request("PUT", "activities", activity_id, body=activity)
        )

    def delete_activity(self, activity_id: str) -> None:
        self._request("DELETE", "activities", activity_id)
