"""Error types for itinerary editing and persistence.

Validation errors (``ItineraryError``) are raised by the store before any
change is applied. Persistence errors (``PersistenceError``) come from the
datastore after the in-memory change has already been made, so callers can
handle the two differently.
"""


class ItineraryError(Exception):
    """An itinerary operation was rejected."""

    pass


class OutOfRangeError(ItineraryError, IndexError):
    """An index does not address an element of the list."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Index {index} is out of range for a list of {length} item(s)")


class UnknownItemError(ItineraryError, KeyError):
    """A referenced id is not present."""

    kind = "Item"

    def __init__(self, item_id: str, detail: str | None = None):
        self.item_id = item_id
        message = f"{self.kind} '{item_id}' not found"
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class UnknownDayError(UnknownItemError):
    kind = "Day"


class UnknownActivityError(UnknownItemError):
    kind = "Activity"


class LastDayError(ItineraryError):
    """The only remaining day cannot be removed."""

    def __init__(self, day_id: str):
        self.day_id = day_id
        super().__init__(f"Can't remove day '{day_id}': an itinerary needs at least one day")


class InvalidMoveError(ItineraryError):
    """A move was requested where a reorder (or nothing) was required."""

    pass


class CorruptItineraryError(ItineraryError):
    """A snapshot violates the itinerary invariants."""

    pass


class PersistenceError(Exception):
    """Saving or loading through the datastore failed."""

    pass


class TransportError(PersistenceError):
    """The datastore could not be reached or answered with an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(PersistenceError):
    """The datastore has no record with the requested id."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No {collection} record with id '{record_id}'")
