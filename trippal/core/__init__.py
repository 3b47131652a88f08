from .errors import (
    CorruptItineraryError,
    InvalidMoveError,
    ItineraryError,
    LastDayError,
    NotFoundError,
    OutOfRangeError,
    PersistenceError,
    TransportError,
    UnknownActivityError,
    UnknownDayError,
    UnknownItemError,
)
from .projector import DayView, project_day, project_itinerary
from .reconciler import clamp_index, splice, transfer
from .store import ItineraryStore, validate_itinerary

__all__ = [
    "CorruptItineraryError",
    "InvalidMoveError",
    "ItineraryError",
    "LastDayError",
    "NotFoundError",
    "OutOfRangeError",
    "PersistenceError",
    "TransportError",
    "UnknownActivityError",
    "UnknownDayError",
    "UnknownItemError",
    "DayView",
    "project_day",
    "project_itinerary",
    "clamp_index",
    "splice",
    "transfer",
    "ItineraryStore",
    "validate_itinerary",
]
