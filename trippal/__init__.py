"""Trip itinerary planning: ordered days and activities with drag-and-drop editing."""

__version__ = "0.1.0"
