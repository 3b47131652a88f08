from .base import DataAccess
from .json_store import JSONStore

__all__ = ["DataAccess", "JSONStore"]
