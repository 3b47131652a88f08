"""Drag-and-drop release events as reported by the board UI."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DropKind(str, Enum):
    DAY = "day"
    ACTIVITY = "activity"


# Container id used for the list of day columns itself
DAY_BOARD_ID = "all-days"


class DropLocation(BaseModel):
    container_id: str
    index: int = Field(ge=0)


class DropIntent(BaseModel):
    """Result of a drag release.

    For ``day`` drops both locations use ``DAY_BOARD_ID`` as container;
    for ``activity`` drops the container is the owning day id. A missing
    destination means the item was dropped outside any list.
    """

    kind: DropKind
    item_id: str
    source: DropLocation
    destination: Optional[DropLocation] = None

    def is_noop(self) -> bool:
        if self.destination is None:
            return True
        return (
            self.destination.container_id == self.source.container_id
            and self.destination.index == self.source.index
        )
