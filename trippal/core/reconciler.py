"""List reordering used by drag-and-drop.

Both functions take any sequence and return new lists; inputs are never
modified. Index semantics follow drag-and-drop libraries: the destination
index of a reorder addresses the list *after* the dragged item has been
removed from it.
"""

from typing import Sequence, TypeVar

from .errors import OutOfRangeError, UnknownItemError

T = TypeVar("T")


def clamp_index(index: int, length: int) -> int:
    """Clamp an insertion index to ``[0, length]``."""
    return max(0, min(index, length))


def _check_index(index: int, length: int) -> None:
    if not 0 <= index < length:
        raise OutOfRangeError(index, length)


def splice(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Move the element at ``from_index`` so it ends up at ``to_index``.

    Raises:
        OutOfRangeError: if either index is outside ``[0, len(items))``
    """
    _check_index(from_index, len(items))
    _check_index(to_index, len(items))

    result = list(items)
    if from_index == to_index:
        return result

    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


def transfer(
    source: Sequence[T], dest: Sequence[T], item: T, dest_index: int
) -> tuple[list[T], list[T]]:
    """Move ``item`` from ``source`` into ``dest`` at ``dest_index``.

    The destination index is clamped, so an empty destination always
    receives the item at position 0.

    Returns:
        Tuple of (new_source, new_dest)

    Raises:
        UnknownItemError: if ``item`` is not in ``source``
    """
    if item not in source:
        raise UnknownItemError(str(item), "in the source list")

    new_source = [x for x in source if x != item]
    new_dest = list(dest)
    new_dest.insert(clamp_index(dest_index, len(new_dest)), item)
    return new_source, new_dest
