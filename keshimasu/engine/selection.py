"""Straight-line cell selection with click-to-undo.

A selection is a list of ``(row, col)`` coordinates. Every function here is
total: any coordinate yields a valid selection, an illegal extension simply
restarts the selection at the clicked cell.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..core.constants import MIN_CLEAR_LENGTH, Direction
from ..core.models import Coord
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


def is_adjacent(a: Coord, b: Coord) -> bool:
    """One step along exactly one axis, the other axis unchanged."""
    same_row = a[0] == b[0] and abs(a[1] - b[1]) == 1
    same_col = a[1] == b[1] and abs(a[0] - b[0]) == 1
    return same_row or same_col


def direction_lock(selection: Sequence[Coord]) -> Optional[Direction]:
    """Axis shared by every selected cell, or ``None`` below two cells."""

    if len(selection) < 2:
        return None
    first_row, first_col = selection[0]
    if all(row == first_row for row, _ in selection):
        return Direction.HORIZONTAL
    if all(col == first_col for _, col in selection):
        return Direction.VERTICAL
    return None


def _keeps_lock(selection: Sequence[Coord], coord: Coord) -> bool:
    lock = direction_lock(selection)
    first_row, first_col = selection[0]
    if lock == Direction.HORIZONTAL:
        return coord[0] == first_row
    if lock == Direction.VERTICAL:
        return coord[1] == first_col
    return False


def advance(selection: Sequence[Coord], coord: Coord) -> List[Coord]:
    """Return the selection that results from clicking ``coord``."""

    coord = (coord[0], coord[1])
    if not selection:
        return [coord]

    current = [(r, c) for r, c in selection]
    if coord in current:
        # Clicking a selected cell undoes everything after it.
        return current[: current.index(coord) + 1]

    last = current[-1]
    if not is_adjacent(last, coord):
        LOGGER.debug("Non-adjacent click %s after %s; restarting selection", coord, last)
        return [coord]

    if len(current) == 1 or _keeps_lock(current, coord):
        return current + [coord]

    LOGGER.debug("Click %s breaks the %s line; restarting selection", coord, direction_lock(current))
    return [coord]


def can_commit(selection: Sequence[Coord]) -> bool:
    return len(selection) >= MIN_CLEAR_LENGTH
