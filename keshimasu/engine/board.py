"""Board representation and helper utilities."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ..core.constants import BOARD_COLS, BOARD_ROWS, EMPTY, Bounds
from ..core.exceptions import InvalidBoardError
from ..core.models import Coord
from ..data.normalization import is_valid_game_char


def validate_template(rows: Sequence[Sequence[str]], *, require_filled: bool = True) -> None:
    """Reject anything that is not an 8x5 matrix of game characters."""

    if not isinstance(rows, (list, tuple)):
        raise InvalidBoardError(f"Board must be a list of rows, got {type(rows).__name__}")
    if len(rows) != BOARD_ROWS:
        raise InvalidBoardError(f"Board must have {BOARD_ROWS} rows, got {len(rows)}")
    for r, row in enumerate(rows):
        if not isinstance(row, (list, tuple)) or len(row) != BOARD_COLS:
            raise InvalidBoardError(f"Row {r} must have {BOARD_COLS} cells")
        for c, value in enumerate(row):
            if not isinstance(value, str):
                raise InvalidBoardError(f"Cell ({r},{c}) is not a string: {value!r}")
            if value == EMPTY and not require_filled:
                continue
            if not is_valid_game_char(value):
                raise InvalidBoardError(f"Invalid cell value {value!r} at ({r},{c})")


class Board:
    """Mutable grid of cell values for the puzzle currently in play."""

    def __init__(self, cells: Sequence[Sequence[str]]) -> None:
        if not cells or not cells[0]:
            raise InvalidBoardError("Board needs at least one row and one column")
        width = len(cells[0])
        if any(len(row) != width for row in cells):
            raise InvalidBoardError("Board rows must all have the same length")
        self.bounds = Bounds(rows=len(cells), cols=width)
        self.cells: List[List[str]] = [list(row) for row in cells]

    @classmethod
    def from_template(cls, template: Sequence[Sequence[str]]) -> "Board":
        """Build a puzzle board, enforcing the fixed puzzle shape."""
        validate_template(template, require_filled=False)
        return cls(template)

    def clone(self) -> "Board":
        return Board(self.cells)

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------
    def cell(self, row: int, col: int) -> str:
        return self.cells[row][col]

    def is_empty_cell(self, row: int, col: int) -> bool:
        return self.cells[row][col] == EMPTY

    def values_at(self, coords: Iterable[Coord]) -> List[str]:
        return [self.cells[r][c] for r, c in coords]

    def column(self, col: int) -> List[str]:
        return [self.cells[r][col] for r in range(self.bounds.rows)]

    def set_column(self, col: int, values: Sequence[str]) -> None:
        if len(values) != self.bounds.rows:
            raise ValueError(f"Column needs {self.bounds.rows} values, got {len(values)}")
        for r, value in enumerate(values):
            self.cells[r][col] = value

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def clear(self, coords: Iterable[Coord]) -> None:
        for r, c in coords:
            if not self.bounds.contains(r, c):
                raise ValueError(f"Cannot clear cell outside board: {(r, c)}")
            self.cells[r][c] = EMPTY

    def remaining(self) -> int:
        return sum(1 for row in self.cells for value in row if value != EMPTY)

    def is_empty(self) -> bool:
        return self.remaining() == 0

    def to_jsonable(self) -> List[List[str]]:
        return [list(row) for row in self.cells]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.cells == other.cells

    def __repr__(self) -> str:
        return f"Board({self.bounds.rows}x{self.bounds.cols}, remaining={self.remaining()})"
