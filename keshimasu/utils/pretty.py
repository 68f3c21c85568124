"""Pretty-print helpers for boards."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Iterable, Optional

from ..core.constants import EMPTY, VISIBLE_ROWS

if TYPE_CHECKING:
    from ..core.models import Coord
    from ..engine.board import Board


def format_board(
    board: Board,
    selected: Optional[Iterable[Coord]] = None,
    *,
    visible_rows: Optional[int] = VISIBLE_ROWS,
) -> str:
    """Render the bottom ``visible_rows`` rows with row/column headers.

    Selected cells are bracketed. ``visible_rows=None`` renders every row.
    """
    chosen = set(selected or ())
    width = board.bounds.cols
    first_row = 0 if visible_rows is None else max(0, board.bounds.rows - visible_rows)
    lines = ["    " + " ".join(f"{c:^4}" for c in range(width))]
    for r in range(first_row, board.bounds.rows):
        cells = []
        for c in range(width):
            value = board.cell(r, c)
            symbol = "・" if value == EMPTY else value
            cells.append(f"[{symbol}]" if (r, c) in chosen else f" {symbol} ")
        lines.append(f"{r:>2} | " + " ".join(cells))
    return "\n".join(lines)


def pretty_print_board(board: Board, *, label: str | None = None, selected=None, stream=None) -> None:
    """Print the board in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_board(board, selected), file=stream)
