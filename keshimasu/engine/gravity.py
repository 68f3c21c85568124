"""Column compaction applied after every successful clear."""

from __future__ import annotations

from typing import List, Sequence

from ..core.constants import EMPTY
from .board import Board


def settle_column(values: Sequence[str]) -> List[str]:
    """Drop the non-empty values of one column to its bottom, keeping their order."""

    filled = [value for value in values if value != EMPTY]
    return [EMPTY] * (len(values) - len(filled)) + filled


def settle(board: Board) -> Board:
    """Return a new board where every column has been settled independently."""

    settled = board.clone()
    for col in range(board.bounds.cols):
        settled.set_column(col, settle_column(board.column(col)))
    return settled
