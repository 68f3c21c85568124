"""Shared constants and enumerations for the puzzle engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(str, Enum):
    """Puzzle categories, each with its own dictionary, catalog and progress."""

    COUNTRY = "country"
    CAPITAL = "capital"

    @property
    def clears_column(self) -> str:
        return f"{self.value}_clears"

    @classmethod
    def parse(cls, value: "Mode | str") -> "Mode":
        if isinstance(value, Mode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown mode '{value}' (expected one of: {valid})") from None


class Direction(str, Enum):
    """Axis a selection is locked to once it holds two cells."""

    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"


BOARD_ROWS = 8
BOARD_COLS = 5
# Only the bottom rows are shown and clickable; cells above drop into view as columns settle.
VISIBLE_ROWS = 5

WILDCARD = "F"
EMPTY = ""

MIN_CLEAR_LENGTH = 2
MAX_NICKNAME_LENGTH = 10
GUEST_NICKNAME = "ゲスト"


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

