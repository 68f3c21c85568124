"""Puzzle templates per mode, in creation order."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..core.constants import Mode
from ..core.exceptions import InvalidBoardError
from ..core.models import Puzzle
from ..engine.board import validate_template
from ..utils.logger import get_logger
from .database import Database

LOGGER = get_logger(__name__)

PUZZLE_DIR = Path(__file__).resolve().parent.parent / "data" / "puzzles"


def default_puzzle_paths() -> Dict[Mode, Path]:
    return {mode: PUZZLE_DIR / f"{mode.value}.json" for mode in Mode}


def _row_to_puzzle(row: sqlite3.Row) -> Puzzle:
    return Puzzle.from_rows(
        id=row["id"],
        mode=row["mode"],
        rows=json.loads(row["board_data"]),
        creator=row["creator"],
        created_at=row["created_at"],
    )


class PuzzleCatalog:
    """Reads and stores puzzle templates."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def list_puzzles(self, mode: Mode | str) -> List[Puzzle]:
        mode = Mode.parse(mode)
        with self.database.transaction(write=False) as conn:
            rows = conn.execute(
                "SELECT id, mode, board_data, creator, created_at FROM puzzles "
                "WHERE mode = ? ORDER BY id",
                (mode.value,),
            ).fetchall()
        return [_row_to_puzzle(row) for row in rows]

    def get_puzzle(self, puzzle_id: int) -> Optional[Puzzle]:
        with self.database.transaction(write=False) as conn:
            row = conn.execute(
                "SELECT id, mode, board_data, creator, created_at FROM puzzles WHERE id = ?",
                (puzzle_id,),
            ).fetchone()
        return _row_to_puzzle(row) if row else None

    def create_puzzle(
        self,
        mode: Mode | str,
        board_template: Sequence[Sequence[str]],
        creator: str,
    ) -> Puzzle:
        """Store an authored board. Every one of the 40 cells must be filled."""
        mode = Mode.parse(mode)
        validate_template(board_template)
        creator = (creator or "").strip()
        if not creator:
            raise InvalidBoardError("Puzzle creator is required")
        with self.database.transaction() as conn:
            puzzle_id = self._insert(conn, mode, board_template, creator)
            row = conn.execute(
                "SELECT id, mode, board_data, creator, created_at FROM puzzles WHERE id = ?",
                (puzzle_id,),
            ).fetchone()
        LOGGER.info("Puzzle %s created for %s by %s", puzzle_id, mode.value, creator)
        return _row_to_puzzle(row)

    def seed_initial_puzzles(self, paths: Optional[Mapping[Mode, Path | str]] = None) -> int:
        """Insert the bundled puzzles when the table is empty. Returns rows inserted."""
        sources = paths or default_puzzle_paths()
        with self.database.transaction() as conn:
            (existing,) = conn.execute("SELECT COUNT(*) FROM puzzles").fetchone()
            if existing:
                LOGGER.info("Puzzles already exist (%d total); skipping seed", existing)
                return 0
            inserted = 0
            for mode, path in sources.items():
                mode = Mode.parse(mode)
                entries = json.loads(Path(path).read_text(encoding="utf-8"))
                for entry in entries:
                    validate_template(entry["data"])
                    self._insert(conn, mode, entry["data"], entry.get("creator", "標準問題"))
                    inserted += 1
        LOGGER.info("%d initial puzzles inserted", inserted)
        return inserted

    @staticmethod
    def _insert(
        conn: sqlite3.Connection,
        mode: Mode,
        board_template: Sequence[Sequence[str]],
        creator: str,
    ) -> int:
        board_data = json.dumps([list(row) for row in board_template], ensure_ascii=False)
        cursor = conn.execute(
            "INSERT INTO puzzles (mode, board_data, creator) VALUES (?, ?, ?)",
            (mode.value, board_data, creator),
        )
        return int(cursor.lastrowid)
