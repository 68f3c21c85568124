"""Idempotent per-player clear credits.

``credit_clear`` may be called any number of times for the same
``(player, mode, puzzle)``; exactly one call increments the count. The
credited-id set (``credits`` rows) and the cached count
(``players.<mode>_clears``) are written in one transaction, so the count always
equals the size of the set.
"""

from __future__ import annotations

import sqlite3
from typing import AbstractSet, Dict, Iterable, List, Optional, Set

from ..core.constants import GUEST_NICKNAME, MAX_NICKNAME_LENGTH, Mode
from ..core.exceptions import PlayerNotFound, PuzzleNotFound
from ..core.models import CreditResult, Player, PlayerStatus, Puzzle, RankingEntry
from ..utils.logger import get_logger
from .catalog import PuzzleCatalog
from .database import Database

LOGGER = get_logger(__name__)

RANKING_KINDS = ("total", "country", "capital")


def next_puzzle(
    mode: Mode | str,
    credited_ids: AbstractSet[int],
    catalog: Iterable[Puzzle],
) -> Optional[Puzzle]:
    """Earliest puzzle of ``mode`` not yet credited, or ``None`` when the mode is complete."""

    mode = Mode.parse(mode)
    candidates = [p for p in catalog if p.mode == mode and p.id not in credited_ids]
    if not candidates:
        return None
    return min(candidates, key=lambda p: p.id)


def _row_to_player(row: sqlite3.Row) -> Player:
    return Player(
        id=row["id"],
        nickname=row["nickname"],
        country_clears=row["country_clears"],
        capital_clears=row["capital_clears"],
    )


class ProgressLedger:
    """Server-side record of which puzzles each player has been credited for."""

    def __init__(self, database: Database) -> None:
        self.database = database

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------
    def register_player(self, nickname: str) -> Player:
        """Return the player with ``nickname``, creating it on first use."""
        name = (nickname or "").strip()[:MAX_NICKNAME_LENGTH]
        if not name:
            raise ValueError("Nickname is required")
        with self.database.transaction() as conn:
            row = conn.execute(
                "SELECT id, nickname, country_clears, capital_clears FROM players WHERE nickname = ?",
                (name,),
            ).fetchone()
            if row is None:
                cursor = conn.execute("INSERT INTO players (nickname) VALUES (?)", (name,))
                LOGGER.info("Registered new player %s (%s)", cursor.lastrowid, name)
                return Player(id=int(cursor.lastrowid), nickname=name)
        LOGGER.info("Identified existing player %s (%s)", row["id"], name)
        return _row_to_player(row)

    def get_player(self, player_id: int) -> Player:
        with self.database.transaction(write=False) as conn:
            return _row_to_player(self._fetch_player(conn, player_id))

    def player_status(self, player_id: int) -> PlayerStatus:
        with self.database.transaction(write=False) as conn:
            player = _row_to_player(self._fetch_player(conn, player_id))
            credited: Dict[Mode, List[int]] = {mode: [] for mode in Mode}
            for row in conn.execute(
                "SELECT mode, puzzle_id FROM credits WHERE player_id = ? ORDER BY puzzle_id",
                (player_id,),
            ):
                credited[Mode(row["mode"])].append(row["puzzle_id"])
        return PlayerStatus(player=player, credited=credited)

    def credited_ids(self, player_id: int, mode: Mode | str) -> Set[int]:
        mode = Mode.parse(mode)
        with self.database.transaction(write=False) as conn:
            self._fetch_player(conn, player_id)
            return self._credited_ids(conn, player_id, mode)

    # ------------------------------------------------------------------
    # Crediting
    # ------------------------------------------------------------------
    def credit_clear(self, player_id: int, mode: Mode | str, puzzle_id: int) -> CreditResult:
        mode = Mode.parse(mode)
        column = mode.clears_column
        with self.database.transaction() as conn:
            player = self._fetch_player(conn, player_id)
            current = player[column]
            if self._is_credited(conn, player_id, mode, puzzle_id):
                LOGGER.info(
                    "Player %s already credited for %s puzzle %s (count %s)",
                    player_id, mode.value, puzzle_id, current,
                )
                return CreditResult(new_count=current, already_credited=True)

            exists = conn.execute(
                "SELECT 1 FROM puzzles WHERE id = ? AND mode = ?", (puzzle_id, mode.value)
            ).fetchone()
            if exists is None:
                raise PuzzleNotFound(f"No {mode.value} puzzle with id {puzzle_id}")

            conn.execute(
                "INSERT INTO credits (player_id, mode, puzzle_id) VALUES (?, ?, ?)",
                (player_id, mode.value, puzzle_id),
            )
            conn.execute(
                f"UPDATE players SET {column} = {column} + 1 WHERE id = ?", (player_id,)
            )
            new_count = conn.execute(
                f"SELECT {column} FROM players WHERE id = ?", (player_id,)
            ).fetchone()[0]
        LOGGER.info(
            "Credited player %s for %s puzzle %s (count %s)",
            player_id, mode.value, puzzle_id, new_count,
        )
        return CreditResult(new_count=new_count, already_credited=False)

    def next_puzzle_for(
        self, player_id: int, mode: Mode | str, catalog: PuzzleCatalog
    ) -> Optional[Puzzle]:
        mode = Mode.parse(mode)
        credited = self.credited_ids(player_id, mode)
        puzzle = next_puzzle(mode, credited, catalog.list_puzzles(mode))
        if puzzle is None:
            LOGGER.info("Player %s has completed every %s puzzle", player_id, mode.value)
        return puzzle

    # ------------------------------------------------------------------
    # Rankings
    # ------------------------------------------------------------------
    def rankings(self, kind: str, limit: int = 10) -> List[RankingEntry]:
        if kind not in RANKING_KINDS:
            raise ValueError(f"Unknown ranking type '{kind}'")
        if kind == "total":
            score_expr = "country_clears + capital_clears"
        else:
            score_expr = Mode(kind).clears_column
        with self.database.transaction(write=False) as conn:
            rows = conn.execute(
                f"SELECT nickname, {score_expr} AS score FROM players "
                "WHERE nickname != ? ORDER BY score DESC, id ASC LIMIT ?",
                (GUEST_NICKNAME, limit),
            ).fetchall()
        return [
            RankingEntry(rank=index + 1, nickname=row["nickname"], score=row["score"])
            for index, row in enumerate(rows)
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _fetch_player(conn: sqlite3.Connection, player_id: int) -> sqlite3.Row:
        row = conn.execute(
            "SELECT id, nickname, country_clears, capital_clears FROM players WHERE id = ?",
            (player_id,),
        ).fetchone()
        if row is None:
            raise PlayerNotFound(f"Player {player_id} not found")
        return row

    @staticmethod
    def _is_credited(conn: sqlite3.Connection, player_id: int, mode: Mode, puzzle_id: int) -> bool:
        row = conn.execute(
            "SELECT 1 FROM credits WHERE player_id = ? AND mode = ? AND puzzle_id = ?",
            (player_id, mode.value, puzzle_id),
        ).fetchone()
        return row is not None

    @staticmethod
    def _credited_ids(conn: sqlite3.Connection, player_id: int, mode: Mode) -> Set[int]:
        rows = conn.execute(
            "SELECT puzzle_id FROM credits WHERE player_id = ? AND mode = ?",
            (player_id, mode.value),
        )
        return {row["puzzle_id"] for row in rows}
