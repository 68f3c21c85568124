"""Data models shared by the engine, the ledger and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import Mode

Coord = Tuple[int, int]


@dataclass(frozen=True)
class Puzzle:
    """Immutable puzzle template referenced by id from the ledger."""

    id: int
    mode: Mode
    board: Tuple[Tuple[str, ...], ...]
    creator: str
    created_at: Optional[str] = None

    @classmethod
    def from_rows(
        cls,
        id: int,
        mode: Mode | str,
        rows: Sequence[Sequence[str]],
        creator: str,
        created_at: Optional[str] = None,
    ) -> "Puzzle":
        return cls(
            id=id,
            mode=Mode.parse(mode),
            board=tuple(tuple(row) for row in rows),
            creator=creator,
            created_at=created_at,
        )

    def to_jsonable(self) -> dict:
        return {
            "id": self.id,
            "mode": self.mode.value,
            "board": [list(row) for row in self.board],
            "creator": self.creator,
            "created_at": self.created_at,
        }


@dataclass
class Player:
    id: int
    nickname: str
    country_clears: int = 0
    capital_clears: int = 0

    def to_jsonable(self) -> dict:
        return {
            "id": self.id,
            "nickname": self.nickname,
            "country_clears": self.country_clears,
            "capital_clears": self.capital_clears,
        }


@dataclass
class PlayerStatus:
    """Progress view used to resume a session."""

    player: Player
    credited: Dict[Mode, List[int]] = field(default_factory=dict)

    def to_jsonable(self) -> dict:
        return {
            "nickname": self.player.nickname,
            "country_clears": self.player.country_clears,
            "capital_clears": self.player.capital_clears,
            "credited": {
                mode.value: sorted(self.credited.get(mode, [])) for mode in Mode
            },
        }


@dataclass(frozen=True)
class CreditResult:
    new_count: int
    already_credited: bool


@dataclass(frozen=True)
class RankingEntry:
    rank: int
    nickname: str
    score: int
