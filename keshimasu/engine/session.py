"""One player's attempt at one puzzle.

All mutable play state (board, selection, used words) lives on the session
object so independent sessions never share anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from ..core.constants import VISIBLE_ROWS, Mode
from ..core.exceptions import RejectReason
from ..core.models import Coord, Puzzle
from ..data.dictionary import WordDictionary
from ..utils.logger import get_logger
from .board import Board
from .gravity import settle
from .resolver import ResolveResult, WildcardResolver, WordResolver
from .selection import advance, can_commit

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class PuzzleCompleted:
    puzzle_id: int
    mode: Mode
    creditable: bool = True


@dataclass
class ClearOutcome:
    ok: bool
    word: Optional[str] = None
    reason: Optional[RejectReason] = None
    message: str = ""
    completed: bool = False
    cleared: List[Coord] = field(default_factory=list)


CompletionListener = Callable[[PuzzleCompleted], None]


class PlaySession:
    """Owns the board, selection and used words for a single attempt."""

    def __init__(
        self,
        puzzle: Puzzle,
        dictionary: WordDictionary,
        *,
        creation_play: bool = False,
        resolver: Optional[WordResolver] = None,
    ) -> None:
        self.puzzle = puzzle
        self.mode = puzzle.mode
        self.creation_play = creation_play
        self.resolver = resolver or WordResolver(dictionary)
        self._template = Board.from_template(puzzle.board)
        self._listeners: List[CompletionListener] = []
        self.board: Board = self._template.clone()
        self.selection: List[Coord] = []
        self.used_words: Set[str] = set()
        self._completed = False

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def add_completion_listener(self, listener: CompletionListener) -> None:
        self._listeners.append(listener)

    def _emit_completed(self) -> None:
        event = PuzzleCompleted(
            puzzle_id=self.puzzle.id,
            mode=self.mode,
            creditable=not self.creation_play,
        )
        LOGGER.info("Puzzle %s (%s) completed", self.puzzle.id, self.mode.value)
        for listener in self._listeners:
            listener(event)

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------
    def click(self, coord: Coord) -> List[Coord]:
        row, col = coord
        if not self.board.bounds.contains(row, col):
            raise ValueError(f"Click outside board: {(row, col)}")
        if row < self.first_visible_row or self.board.is_empty_cell(row, col):
            return list(self.selection)
        self.selection = advance(self.selection, (row, col))
        return list(self.selection)

    @property
    def first_visible_row(self) -> int:
        return max(0, self.board.bounds.rows - VISIBLE_ROWS)

    @property
    def can_commit(self) -> bool:
        return can_commit(self.selection)

    def commit_clear(self, wildcard_resolver: Optional[WildcardResolver] = None) -> ClearOutcome:
        if not self.can_commit:
            return ClearOutcome(
                ok=False,
                reason=RejectReason.SELECTION_TOO_SHORT,
                message="Select at least two cells",
            )

        cells = self.board.values_at(self.selection)
        result: ResolveResult = self.resolver.resolve(
            cells, self.mode, self.used_words, wildcard_resolver
        )
        if not result.ok:
            return ClearOutcome(
                ok=False, word=result.word, reason=result.reason, message=result.message
            )

        cleared = list(self.selection)
        board = self.board.clone()
        board.clear(cleared)
        self.board = settle(board)
        self.used_words.add(result.word)
        self.selection = []
        LOGGER.debug("Cleared %s at %s, %d cells left", result.word, cleared, self.board.remaining())

        completed = False
        if self.board.is_empty() and not self._completed:
            self._completed = True
            completed = True
            self._emit_completed()
        return ClearOutcome(ok=True, word=result.word, completed=completed, cleared=cleared)

    def reset(self) -> None:
        """Restore the board from the template and forget selection and words."""
        self.board = self._template.clone()
        self.selection = []
        self.used_words = set()
        self._completed = False

    @property
    def completed(self) -> bool:
        return self._completed
