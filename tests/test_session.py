import unittest
from typing import List, Tuple
from unittest.mock import MagicMock

from keshimasu.core.constants import Mode
from keshimasu.core.exceptions import InvalidBoardError, RejectReason
from keshimasu.core.models import Puzzle
from keshimasu.data.dictionary import WordDictionary
from keshimasu.engine.session import PlaySession, PuzzleCompleted
from keshimasu.utils.pretty import format_board

CAPITAL_BOARD = [
    ["ト", "ウ", "キ", "ョ", "ウ"],
    ["マ", "ド", "リ", "ー", "ド"],
    ["ワ", "シ", "ン", "ト", "ン"],
    ["ブ", "ダ", "ペ", "ス", "ト"],
    ["ヘ", "ル", "シ", "ン", "キ"],
    ["ア", "テ", "ネ", "パ", "リ"],
    ["カ", "イ", "ロ", "リ", "マ"],
    ["ペ", "キ", "ン", "リ", "ガ"],
]

# Word segments per row, bottom row first, as (start_col, end_col) inclusive.
SEGMENTS: List[List[Tuple[int, int]]] = [
    [(0, 2), (3, 4)],
    [(0, 2), (3, 4)],
    [(0, 2), (3, 4)],
    [(0, 4)],
    [(0, 4)],
    [(0, 4)],
    [(0, 4)],
    [(0, 4)],
]


def make_session(board=None, mode=Mode.CAPITAL, **kwargs) -> PlaySession:
    puzzle = Puzzle.from_rows(id=42, mode=mode, rows=board or CAPITAL_BOARD, creator="tester")
    return PlaySession(puzzle, WordDictionary(), **kwargs)


def select_run(session: PlaySession, row: int, start: int, end: int) -> None:
    for col in range(start, end + 1):
        session.click((row, col))


class SessionClearTests(unittest.TestCase):
    def test_clear_removes_cells_and_applies_gravity(self) -> None:
        session = make_session()
        select_run(session, 7, 0, 2)
        outcome = session.commit_clear()
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.word, "ペキン")
        self.assertEqual(session.board.cells[7], ["カ", "イ", "ロ", "リ", "ガ"])
        self.assertEqual(session.board.cells[0], ["", "", "", "ョ", "ウ"])
        self.assertEqual(session.selection, [])
        self.assertEqual(session.used_words, {"ペキン"})

    def test_single_cell_cannot_be_committed(self) -> None:
        session = make_session()
        session.click((7, 0))
        self.assertFalse(session.can_commit)
        outcome = session.commit_clear()
        self.assertEqual(outcome.reason, RejectReason.SELECTION_TOO_SHORT)

    def test_rejected_clear_leaves_state_untouched(self) -> None:
        session = make_session()
        before = session.board.clone()
        select_run(session, 7, 0, 1)
        outcome = session.commit_clear()
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.reason, RejectReason.NOT_IN_DICTIONARY)
        self.assertEqual(session.board, before)
        self.assertEqual(session.selection, [(7, 0), (7, 1)])
        self.assertEqual(session.used_words, set())

    def test_cancelled_wildcard_leaves_state_untouched(self) -> None:
        board = [row[:] for row in CAPITAL_BOARD]
        board[7][1] = "F"
        session = make_session(board)
        before = session.board.clone()
        select_run(session, 7, 0, 2)
        outcome = session.commit_clear(lambda position, word: None)
        self.assertEqual(outcome.reason, RejectReason.INVALID_WILDCARD_INPUT)
        self.assertEqual(session.board, before)
        self.assertEqual(session.selection, [(7, 0), (7, 1), (7, 2)])

    def test_wildcard_resolved_clear(self) -> None:
        board = [row[:] for row in CAPITAL_BOARD]
        board[7][1] = "F"
        session = make_session(board)
        select_run(session, 7, 0, 2)
        outcome = session.commit_clear(lambda position, word: "き")
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.word, "ペキン")

    def test_clicks_on_empty_cells_are_ignored(self) -> None:
        session = make_session()
        select_run(session, 7, 0, 2)
        session.commit_clear()
        session.click((7, 3))
        session.click((0, 0))
        self.assertEqual(session.selection, [(7, 3)])

    def test_click_outside_board_raises(self) -> None:
        with self.assertRaises(ValueError):
            make_session().click((8, 0))

    def test_reset_restores_template(self) -> None:
        session = make_session()
        select_run(session, 7, 0, 2)
        session.commit_clear()
        session.click((7, 3))
        session.reset()
        self.assertEqual(session.board.to_jsonable(), CAPITAL_BOARD)
        self.assertEqual(session.selection, [])
        self.assertEqual(session.used_words, set())

    def test_template_shape_enforced(self) -> None:
        with self.assertRaises(InvalidBoardError):
            make_session(board=CAPITAL_BOARD[:5])

    def test_format_board_marks_selection(self) -> None:
        session = make_session()
        select_run(session, 7, 0, 1)
        rendered = format_board(session.board, session.selection)
        self.assertIn("[ペ]", rendered)
        self.assertIn("[キ]", rendered)
        self.assertIn(" ト ", rendered)
        self.assertNotIn("ョ", rendered)
        self.assertNotIn(" 0 |", rendered)
        self.assertIn(" 0 |", format_board(session.board, visible_rows=None))

    def test_hidden_rows_ignore_clicks(self) -> None:
        session = make_session()
        self.assertEqual(session.first_visible_row, 3)
        for coord in ((0, 0), (2, 4)):
            session.click(coord)
        self.assertEqual(session.selection, [])
        session.click((3, 0))
        session.click((2, 0))
        self.assertEqual(session.selection, [(3, 0)])

    def test_hidden_cells_drop_into_view_after_clear(self) -> None:
        session = make_session()
        select_run(session, 7, 0, 2)
        session.commit_clear()
        self.assertEqual(session.board.cell(3, 0), "ワ")
        self.assertNotIn("ワ", format_board(make_session().board))
        self.assertIn(" ワ ", format_board(session.board))
        session.click((3, 0))
        self.assertEqual(session.selection, [(3, 0)])


class SessionCompletionTests(unittest.TestCase):
    def _solve(self, session: PlaySession) -> list:
        outcomes = []
        for row_segments in SEGMENTS:
            for start, end in row_segments:
                select_run(session, 7, start, end)
                outcome = session.commit_clear()
                self.assertTrue(outcome.ok, outcome.message)
                outcomes.append(outcome)
        return outcomes

    def test_emptying_board_emits_exactly_one_completion(self) -> None:
        session = make_session()
        listener = MagicMock()
        session.add_completion_listener(listener)
        outcomes = self._solve(session)
        self.assertTrue(session.board.is_empty())
        self.assertEqual([o.completed for o in outcomes].count(True), 1)
        self.assertTrue(outcomes[-1].completed)
        listener.assert_called_once_with(
            PuzzleCompleted(puzzle_id=42, mode=Mode.CAPITAL, creditable=True)
        )

    def test_no_completion_after_board_already_empty(self) -> None:
        session = make_session()
        listener = MagicMock()
        session.add_completion_listener(listener)
        self._solve(session)
        self.assertEqual(session.commit_clear().reason, RejectReason.SELECTION_TOO_SHORT)
        self.assertEqual(listener.call_count, 1)

    def test_creation_play_is_not_creditable(self) -> None:
        session = make_session(creation_play=True)
        events = []
        session.add_completion_listener(events.append)
        self._solve(session)
        self.assertEqual(len(events), 1)
        self.assertFalse(events[0].creditable)

    def test_reset_rearms_completion(self) -> None:
        session = make_session()
        events = []
        session.add_completion_listener(events.append)
        self._solve(session)
        session.reset()
        self.assertFalse(session.completed)
        self._solve(session)
        self.assertEqual(len(events), 2)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
