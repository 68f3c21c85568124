"""Custom exception hierarchy for the puzzle engine and progress ledger."""

from __future__ import annotations

from enum import Enum


class RejectReason(str, Enum):
    """Why a clear attempt was refused. The board is unchanged in every case."""

    SELECTION_TOO_SHORT = "SELECTION_TOO_SHORT"
    INVALID_WILDCARD_INPUT = "INVALID_WILDCARD_INPUT"
    NOT_IN_DICTIONARY = "NOT_IN_DICTIONARY"
    ALREADY_USED = "ALREADY_USED"


class KeshimasuError(Exception):
    """Base exception for engine and ledger failures."""


class DictionaryLoadError(KeshimasuError):
    """Raised when a word list cannot be read."""


class InvalidBoardError(KeshimasuError):
    """Raised when a board template has the wrong shape or illegal cells."""


class ClearRejected(KeshimasuError):
    """Raised inside the resolver when a selection cannot be cleared."""

    reason: RejectReason = RejectReason.NOT_IN_DICTIONARY

    def __init__(self, message: str, word: str | None = None) -> None:
        super().__init__(message)
        self.word = word


class InvalidWildcardInput(ClearRejected):
    """A wildcard slot received no replacement or an unusable one."""

    reason = RejectReason.INVALID_WILDCARD_INPUT


class NotInDictionary(ClearRejected):
    """The resolved word is not a member of the active dictionary."""

    reason = RejectReason.NOT_IN_DICTIONARY


class AlreadyUsed(ClearRejected):
    """The resolved word was already cleared during this attempt."""

    reason = RejectReason.ALREADY_USED


class PlayerNotFound(KeshimasuError):
    """Raised when a ledger operation targets an unknown player id."""


class PuzzleNotFound(KeshimasuError):
    """Raised when a puzzle id does not exist in the requested mode."""
