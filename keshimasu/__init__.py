"""Keshimasu: a katakana word-elimination puzzle.

This package exposes the public API surface via:

- ``keshimasu.engine.session.PlaySession``: one player's attempt at a board.
- ``keshimasu.data.dictionary.WordDictionary``: per-mode word lists.
- ``keshimasu.store.ledger.ProgressLedger``: idempotent clear credits.
"""

from .data.dictionary import DictionaryConfig, WordDictionary
from .engine.session import PlaySession, PuzzleCompleted
from .store.ledger import ProgressLedger

__all__ = [
    "DictionaryConfig",
    "PlaySession",
    "ProgressLedger",
    "PuzzleCompleted",
    "WordDictionary",
]

__version__ = "0.1.0"
