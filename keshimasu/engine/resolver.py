"""Turn a committed selection into a dictionary word."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Callable, List, Optional, Sequence

from ..core.constants import WILDCARD, Mode
from ..core.exceptions import (
    AlreadyUsed,
    ClearRejected,
    InvalidWildcardInput,
    NotInDictionary,
    RejectReason,
)
from ..data.dictionary import WordDictionary
from ..data.normalization import is_katakana, normalize_word
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

# Called once per wildcard with its 0-based position and the raw token.
# Returning ``None`` (or blank text) cancels the clear.
WildcardResolver = Callable[[int, str], Optional[str]]


@dataclass
class ResolveResult:
    ok: bool
    word: Optional[str] = None
    reason: Optional[RejectReason] = None
    message: str = ""


class WordResolver:
    """Resolves wildcards and checks the candidate against the dictionary."""

    def __init__(self, dictionary: WordDictionary) -> None:
        self.dictionary = dictionary

    def resolve(
        self,
        cells: Sequence[str],
        mode: Mode | str,
        used_words: AbstractSet[str],
        wildcard_resolver: Optional[WildcardResolver] = None,
    ) -> ResolveResult:
        mode = Mode.parse(mode)
        try:
            word = self._substitute(cells, wildcard_resolver)
            self._check_dictionary(word, mode)
            self._check_unused(word, used_words)
        except ClearRejected as exc:
            LOGGER.info("Clear rejected (%s): %s", exc.reason.value, exc)
            return ResolveResult(ok=False, word=exc.word, reason=exc.reason, message=str(exc))
        return ResolveResult(ok=True, word=word)

    def _substitute(
        self,
        cells: Sequence[str],
        wildcard_resolver: Optional[WildcardResolver],
    ) -> str:
        token = "".join(cells)
        if WILDCARD not in token:
            return token

        chars: List[str] = list(cells)
        for position, value in enumerate(cells):
            if value != WILDCARD:
                continue
            reply = wildcard_resolver(position, token) if wildcard_resolver else None
            chars[position] = self._replacement(reply, position)
        return "".join(chars)

    @staticmethod
    def _replacement(reply: Optional[str], position: int) -> str:
        normalized = normalize_word(reply or "")
        if not normalized:
            raise InvalidWildcardInput(f"No character entered for wildcard at position {position + 1}")
        char = normalized[0]
        if char == WILDCARD or not is_katakana(char):
            raise InvalidWildcardInput(
                f"'{char}' is not a valid replacement for wildcard at position {position + 1}"
            )
        return char

    def _check_dictionary(self, word: str, mode: Mode) -> None:
        if not self.dictionary.contains(mode, word):
            raise NotInDictionary(f"'{word}' is not a valid {mode.value} name", word=word)

    @staticmethod
    def _check_unused(word: str, used_words: AbstractSet[str]) -> None:
        if word in used_words:
            raise AlreadyUsed(f"'{word}' was already used on this board", word=word)
