"""Shared helpers for katakana normalization."""

from __future__ import annotations

import re
import unicodedata

from ..core.constants import WILDCARD

HIRAGANA_RE = re.compile(r"[\u3041-\u3096]")
KATAKANA_RE = re.compile(r"[\u30a0-\u30ff]")

# Offset between a hiragana code point and its katakana counterpart.
KANA_OFFSET = 0x60


def to_katakana(text: str) -> str:
    """Map every hiragana character in ``text`` to katakana."""

    return HIRAGANA_RE.sub(lambda match: chr(ord(match.group(0)) + KANA_OFFSET), text)


def normalize_word(text: str) -> str:
    """Return ``text`` in the script the dictionaries are stored in.

    NFKC folds half-width katakana and full-width latin letters, hiragana is
    lifted to katakana and latin letters are uppercased so ``f`` becomes the
    wildcard sentinel.
    """

    if not text:
        return ""
    folded = unicodedata.normalize("NFKC", text.strip())
    return to_katakana(folded).upper()


def is_katakana(char: str) -> bool:
    return bool(char) and KATAKANA_RE.fullmatch(char) is not None


def is_valid_game_char(char: str) -> bool:
    """True for characters allowed in a board cell."""

    return char == WILDCARD or is_katakana(char)


__all__ = [
    "is_katakana",
    "is_valid_game_char",
    "normalize_word",
    "to_katakana",
]
