"""Per-mode word lists with constant-time membership checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Set

from ..core.constants import Mode
from ..core.exceptions import DictionaryLoadError
from ..utils.logger import get_logger
from .normalization import normalize_word

LOGGER = get_logger(__name__)

WORDLIST_DIR = Path(__file__).resolve().parent / "wordlists"


def default_wordlist_paths() -> Dict[Mode, Path]:
    return {mode: WORDLIST_DIR / f"{mode.value}.txt" for mode in Mode}


@dataclass
class DictionaryConfig:
    """Where each mode's word list lives."""

    paths: Mapping[Mode, Path | str] = field(default_factory=default_wordlist_paths)
    min_length: int = 2


def parse_wordlist(path: Path) -> Iterable[str]:
    """Yield entries from a file, one per line. Blank lines and # comments are skipped."""
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        yield line


class WordDictionary:
    """Country and capital dictionaries keyed by normalized word."""

    def __init__(
        self,
        config: Optional[DictionaryConfig] = None,
        words: Optional[Mapping[Mode | str, Iterable[str]]] = None,
    ) -> None:
        self.config = config or DictionaryConfig()
        self._words: Dict[Mode, Set[str]] = {mode: set() for mode in Mode}
        if words is not None:
            for mode, entries in words.items():
                self._add_all(Mode.parse(mode), entries)
        else:
            self._load()

    @classmethod
    def from_words(cls, words: Mapping[Mode | str, Iterable[str]]) -> "WordDictionary":
        return cls(words=words)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _load(self) -> None:
        for mode, raw_path in self.config.paths.items():
            mode = Mode.parse(mode)
            path = Path(raw_path)
            if not path.exists():
                raise DictionaryLoadError(f"Missing word list for {mode.value}: {path}")
            try:
                entries = list(parse_wordlist(path))
            except (OSError, UnicodeDecodeError) as exc:
                raise DictionaryLoadError(f"Cannot read word list {path}: {exc}") from exc
            self._add_all(mode, entries)
            LOGGER.info("Loaded %d %s words from %s", len(self._words[mode]), mode.value, path.name)

    def _add_all(self, mode: Mode, entries: Iterable[str]) -> None:
        bucket = self._words[mode]
        for entry in entries:
            word = normalize_word(entry)
            if len(word) < self.config.min_length:
                LOGGER.debug("Skipping short entry %r in %s list", entry, mode.value)
                continue
            bucket.add(word)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def contains(self, mode: Mode | str, word: str) -> bool:
        return normalize_word(word) in self._words[Mode.parse(mode)]

    def words(self, mode: Mode | str) -> Set[str]:
        return set(self._words[Mode.parse(mode)])

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._words.values())
