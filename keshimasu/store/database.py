"""SQLite connection factory, schema and the write critical section.

Every unit of work opens its own connection so the database can be shared by
Flask worker threads and separate processes. ``transaction()`` issues
``BEGIN IMMEDIATE``, which takes the write lock before the first read; a
read-check-write sequence inside it cannot interleave with another writer.
"""

from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_DB_PATH = Path("local_db/keshimasu.sqlite3")

SCHEMA = """
CREATE TABLE IF NOT EXISTS players (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    nickname TEXT UNIQUE NOT NULL,
    country_clears INTEGER NOT NULL DEFAULT 0,
    capital_clears INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS puzzles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    mode TEXT NOT NULL CHECK (mode IN ('country', 'capital')),
    board_data TEXT NOT NULL,
    creator TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS credits (
    player_id INTEGER NOT NULL REFERENCES players(id),
    mode TEXT NOT NULL CHECK (mode IN ('country', 'capital')),
    puzzle_id INTEGER NOT NULL REFERENCES puzzles(id),
    credited_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (player_id, mode, puzzle_id)
);
"""


@dataclass
class DatabaseConfig:
    path: Path | str = DEFAULT_DB_PATH
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls, env_var: str = "KESHIMASU_DB_PATH") -> "DatabaseConfig":
        return cls(path=os.environ.get(env_var, str(DEFAULT_DB_PATH)))


class Database:
    """Thin wrapper that hands out short-lived transactional connections."""

    def __init__(self, config: DatabaseConfig | None = None) -> None:
        self.config = config or DatabaseConfig()
        self.path = Path(self.config.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are begun explicitly below.
        conn = sqlite3.connect(
            str(self.path),
            timeout=self.config.timeout_seconds,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def transaction(self, *, write: bool = True) -> Iterator[sqlite3.Connection]:
        """Run the body atomically; any exception rolls everything back."""
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE" if write else "BEGIN DEFERRED")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    def initialize(self) -> None:
        conn = self.connect()
        try:
            conn.executescript(SCHEMA)
        finally:
            conn.close()
        LOGGER.info("Database schema ready at %s", self.path)
