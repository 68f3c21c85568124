"""CLI entrypoint for the Keshimasu puzzle server and terminal player."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from keshimasu.api.server import ServerConfig, create_app
from keshimasu.core.constants import GUEST_NICKNAME, Mode
from keshimasu.core.models import Coord, Puzzle
from keshimasu.data.dictionary import WordDictionary
from keshimasu.engine.session import PlaySession, PuzzleCompleted
from keshimasu.store.catalog import PuzzleCatalog
from keshimasu.store.database import Database, DatabaseConfig
from keshimasu.store.ledger import ProgressLedger
from keshimasu.utils.logger import configure_logging
from keshimasu.utils.pretty import pretty_print_board

HELP_TEXT = (
    "Commands: 'r c' selects a cell, 'x' clears the selection as a word, "
    "'reset' restarts the board, 'q' quits."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keshimasu word-elimination puzzle")
    parser.add_argument(
        "--database",
        type=Path,
        default=None,
        help="Path to the SQLite database (defaults to $KESHIMASU_DB_PATH or local_db/)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables and insert the bundled puzzles")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Port (defaults to $PORT or 3000)")

    play = sub.add_parser("play", help="Play the next uncleared puzzle in the terminal")
    play.add_argument(
        "--mode",
        type=str,
        choices=[m.value for m in Mode],
        default=Mode.COUNTRY.value,
        help="Puzzle category",
    )
    play.add_argument("--nickname", type=str, default=GUEST_NICKNAME, help="Player nickname")
    return parser


def _database_config(args: argparse.Namespace) -> DatabaseConfig:
    if args.database is not None:
        return DatabaseConfig(path=args.database)
    return DatabaseConfig.from_env()


def _prompt_wildcard(position: int, token: str) -> Optional[str]:
    reply = input(f"「{token}」の{position + 1}文字目（F）を何にしますか？ ").strip()
    return reply or None


def _parse_coord(text: str) -> Optional[Coord]:
    parts = text.replace(",", " ").split()
    if len(parts) != 2 or not all(p.lstrip("-").isdigit() for p in parts):
        return None
    return int(parts[0]), int(parts[1])


def play_puzzle(session: PlaySession) -> bool:
    """Interactive loop for one board. Returns True when the board was emptied."""
    print(HELP_TEXT)
    while not session.completed:
        pretty_print_board(session.board, selected=session.selection)
        print(f"Used words: {', '.join(sorted(session.used_words)) or '-'}")
        command = input("> ").strip()
        if command == "q":
            return False
        if command == "reset":
            session.reset()
            continue
        if command == "x":
            outcome = session.commit_clear(_prompt_wildcard)
            print(f"Cleared {outcome.word}" if outcome.ok else outcome.message)
            continue
        coord = _parse_coord(command)
        if coord is None:
            print(HELP_TEXT)
            continue
        try:
            session.click(coord)
        except ValueError as exc:
            print(exc)
    return True


def run_play(args: argparse.Namespace) -> None:
    database = Database(_database_config(args))
    database.initialize()
    catalog = PuzzleCatalog(database)
    catalog.seed_initial_puzzles()
    ledger = ProgressLedger(database)
    mode = Mode.parse(args.mode)

    # Guests play the first puzzle and are never credited.
    player = None if args.nickname == GUEST_NICKNAME else ledger.register_player(args.nickname)
    puzzle: Optional[Puzzle]
    if player is None:
        puzzles = catalog.list_puzzles(mode)
        puzzle = puzzles[0] if puzzles else None
    else:
        puzzle = ledger.next_puzzle_for(player.id, mode, catalog)
    if puzzle is None:
        print(f"Every {mode.value} puzzle is already cleared.")
        return

    def credit(event: PuzzleCompleted) -> None:
        if player is None or not event.creditable:
            print("Cleared!")
            return
        result = ledger.credit_clear(player.id, event.mode, event.puzzle_id)
        print(f"Cleared! {mode.value} clears: {result.new_count}")

    session = PlaySession(puzzle, WordDictionary())
    session.add_completion_listener(credit)
    print(f"Puzzle #{puzzle.id} by {puzzle.creator}")
    play_puzzle(session)


def main(argv: List[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    if args.command == "init-db":
        database = Database(_database_config(args))
        database.initialize()
        PuzzleCatalog(database).seed_initial_puzzles()
    elif args.command == "serve":
        config = ServerConfig.from_env()
        config.database = _database_config(args)
        if args.host:
            config.host = args.host
        if args.port:
            config.port = args.port
        app = create_app(config)
        app.run(host=config.host, port=config.port)
    elif args.command == "play":
        run_play(args)


if __name__ == "__main__":  # pragma: no cover
    main()
