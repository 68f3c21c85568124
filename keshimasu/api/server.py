"""HTTP API for player registration, progress and puzzle catalog.

Routes:
    POST /api/player/register           - register or identify a player by nickname
    GET  /api/player/<id>/status        - counts and credited puzzle ids per mode
    POST /api/score/update              - credit a completed puzzle (idempotent)
    GET  /api/rankings/<type>           - top players for total/country/capital
    GET  /api/puzzles/<mode>            - puzzle catalog for a mode
    POST /api/puzzles                   - store an authored puzzle
    GET  /api/puzzles/<mode>/next       - first puzzle the player has not cleared
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from ..core.constants import Mode
from ..core.exceptions import InvalidBoardError, PlayerNotFound, PuzzleNotFound
from ..store.catalog import PuzzleCatalog
from ..store.database import Database, DatabaseConfig
from ..store.ledger import ProgressLedger
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    seed_puzzles: bool = True

    @classmethod
    def from_env(cls) -> "ServerConfig":
        return cls(
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "3000")),
            database=DatabaseConfig.from_env(),
        )


class InvalidRequest(ValueError):
    """Request body or path parameters are malformed."""


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequest("JSON object body required")
    return data


def _int_param(value: Any, name: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidRequest(f"'{name}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRequest(f"'{name}' must be an integer") from None


def _mode_param(value: Any) -> Mode:
    try:
        return Mode.parse(value)
    except ValueError as exc:
        raise InvalidRequest(str(exc)) from None


def _error(message: str, status: int) -> Tuple[Any, int]:
    return jsonify({"message": message}), status


def create_app(
    config: Optional[ServerConfig] = None,
    *,
    database: Optional[Database] = None,
) -> Flask:
    config = config or ServerConfig()
    database = database or Database(config.database)
    database.initialize()
    catalog = PuzzleCatalog(database)
    ledger = ProgressLedger(database)
    if config.seed_puzzles:
        catalog.seed_initial_puzzles()

    app = Flask(__name__)
    app.json.ensure_ascii = False
    app.extensions["keshimasu"] = {"catalog": catalog, "ledger": ledger}

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------
    @app.errorhandler(InvalidRequest)
    def _invalid_request(exc: InvalidRequest):
        return _error(str(exc), 400)

    @app.errorhandler(InvalidBoardError)
    def _invalid_board(exc: InvalidBoardError):
        return _error(str(exc), 400)

    @app.errorhandler(PlayerNotFound)
    def _player_not_found(exc: PlayerNotFound):
        return _error(str(exc), 404)

    @app.errorhandler(PuzzleNotFound)
    def _puzzle_not_found(exc: PuzzleNotFound):
        return _error(str(exc), 404)

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------
    @app.route("/api/player/register", methods=["POST"])
    def register_player():
        nickname = str(_json_body().get("nickname") or "").strip()
        if not nickname:
            raise InvalidRequest("nickname is required")
        player = ledger.register_player(nickname)
        return jsonify({"message": "player registered", "player": player.to_jsonable()})

    @app.route("/api/player/<int:player_id>/status", methods=["GET"])
    def player_status(player_id: int):
        return jsonify(ledger.player_status(player_id).to_jsonable())

    @app.route("/api/score/update", methods=["POST"])
    def update_score():
        data = _json_body()
        if data.get("playerId") is None or data.get("puzzleId") is None:
            raise InvalidRequest("playerId and puzzleId are required")
        player_id = _int_param(data["playerId"], "playerId")
        puzzle_id = _int_param(data["puzzleId"], "puzzleId")
        mode = _mode_param(data.get("mode"))
        result = ledger.credit_clear(player_id, mode, puzzle_id)
        return jsonify({
            "message": "already credited" if result.already_credited else "score updated",
            "newScore": result.new_count,
            "alreadyCredited": result.already_credited,
        })

    @app.route("/api/rankings/<kind>", methods=["GET"])
    def rankings(kind: str):
        try:
            entries = ledger.rankings(kind)
        except ValueError as exc:
            raise InvalidRequest(str(exc)) from None
        return jsonify([
            {"rank": e.rank, "nickname": e.nickname, "score": e.score} for e in entries
        ])

    # ------------------------------------------------------------------
    # Puzzles
    # ------------------------------------------------------------------
    @app.route("/api/puzzles/<mode>", methods=["GET"])
    def list_puzzles(mode: str):
        puzzles = catalog.list_puzzles(_mode_param(mode))
        return jsonify([p.to_jsonable() for p in puzzles])

    @app.route("/api/puzzles", methods=["POST"])
    def create_puzzle():
        data = _json_body()
        board = data.get("board")
        if not isinstance(board, list):
            raise InvalidRequest("board must be a list of rows")
        puzzle = catalog.create_puzzle(
            _mode_param(data.get("mode")), board, str(data.get("creator") or "")
        )
        return jsonify(puzzle.to_jsonable()), 201

    @app.route("/api/puzzles/<mode>/next", methods=["GET"])
    def next_puzzle(mode: str):
        player_id = _int_param(request.args.get("playerId"), "playerId")
        puzzle = ledger.next_puzzle_for(player_id, _mode_param(mode), catalog)
        if puzzle is None:
            return jsonify({"puzzle": None, "modeComplete": True})
        return jsonify({"puzzle": puzzle.to_jsonable(), "modeComplete": False})

    LOGGER.info("API ready (database %s)", database.path)
    return app
