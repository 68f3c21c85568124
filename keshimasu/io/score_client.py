"""Lightweight HTTP client for the progress API."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import requests

from ..core.constants import Mode
from ..core.models import CreditResult, Player, Puzzle
from ..engine.session import PuzzleCompleted
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


class ScoreAPIError(RuntimeError):
    """Raised when the API is unreachable or answers with an error status."""


class ScoreClient:
    """Minimal client around the JSON API served by ``keshimasu.api.server``."""

    DEFAULT_BASE = "http://localhost:3000/api"

    def __init__(
        self,
        base_url: Optional[str] = None,
        base_url_env: str = "KESHIMASU_API_BASE",
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or os.environ.get(base_url_env) or self.DEFAULT_BASE).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.http = session or requests.Session()

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------
    def register(self, nickname: str) -> Player:
        data = self._request("POST", "/player/register", json={"nickname": nickname})
        p = data["player"]
        return Player(
            id=p["id"],
            nickname=p["nickname"],
            country_clears=p.get("country_clears", 0),
            capital_clears=p.get("capital_clears", 0),
        )

    def status(self, player_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/player/{player_id}/status")

    def credit_clear(self, player_id: int, mode: Mode | str, puzzle_id: int) -> CreditResult:
        """Safe to retry: the server credits each puzzle at most once."""
        data = self._request(
            "POST",
            "/score/update",
            json={"playerId": player_id, "mode": Mode.parse(mode).value, "puzzleId": puzzle_id},
        )
        return CreditResult(
            new_count=int(data["newScore"]),
            already_credited=bool(data.get("alreadyCredited", False)),
        )

    def rankings(self, kind: str = "total") -> List[Dict[str, Any]]:
        return self._request("GET", f"/rankings/{kind}")

    def next_puzzle(self, player_id: int, mode: Mode | str) -> Optional[Puzzle]:
        data = self._request(
            "GET", f"/puzzles/{Mode.parse(mode).value}/next", params={"playerId": player_id}
        )
        p = data.get("puzzle")
        if not p:
            return None
        return Puzzle.from_rows(
            id=p["id"], mode=p["mode"], rows=p["board"], creator=p["creator"],
            created_at=p.get("created_at"),
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout_seconds, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ScoreAPIError(f"{method} {path} failed: {exc}") from exc
        return response.json()


class CompletionReporter:
    """Session listener that reports creditable completions for one player."""

    def __init__(self, client: ScoreClient, player_id: Optional[int]) -> None:
        self.client = client
        self.player_id = player_id
        self.last_result: Optional[CreditResult] = None
        self.pending: List[PuzzleCompleted] = []

    def __call__(self, event: PuzzleCompleted) -> None:
        if self.player_id is None or not event.creditable:
            LOGGER.debug("Skipping credit for puzzle %s", event.puzzle_id)
            return
        self._report(event)

    def _report(self, event: PuzzleCompleted) -> None:
        try:
            self.last_result = self.client.credit_clear(self.player_id, event.mode, event.puzzle_id)
        except ScoreAPIError as exc:
            LOGGER.warning("Credit for puzzle %s failed, kept for retry: %s", event.puzzle_id, exc)
            if event not in self.pending:
                self.pending.append(event)
            return
        LOGGER.info(
            "Puzzle %s credited: count=%s already=%s",
            event.puzzle_id, self.last_result.new_count, self.last_result.already_credited,
        )

    def retry_pending(self) -> int:
        """Re-send credits that failed earlier. Returns how many are still pending."""
        events, self.pending = self.pending, []
        for event in events:
            self._report(event)
        return len(self.pending)
