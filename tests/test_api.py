import tempfile
import unittest
from pathlib import Path

from keshimasu.api.server import ServerConfig, create_app
from keshimasu.store.database import DatabaseConfig

BOARD = [["ア", "イ", "ウ", "エ", "オ"] for _ in range(8)]


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        config = ServerConfig(
            database=DatabaseConfig(path=Path(self._tmpdir.name) / "api.sqlite3"),
            seed_puzzles=False,
        )
        self.app = create_app(config)
        self.client = self.app.test_client()

    def register(self, nickname: str = "tester") -> dict:
        response = self.client.post("/api/player/register", json={"nickname": nickname})
        self.assertEqual(response.status_code, 200)
        return response.get_json()["player"]

    def create_puzzle(self, mode: str = "country") -> dict:
        response = self.client.post(
            "/api/puzzles", json={"mode": mode, "board": BOARD, "creator": "author"}
        )
        self.assertEqual(response.status_code, 201)
        return response.get_json()


class ScoreEndpointTests(ApiTestCase):
    def test_score_update_is_idempotent(self) -> None:
        player = self.register()
        puzzle = self.create_puzzle()
        payload = {"playerId": player["id"], "mode": "country", "puzzleId": puzzle["id"]}

        first = self.client.post("/api/score/update", json=payload).get_json()
        second = self.client.post("/api/score/update", json=payload).get_json()
        self.assertEqual((first["newScore"], first["alreadyCredited"]), (1, False))
        self.assertEqual((second["newScore"], second["alreadyCredited"]), (1, True))

        status = self.client.get(f"/api/player/{player['id']}/status").get_json()
        self.assertEqual(status["country_clears"], 1)
        self.assertEqual(status["capital_clears"], 0)
        self.assertEqual(status["credited"], {"country": [puzzle["id"]], "capital": []})

    def test_unknown_player_is_404(self) -> None:
        puzzle = self.create_puzzle()
        response = self.client.post(
            "/api/score/update", json={"playerId": 77, "mode": "country", "puzzleId": puzzle["id"]}
        )
        self.assertEqual(response.status_code, 404)
        self.assertIn("message", response.get_json())

    def test_bad_requests_are_400(self) -> None:
        player = self.register()
        for payload in (
            {"playerId": player["id"], "mode": "planet", "puzzleId": 1},
            {"playerId": player["id"], "mode": "country"},
            {"playerId": "abc", "mode": "country", "puzzleId": 1},
            {"playerId": True, "mode": "country", "puzzleId": 1},
            {"playerId": player["id"], "mode": "country", "puzzleId": 1.9},
        ):
            with self.subTest(payload=payload):
                response = self.client.post("/api/score/update", json=payload)
                self.assertEqual(response.status_code, 400)


class PlayerEndpointTests(ApiTestCase):
    def test_register_requires_nickname(self) -> None:
        response = self.client.post("/api/player/register", json={"nickname": "  "})
        self.assertEqual(response.status_code, 400)

    def test_register_returns_existing_player(self) -> None:
        first = self.register("hanako")
        second = self.register("hanako")
        self.assertEqual(first["id"], second["id"])

    def test_status_for_unknown_player(self) -> None:
        self.assertEqual(self.client.get("/api/player/5/status").status_code, 404)

    def test_rankings(self) -> None:
        player = self.register("alice")
        puzzle = self.create_puzzle()
        self.client.post(
            "/api/score/update",
            json={"playerId": player["id"], "mode": "country", "puzzleId": puzzle["id"]},
        )
        ranking = self.client.get("/api/rankings/total").get_json()
        self.assertEqual(ranking, [{"rank": 1, "nickname": "alice", "score": 1}])
        self.assertEqual(self.client.get("/api/rankings/weekly").status_code, 400)


class PuzzleEndpointTests(ApiTestCase):
    def test_invalid_board_is_400(self) -> None:
        response = self.client.post(
            "/api/puzzles", json={"mode": "country", "board": BOARD[:3], "creator": "a"}
        )
        self.assertEqual(response.status_code, 400)

    def test_board_rows_must_be_lists(self) -> None:
        for board in ([1, 2, 3, 4, 5, 6, 7, 8], ["アイウエオ"] * 8, [None] * 8):
            with self.subTest(board=board):
                response = self.client.post(
                    "/api/puzzles", json={"mode": "country", "board": board, "creator": "a"}
                )
                self.assertEqual(response.status_code, 400)
                self.assertIn("message", response.get_json())
        self.assertEqual(self.client.get("/api/puzzles/country").get_json(), [])

    def test_next_puzzle_until_mode_complete(self) -> None:
        player = self.register()
        puzzle = self.create_puzzle("capital")
        listed = self.client.get("/api/puzzles/capital").get_json()
        self.assertEqual([p["id"] for p in listed], [puzzle["id"]])

        url = f"/api/puzzles/capital/next?playerId={player['id']}"
        body = self.client.get(url).get_json()
        self.assertEqual(body["puzzle"]["id"], puzzle["id"])
        self.assertFalse(body["modeComplete"])

        self.client.post(
            "/api/score/update",
            json={"playerId": player["id"], "mode": "capital", "puzzleId": puzzle["id"]},
        )
        body = self.client.get(url).get_json()
        self.assertIsNone(body["puzzle"])
        self.assertTrue(body["modeComplete"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
