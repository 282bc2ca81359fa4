# tests/test_api.py

import os
import tempfile
import unittest

import frontend.api
from backend.config import load_config
from backend.storage import GameStore, StorageError
from frontend.app import create_app


class TestApi(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = GameStore(os.path.join(self.tmp.name, "games.db"))
        config = load_config(os.path.join(self.tmp.name, "missing.yaml"))
        self.app = create_app(config, store=self.store)
        self.client = self.app.test_client()
        frontend.api.game = None

    def tearDown(self):
        frontend.api.game = None
        self.store.close()
        self.tmp.cleanup()

    def play_winning_game(self, player="ann"):
        # 3 mines on a 2x2 board: the first (always safe) click wins
        self.client.post("/api/new_game", json={"size": 2, "num_mines": 3, "player": player})
        return self.client.post("/api/step", json={"action": "reveal", "row": 0, "col": 0}).get_json()

    def test_new_game_clamps_inputs(self):
        state = self.client.post("/api/new_game", json={"size": 1, "num_mines": 99}).get_json()
        self.assertEqual(state["size"], 2)
        self.assertEqual(state["num_mines"], 3)
        self.assertEqual(state["status"], "not_started")
        self.assertEqual(state["board"], [[None, None], [None, None]])

    def test_new_game_defaults(self):
        state = self.client.post("/api/new_game", json={}).get_json()
        self.assertEqual(state["size"], 10)
        self.assertEqual(state["num_mines"], 15)

    def test_step_without_game(self):
        response = self.client.post("/api/step", json={"action": "reveal", "row": 0, "col": 0})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.client.get("/api/state").status_code, 409)

    def test_invalid_step(self):
        self.client.post("/api/new_game", json={"size": 4, "num_mines": 2})
        response = self.client.post("/api/step", json={"action": "dig", "row": 0, "col": 0})
        self.assertEqual(response.status_code, 400)
        response = self.client.post("/api/step", json={"action": "reveal", "row": 9, "col": 0})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json(), {"error": "Invalid input"})

    def test_finished_game_is_stored(self):
        result = self.play_winning_game()
        self.assertTrue(result["game_over"])
        self.assertTrue(result["won"])
        self.assertIn("game_id", result)
        self.assertEqual(result["solution"][0][0], 3)

        games = self.client.get("/api/games").get_json()
        self.assertEqual(len(games), 1)
        self.assertEqual(games[0]["id"], result["game_id"])
        self.assertEqual(games[0]["player"], "ann")
        self.assertEqual(games[0]["result"], "win")
        self.assertNotIn("moves", games[0])

        game = self.client.get(f"/api/games/{result['game_id']}").get_json()
        self.assertEqual(game["total_moves"], 1)
        self.assertEqual(len(game["mine_positions"]), 3)
        self.assertEqual(game["moves"], [
            {"move_number": 1, "row": 0, "col": 0, "move_type": "open", "result": "win"}
        ])

    def test_steps_after_game_over_do_not_store_again(self):
        result = self.play_winning_game()
        again = self.client.post("/api/step", json={"action": "reveal", "row": 0, "col": 0}).get_json()
        self.assertNotIn("game_id", again)
        self.assertEqual(self.store.count(), 1)
        self.assertEqual(again["moves_made"], result["moves_made"])

    def test_replay(self):
        result = self.play_winning_game()
        replay = self.client.get(f"/api/games/{result['game_id']}/replay").get_json()
        self.assertEqual(len(replay["frames"]), 1)
        self.assertEqual(replay["frames"][0]["move"]["result"], "win")
        self.assertEqual(replay["final"], result["board"])
        self.assertEqual(replay["game"]["id"], result["game_id"])

    def test_missing_game(self):
        self.assertEqual(self.client.get("/api/games/42").status_code, 404)
        self.assertEqual(self.client.get("/api/games/42/replay").status_code, 404)
        self.assertEqual(self.client.delete("/api/games/42").status_code, 404)

    def test_delete(self):
        result = self.play_winning_game()
        response = self.client.delete(f"/api/games/{result['game_id']}")
        self.assertEqual(response.get_json(), {"deleted": True})
        self.assertEqual(self.client.get("/api/games").get_json(), [])


class FlakyStore(GameStore):
    """Fails the first ``failures`` saves."""

    def __init__(self, path, failures=1):
        super().__init__(path)
        self.failures = failures

    def store(self, record):
        if self.failures:
            self.failures -= 1
            raise StorageError("disk full")
        return super().store(record)


class TestSaveRetry(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = FlakyStore(os.path.join(self.tmp.name, "games.db"))
        config = load_config(os.path.join(self.tmp.name, "missing.yaml"))
        self.client = create_app(config, store=self.store).test_client()
        frontend.api.game = None

    def tearDown(self):
        frontend.api.game = None
        self.store.close()
        self.tmp.cleanup()

    def test_save_without_finished_game(self):
        self.assertEqual(self.client.post("/api/save").status_code, 409)
        self.client.post("/api/new_game", json={"size": 4, "num_mines": 2})
        self.assertEqual(self.client.post("/api/save").status_code, 409)

    def test_failed_save_can_be_retried(self):
        self.client.post("/api/new_game", json={"size": 2, "num_mines": 3, "player": "ann"})
        response = self.client.post("/api/step", json={"action": "reveal", "row": 0, "col": 0})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {"error": "disk full"})
        self.assertEqual(self.store.count(), 0)

        response = self.client.post("/api/save")
        self.assertEqual(response.status_code, 200)
        game_id = response.get_json()["game_id"]
        self.assertEqual(self.store.count(), 1)
        self.assertEqual(self.store.fetch(game_id).player, "ann")

        # saving again returns the same game instead of storing a copy
        self.assertEqual(self.client.post("/api/save").get_json(), {"game_id": game_id})
        self.assertEqual(self.store.count(), 1)


if __name__ == "__main__":
    unittest.main()
