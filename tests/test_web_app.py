"""
Tests for the Flask API using the application test client.
"""
import os
import shutil
import tempfile
import unittest

from teamsheet.models.player import PlayerRef
from teamsheet.ui.web_app import WebAppState, create_app


class TestWebApp(unittest.TestCase):
    """Test cases for the selection API endpoints."""

    def setUp(self) -> None:
        self.state = WebAppState(fixture_id="fx-1")
        self.state.selection_service.set_players([
            PlayerRef("p1", "Alice", 1),
            PlayerRef("p2", "Bob", 2),
            PlayerRef("p3", "Cara", 3),
        ])
        self.app = create_app(self.state)
        self.client = self.app.test_client()
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _pick_squad_and_team(self) -> None:
        for player_id in ("p1", "p2", "p3"):
            self.client.post(f"/api/squad/{player_id}")
        self.client.post("/api/squad/mode", json={"mode": "assigning_positions"})
        self.client.post("/api/teams/1/periods/defaults")

    def test_state_starts_in_picking_mode(self) -> None:
        response = self.client.get("/api/state")

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data["success"])
        self.assertEqual(data["mode"], "picking_squad")
        self.assertEqual(data["teams"], [])

    def test_cannot_assign_positions_without_squad(self) -> None:
        response = self.client.post("/api/squad/mode", json={"mode": "assigning_positions"})

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.get_json()["success"])

    def test_squad_add_remove(self) -> None:
        self.client.post("/api/squad/p1")
        response = self.client.delete("/api/squad/p1")

        data = response.get_json()
        self.assertTrue(data["removed"])
        self.assertEqual(data["squad"], [])
        self.assertEqual(data["mode"], "picking_squad")

    def test_drop_swap_and_available_players(self) -> None:
        """Test the drop endpoint swaps occupied slots."""
        self._pick_squad_and_team()
        self.client.post("/api/teams/1/periods/100/drop",
                         json={"to_slot_id": "GK", "position": "GK", "player_id": "p1"})
        self.client.post("/api/teams/1/periods/100/drop",
                         json={"to_slot_id": "DL", "position": "DL", "player_id": "p2"})

        response = self.client.post("/api/teams/1/periods/100/drop",
                                    json={"to_slot_id": "DL", "position": "DL",
                                          "player_id": "p1", "from_slot_id": "GK"})

        data = response.get_json()
        self.assertTrue(data["changed"])
        self.assertEqual(data["selections"]["GK"]["player_id"], "p2")
        self.assertEqual(data["selections"]["DL"]["player_id"], "p1")

        available = self.client.get("/api/teams/1/periods/100/available-players").get_json()
        self.assertEqual([p["id"] for p in available["players"]], ["p3"])

    def test_tap_to_place(self) -> None:
        self._pick_squad_and_team()
        self.client.post("/api/teams/1/periods/100/select", json={"player_id": "p3"})

        response = self.client.post("/api/teams/1/periods/100/drop",
                                    json={"to_slot_id": "ST", "position": "ST"})

        self.assertEqual(response.get_json()["selections"]["ST"]["player_id"], "p3")

    def test_substitutes_clear_slot_and_undo(self) -> None:
        self._pick_squad_and_team()
        self.client.post("/api/teams/1/periods/100/drop",
                         json={"to_slot_id": "GK", "player_id": "p1"})

        response = self.client.post("/api/teams/1/periods/100/substitutes",
                                    json={"player_id": "p1", "from_slot_id": "GK"})
        self.assertEqual(response.get_json()["slot_id"], "sub-0")

        response = self.client.delete("/api/teams/1/periods/100/slots/sub-0")
        self.assertEqual(response.get_json()["selections"], {})

        self.assertTrue(self.client.post("/api/undo").get_json()["success"])
        selections = self.client.get("/api/teams/1/periods/100/selections").get_json()["selections"]
        self.assertTrue(selections["sub-0"]["is_substitution"])

    def test_drop_requires_target(self) -> None:
        self._pick_squad_and_team()

        response = self.client.post("/api/teams/1/periods/100/drop", json={"player_id": "p1"})

        self.assertEqual(response.status_code, 400)

    def test_unknown_period_is_404(self) -> None:
        self._pick_squad_and_team()

        response = self.client.get("/api/teams/1/periods/999/selections")

        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.get_json()["success"])

    def test_period_lifecycle(self) -> None:
        self._pick_squad_and_team()

        response = self.client.post("/api/teams/1/periods",
                                    json={"name": "Q2", "duration": 20, "half": 1})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["period"]["period_id"], 101)

        response = self.client.patch("/api/teams/1/periods/101", json={"duration": 25})
        self.assertEqual(response.get_json()["period"]["duration"], 25)

        response = self.client.post("/api/teams/1/periods", json={"name": "Bad", "duration": 0})
        self.assertEqual(response.status_code, 400)

        self.assertEqual(self.client.delete("/api/teams/1/periods/101").status_code, 200)
        self.assertEqual(self.client.delete("/api/teams/1/periods/101").status_code, 404)

    def test_category_and_captain(self) -> None:
        self._pick_squad_and_team()

        ok = self.client.put("/api/teams/1/periods/100/category",
                             json={"performance_category": "JAGS"})
        bad = self.client.put("/api/teams/1/periods/100/category",
                              json={"performance_category": "PELE"})
        self.client.put("/api/teams/1/captain", json={"player_id": "p2"})

        self.assertEqual(ok.status_code, 200)
        self.assertEqual(bad.status_code, 400)
        team = self.client.get("/api/teams/1/periods").get_json()
        self.assertEqual(team["captain"], "p2")
        self.assertEqual(team["periods"][0]["performance_category"], "JAGS")

    def test_replace_selections_deduplicates(self) -> None:
        self._pick_squad_and_team()

        response = self.client.put("/api/teams/1/periods/200/selections", json={"selections": {
            "GK": {"player_id": "p1", "position": "GK"},
            "DL": {"player_id": "p1", "position": "DL"},
            "DR": {"player_id": "unassigned", "position": "DR"},
        }})

        self.assertEqual(list(response.get_json()["selections"].keys()), ["GK"])

    def test_validate_endpoint(self) -> None:
        self._pick_squad_and_team()
        self.client.post("/api/teams/1/periods/100/drop",
                         json={"to_slot_id": "GK", "player_id": "p1"})

        data = self.client.get("/api/teams/1/periods/100/validate").get_json()

        self.assertTrue(data["is_valid"])

    def test_save_and_load(self) -> None:
        """Test the saved document restores the lineup and clears undo."""
        self._pick_squad_and_team()
        self.client.post("/api/teams/1/periods/100/drop",
                         json={"to_slot_id": "GK", "player_id": "p1"})

        saved = self.client.post("/api/save").get_json()
        self.assertEqual(saved["rows"], 1)
        self.assertFalse(self.client.get("/api/state").get_json()["unsaved_changes"])

        self.client.delete("/api/teams/1/periods/100/slots/GK")
        loaded = self.client.post("/api/load", json={"data": saved["data"]})

        self.assertTrue(loaded.get_json()["success"])
        selections = self.client.get("/api/teams/1/periods/100/selections").get_json()["selections"]
        self.assertEqual(selections["GK"]["player_id"], "p1")
        self.assertFalse(self.client.post("/api/undo").get_json()["success"])

    def test_save_ignores_file_paths(self) -> None:
        """Test save never writes to a path named by the client."""
        path = os.path.join(self.temp_dir, "deep", "outside.json")

        response = self.client.post("/api/save", json={"file_path": path})

        self.assertEqual(response.status_code, 200)
        self.assertIn("team_selections", response.get_json()["data"])
        self.assertFalse(os.path.exists(os.path.dirname(path)))

    def test_load_requires_document(self) -> None:
        response = self.client.post("/api/load",
                                    json={"file_path": os.path.join(self.temp_dir, "none.json")})

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.get_json()["success"])

    def test_load_malformed_document(self) -> None:
        response = self.client.post("/api/load", json={"data": {
            "periods": {"1": [{"period_id": 100}]},
            "team_selections": [{"period_id": 100, "player_id": "p1"}],
        }})

        self.assertEqual(response.status_code, 400)

    def test_numeric_position_in_seed(self) -> None:
        """Test a seed with a numeric position label is accepted."""
        self._pick_squad_and_team()

        response = self.client.put("/api/teams/1/periods/100/selections", json={"selections": {
            "GK": {"player_id": "p1", "position": 5},
        }})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["selections"]["GK"]["position"], "5")

    def test_toggle_refused_with_empty_squad(self) -> None:
        """Test a bodyless toggle reports failure when the squad is empty."""
        response = self.client.post("/api/squad/mode")

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.get_json()["success"])
        self.assertEqual(response.get_json()["mode"], "picking_squad")

    def test_toggle_switches_mode(self) -> None:
        self.client.post("/api/squad/p1")

        response = self.client.post("/api/squad/mode")

        self.assertTrue(response.get_json()["success"])
        self.assertEqual(response.get_json()["mode"], "assigning_positions")

    def test_formation_templates(self) -> None:
        data = self.client.get("/api/formations/9-a-side").get_json()

        self.assertIn("3-2-3", [t["name"] for t in data["templates"]])
        self.assertEqual(self.client.get("/api/formations/4-a-side").status_code, 400)


if __name__ == "__main__":
    unittest.main()
