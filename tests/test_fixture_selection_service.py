"""
Unit tests for FixtureSelectionService.

Tests mode gating, period metadata (performance categories, captains),
available players across periods, undo/redo and document round trips.
"""
import unittest

from teamsheet.models.player import PlayerRef
from teamsheet.services import (
    DropEvent, FixtureSelectionService, SelectionError, ServiceFactory, SquadMode
)


class TestFixtureSelectionService(unittest.TestCase):
    """Test cases for FixtureSelectionService functionality."""

    def setUp(self) -> None:
        """Set up a fixture with a roster, a squad and one team."""
        self.players = [
            PlayerRef("p1", "Alice", 1),
            PlayerRef("p2", "Bob", 2),
            PlayerRef("p3", "Cara", 3),
            PlayerRef("p4", "Dan", 4),
        ]
        self.service = ServiceFactory().create_fixture_selection_service(
            fixture_id="fx-1", players=self.players, squad=["p1", "p2", "p3"]
        )
        self.service.ensure_team("1")

    def test_ensure_team_seeds_halves_and_categories(self) -> None:
        self.assertEqual([p.period_id for p in self.service.period_manager.get_periods("1")], [100, 200])
        self.assertEqual(self.service.performance_categories, {"100-1": "MESSI", "200-1": "MESSI"})

    def test_drop_records_unsaved_change(self) -> None:
        """Test an edit marks its scope as unsaved until saved."""
        self.assertFalse(self.service.has_unsaved_changes)

        self.assertTrue(self.service.drop("1", 100, DropEvent("GK", "GK", "p1")))

        self.assertEqual(self.service.unsaved_scopes(), [("1", 100)])
        self.service.mark_saved()
        self.assertFalse(self.service.has_unsaved_changes)

    def test_listener_receives_scope_changes(self) -> None:
        received = []
        self.service.add_selection_listener(lambda t, p, s: received.append((t, p, sorted(s))))

        self.service.drop("1", 200, DropEvent("GK", "GK", "p1"))

        self.assertEqual(received, [("1", 200, ["GK"])])

    def test_position_edits_ignored_while_picking_squad(self) -> None:
        """Test drops are no-ops in picking mode."""
        self.service.set_mode(SquadMode.PICKING_SQUAD)

        self.assertFalse(self.service.drop("1", 100, DropEvent("GK", "GK", "p1")))
        self.assertIsNone(self.service.drop_to_substitutes("1", 100, "p1"))
        self.assertEqual(self.service.get_selections("1", 100), {})

        self.service.set_mode(SquadMode.ASSIGNING_POSITIONS)
        self.assertTrue(self.service.drop("1", 100, DropEvent("GK", "GK", "p1")))

    def test_available_players_per_period(self) -> None:
        """Test placement in one period does not hide a player in another."""
        self.service.drop("1", 100, DropEvent("GK", "GK", "p1"))

        first = [p.id for p in self.service.get_available_players("1", 100)]
        second = [p.id for p in self.service.get_available_players("1", 200)]
        whole_team = [p.id for p in self.service.get_available_players("1")]

        self.assertEqual(first, ["p2", "p3"])
        self.assertEqual(second, ["p1", "p2", "p3"])
        self.assertEqual(whole_team, ["p2", "p3"])

    def test_add_period_carries_category_forward(self) -> None:
        self.service.set_performance_category("1", 100, "RONALDO")

        period = self.service.add_period("1", "Q2", 20, half=1)

        self.assertEqual(period.period_id, 101)
        self.assertEqual(self.service.performance_categories["101-1"], "RONALDO")

    def test_add_period_can_copy_lineup(self) -> None:
        """Test the copied lineup is independent of its source."""
        self.service.drop("1", 100, DropEvent("GK", "GK", "p1"))

        period = self.service.add_period("1", "Q2", 20, half=1, copy_selections=True)
        self.service.drop("1", period.period_id, DropEvent("DL", "DL", "p2"))

        self.assertEqual(sorted(self.service.get_selections("1", period.period_id)), ["DL", "GK"])
        self.assertEqual(sorted(self.service.get_selections("1", 100)), ["GK"])

    def test_set_performance_category_retags_lineup(self) -> None:
        self.service.drop("1", 100, DropEvent("GK", "GK", "p1"))

        self.service.set_performance_category("1", 100, "JAGS")

        self.assertEqual(self.service.get_selections("1", 100)["GK"]["performance_category"], "JAGS")
        with self.assertRaises(SelectionError):
            self.service.set_performance_category("1", 100, "PELE")

    def test_undo_after_category_change_keeps_new_category(self) -> None:
        """Test restored lineups carry the period's current category."""
        self.service.drop("1", 100, DropEvent("GK", "GK", "p1"))
        self.service.drop("1", 100, DropEvent("DL", "DL", "p2"))
        self.service.set_performance_category("1", 100, "RONALDO")

        self.assertTrue(self.service.undo())

        rows = [(r["slot_id"], r["performance_category"]) for r in self.service.build_rows()]
        self.assertEqual(rows, [("GK", "RONALDO")])
        self.assertTrue(self.service.redo())
        self.assertEqual({r["performance_category"] for r in self.service.build_rows()}, {"RONALDO"})

    def test_json_round_trip_keeps_team_id(self) -> None:
        """Test a zero-padded team id survives save and load."""
        self.service.ensure_team("01")
        self.service.drop("01", 100, DropEvent("GK", "GK", "p1"))

        restored = FixtureSelectionService.from_json(self.service.to_json())

        self.assertEqual(restored.get_selections("01", 100)["GK"]["player_id"], "p1")

    def test_delete_period_cleans_metadata(self) -> None:
        self.service.drop("1", 200, DropEvent("GK", "GK", "p1"))

        self.assertTrue(self.service.delete_period("1", 200))

        self.assertNotIn("200-1", self.service.performance_categories)
        self.assertFalse(self.service.has_unsaved_changes)
        self.assertFalse(self.service.command_manager.can_undo())
        self.assertFalse(self.service.delete_period("1", 200))

    def test_undo_redo(self) -> None:
        self.service.drop("1", 100, DropEvent("GK", "GK", "p1"))
        self.service.drop_to_substitutes("1", 100, "p1", "GK")

        self.assertTrue(self.service.undo())
        self.assertEqual(self.service.get_selections("1", 100)["GK"]["player_id"], "p1")
        self.assertTrue(self.service.redo())
        self.assertEqual(list(self.service.get_selections("1", 100)), ["sub-0"])

    def test_squad_removal_keeps_assignment(self) -> None:
        """Test removing a placed player from the squad leaves them on the pitch."""
        self.service.drop("1", 100, DropEvent("GK", "GK", "p1"))

        self.service.remove_player_from_squad("p1")

        self.assertIn("p1", self.service.get_selected_players())
        self.assertEqual(len(self.service.validate("1", 100).warnings), 1)

    def test_validate_uses_team_template(self) -> None:
        self.service.set_team_template("1", "2-3-1")
        self.service.drop("1", 100, DropEvent("STL", "STL", "p2"))

        result = self.service.validate("1", 100)

        self.assertTrue(result.is_valid)
        self.assertIn("STL", result.warnings[0])

    def test_captain_flag_in_rows(self) -> None:
        self.service.drop("1", 100, DropEvent("GK", "GK", "p1"))
        self.service.drop("1", 100, DropEvent("DL", "DL", "p2"))
        self.service.set_captain("1", "p2")

        rows = {r["slot_id"]: r for r in self.service.build_rows()}

        self.assertFalse(rows["GK"]["is_captain"])
        self.assertTrue(rows["DL"]["is_captain"])

    def test_json_round_trip(self) -> None:
        """Test a saved document restores every scope and its metadata."""
        self.service.drop("1", 100, DropEvent("GK", "GK", "p1"))
        self.service.drop_to_substitutes("1", 100, "p2")
        self.service.add_period("1", "Q2", 20, half=1)
        self.service.drop("1", 101, DropEvent("MC", "MC", "p3"))
        self.service.set_performance_category("1", 101, "JAGS")
        self.service.set_captain("1", "p1")

        restored = FixtureSelectionService.from_json(self.service.to_json())

        self.assertEqual(restored.fixture_id, "fx-1")
        self.assertEqual(restored.squad_gate.members, ["p1", "p2", "p3"])
        self.assertEqual([p.period_id for p in restored.period_manager.get_periods("1")], [100, 101, 200])
        for period_id in (100, 101, 200):
            self.assertEqual(restored.get_selections("1", period_id),
                             self.service.get_selections("1", period_id))
        self.assertEqual(restored.performance_categories["101-1"], "JAGS")
        self.assertEqual(restored.captains, {"1": "p1"})
        self.assertFalse(restored.has_unsaved_changes)
        # Bench numbering continues after the restored slot
        self.assertEqual(restored.drop_to_substitutes("1", 100, "p3"), "sub-1")

    def test_from_json_skips_rows_for_unknown_periods(self) -> None:
        document = self.service.to_json()
        document["team_selections"] = [{
            "team_number": 1, "period_id": 900, "slot_id": "GK", "player_id": "p1",
        }]

        restored = FixtureSelectionService.from_json(document)

        self.assertEqual(restored.get_selected_players(), set())


if __name__ == "__main__":
    unittest.main()
