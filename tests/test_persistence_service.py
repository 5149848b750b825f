"""
Unit tests for PersistenceService: team_selections rows and JSON files.
"""
import json
import os
import shutil
import tempfile
import unittest

from teamsheet.models.period import Period
from teamsheet.models.selection import Assignment
from teamsheet.services.persistence_service import PersistenceService, category_key


class TestPersistenceService(unittest.TestCase):
    """Test cases for PersistenceService functionality."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.mkdtemp()
        self.scopes = [
            ("1", Period(100, "First Half", 45), {
                "GK": Assignment("p1", "GK"),
                "sub-0": Assignment("p2", "SUB", True),
            }),
            ("1", Period(200, "Second Half", 40), {
                "ST": Assignment("p2", "ST", False, "JAGS"),
            }),
        ]

    def tearDown(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_category_key(self) -> None:
        self.assertEqual(category_key(101, "2"), "101-2")

    def test_build_rows(self) -> None:
        """Test one row per occupied slot with captain and category."""
        rows = PersistenceService.build_rows(
            "fx-1", self.scopes, captains={"1": "p1"}, categories={"100-1": "RONALDO"}
        )

        self.assertEqual(len(rows), 3)
        gk = rows[0]
        self.assertEqual(gk, {
            "fixture_id": "fx-1",
            "team_id": "1",
            "team_number": 1,
            "period_id": 100,
            "slot_id": "GK",
            "player_id": "p1",
            "position": "GK",
            "is_substitution": False,
            "performance_category": "RONALDO",
            "is_captain": True,
            "duration": 45,
        })
        self.assertTrue(rows[1]["is_substitution"])
        self.assertFalse(rows[1]["is_captain"])
        # Assignment tag wins over the scope category
        self.assertEqual(rows[2]["performance_category"], "JAGS")
        self.assertEqual(rows[2]["duration"], 40)

    def test_build_rows_defaults_category(self) -> None:
        """Test rows without any category get the default one."""
        rows = PersistenceService.build_rows(None, self.scopes[:1])

        self.assertEqual({r["performance_category"] for r in rows}, {"MESSI"})

    def test_rows_to_selections(self) -> None:
        """Test rows group back into per-scope maps."""
        rows = PersistenceService.build_rows("fx-1", self.scopes)

        grouped = PersistenceService.rows_to_selections(rows)

        self.assertEqual(set(grouped.keys()), {("1", 100), ("1", 200)})
        self.assertEqual(grouped[("1", 100)]["sub-0"]["player_id"], "p2")
        self.assertTrue(grouped[("1", 100)]["sub-0"]["is_substitution"])

    def test_rows_keep_non_canonical_team_id(self) -> None:
        """Test a team id like "01" comes back unchanged."""
        rows = PersistenceService.build_rows("fx-1", [("01", Period(100, "First Half"), {
            "GK": Assignment("p1", "GK"),
        })])

        self.assertEqual(rows[0]["team_number"], 1)
        self.assertEqual(list(PersistenceService.rows_to_selections(rows).keys()), [("01", 100)])

    def test_rows_without_team_id_use_team_number(self) -> None:
        """Test rows from other sources fall back to team_number."""
        grouped = PersistenceService.rows_to_selections([
            {"team_number": 2, "period_id": 200, "slot_id": "GK", "player_id": "p1"},
        ])

        self.assertEqual(list(grouped.keys()), [("2", 200)])

    def test_rows_to_selections_rejects_malformed_rows(self) -> None:
        """Test rows without team or period raise ValueError."""
        with self.assertRaises(ValueError):
            PersistenceService.rows_to_selections([{"player_id": "p1", "slot_id": "GK"}])
        with self.assertRaises(ValueError):
            PersistenceService.rows_to_selections([{"team_number": 1, "period_id": 100, "player_id": "p1"}])

    def test_save_and_load_file(self) -> None:
        """Test a document survives a trip through a JSON file."""
        path = os.path.join(self.temp_dir, "nested", "selections.json")
        document = {"fixture_id": "fx-1", "team_selections": PersistenceService.build_rows("fx-1", self.scopes)}

        PersistenceService.save_to_file(document, path)

        self.assertEqual(PersistenceService.load_from_file(path), document)

    def test_load_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            PersistenceService.load_from_file(os.path.join(self.temp_dir, "missing.json"))

    def test_load_non_object(self) -> None:
        """Test a JSON list is rejected."""
        path = os.path.join(self.temp_dir, "list.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump([1, 2], f)

        with self.assertRaises(ValueError):
            PersistenceService.load_from_file(path)


if __name__ == "__main__":
    unittest.main()
