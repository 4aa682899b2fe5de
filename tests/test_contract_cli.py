from __future__ import annotations

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

import orjson

from tzboard.cli import main
from tzboard.validate import validate_board_payload


class TestCliContract(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.state = str(Path(self._tmp.name) / "state.json")
        self._env = patch.dict(os.environ, {"TZBOARD_HOUR_FORMAT": "", "TZBOARD_OBS_LOG": ""})
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def _run(self, *argv: str) -> str:
        buf = io.StringIO()
        with redirect_stdout(buf):
            main(["--state", self.state, *argv])
        return buf.getvalue()

    def test_add_and_list(self) -> None:
        ny_id = self._run("add", "America/New_York").strip()
        in_id = self._run("add", "Mumbai", "--label", "IST").strip()
        self.assertTrue(ny_id.startswith("America/New_York-"))
        self.assertTrue(in_id.startswith("Asia/Kolkata-"))

        lines = self._run("list").splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith(f"* {ny_id}\tAmerica/New_York\tNew York"))
        self.assertTrue(lines[1].startswith(f"  {in_id}\tAsia/Kolkata"))
        self.assertTrue(lines[1].endswith("\tIST"))

    def test_add_defaults_to_system_timezone(self) -> None:
        with patch("tzboard.cli.user_timezone", return_value="Asia/Tokyo"):
            entry_id = self._run("add").strip()
        self.assertTrue(entry_id.startswith("Asia/Tokyo-"))

    def test_add_unknown_timezone(self) -> None:
        with self.assertRaises(SystemExit) as cm:
            self._run("add", "Atlantis")
        self.assertIn("Unknown timezone", str(cm.exception.code))

    def test_board_json_for_custom_date_and_time(self) -> None:
        self._run("add", "America/New_York")
        self._run("add", "Asia/Shanghai")
        out = self._run("board", "--json", "--date", "2024-01-15", "--at", "07:00")
        p = orjson.loads(out)
        self.assertEqual(p["cfg"]["at_ms"], 1705320000000)
        self.assertEqual(p["cfg"]["base_ms"], 1705294800000)
        self.assertEqual([r["config"]["start_hour"] for r in p["rows"]], [0, 13])

    def test_board_text(self) -> None:
        self._run("add", "America/New_York")
        self._run("add", "Asia/Shanghai")
        out = self._run("board", "--date", "2024-01-15", "--at", "7:00 AM", "--show-utc-offset")
        lines = out.splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("* New York (UTC-5)"))
        self.assertIn("Mon, Jan 15", lines[0])
        self.assertIn("Jan 16", lines[1])
        self.assertIn("20:00", lines[1])

    def test_board_empty_list(self) -> None:
        out = self._run("board")
        self.assertIn("No timezones added yet", out)

    def test_board_adhoc_zones(self) -> None:
        out = self._run(
            "board", "--tz", "Asia/Shanghai", "--tz", "America/New_York",
            "--home", "America/New_York", "--date", "2024-01-15", "--at", "07:00", "--json",
        )
        p = orjson.loads(out)
        self.assertEqual(p["cfg"]["reference_timezone"], "America/New_York")
        self.assertEqual([r["timezone"] for r in p["rows"]], ["Asia/Shanghai", "America/New_York"])
        self.assertEqual([r["is_home"] for r in p["rows"]], [False, True])
        self.assertFalse(Path(self.state).exists())

    def test_board_adhoc_zones_are_deduplicated(self) -> None:
        out = self._run(
            "board", "--tz", "UTC", "--tz", "utc", "--tz", "Asia/Tokyo",
            "--home", "UTC", "--date", "2024-01-15", "--at", "07:00", "--json",
        )
        p = orjson.loads(out)
        self.assertEqual([r["timezone"] for r in p["rows"]], ["UTC", "Asia/Tokyo"])
        self.assertEqual(validate_board_payload(p), [])

    def test_board_rejects_bad_flags(self) -> None:
        with self.assertRaises(SystemExit) as cm:
            self._run("board", "--tz", "Nowhere/City")
        self.assertIn("Invalid --tz value", str(cm.exception.code))
        with self.assertRaises(SystemExit) as cm:
            self._run("board", "--tz", "UTC", "--at", "soon")
        self.assertIn("Invalid --at value", str(cm.exception.code))
        with self.assertRaises(SystemExit) as cm:
            self._run("board", "--tz", "UTC", "--date", "2024-13-01")
        self.assertIn("Invalid --date value", str(cm.exception.code))

    def test_board_home_must_be_saved(self) -> None:
        self._run("add", "America/New_York")
        with self.assertRaises(SystemExit) as cm:
            self._run("board", "--home", "Asia/Tokyo")
        self.assertIn("is not on the timezone list", str(cm.exception.code))

    def test_resolve(self) -> None:
        self.assertEqual(self._run("resolve", "2024-03-10", "02:30", "America/New_York").strip(), "2024-03-10T07:30:00Z")
        self.assertEqual(self._run("resolve", "2024-01-15", "2:30 PM", "America/New_York").strip(), "2024-01-15T19:30:00Z")
        with self.assertRaises(SystemExit):
            self._run("resolve", "2024-01-15", "later", "America/New_York")

    def test_search(self) -> None:
        lines = self._run("search", "new york").splitlines()
        self.assertEqual(lines[0], "New York\tAmerica/New_York")
        self.assertEqual(len(self._run("search", "a", "--limit", "3").splitlines()), 3)

    def test_home_label_remove_reorder(self) -> None:
        a = self._run("add", "America/New_York").strip()
        b = self._run("add", "Asia/Shanghai").strip()
        self._run("home", b)
        self._run("label", a, "NYC")
        self.assertEqual(self._run("reorder", b, a).split(), [b, a])
        lines = self._run("list").splitlines()
        self.assertTrue(lines[0].startswith(f"* {b}"))
        self.assertTrue(lines[1].endswith("\tNYC"))

        self._run("remove", b)
        self.assertTrue(self._run("list").startswith(f"* {a}"))
        for cmd in ("remove", "home"):
            with self.assertRaises(SystemExit) as cm:
                self._run(cmd, "missing")
            self.assertIn("No timezone entry", str(cm.exception.code))

    def test_prefs(self) -> None:
        self.assertEqual(self._run("prefs").strip(), "hour_format=24 show_utc_offset=false")
        self.assertEqual(
            self._run("prefs", "--hour-format", "12", "--show-utc-offset").strip(),
            "hour_format=12 show_utc_offset=true",
        )
        self.assertEqual(self._run("prefs", "--hide-utc-offset").strip(), "hour_format=12 show_utc_offset=false")

    def test_corrupt_state_is_reported(self) -> None:
        Path(self.state).write_bytes(b"{broken")
        with self.assertRaises(SystemExit) as cm:
            self._run("list")
        self.assertTrue(str(cm.exception.code).startswith("[tzboard] ERROR:"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
