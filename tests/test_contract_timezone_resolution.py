from __future__ import annotations

import datetime as dt
import os
import tempfile
import time
import unittest
from pathlib import Path
from unittest.mock import patch

from tzboard.resolve import resolve_local_time
from tzboard.scale import align
from tzboard.util.tz import (
    normalize_tz_name,
    resolve_tz,
    same_tz,
    system_timezone_key,
    timezone_offset_hours,
    user_timezone,
)

UTC = dt.timezone.utc
WINTER = dt.datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
SUMMER = dt.datetime(2024, 7, 1, 12, 0, tzinfo=UTC)


class TestTimezoneResolutionContract(unittest.TestCase):
    def test_valid_timezone_identifiers_resolve(self) -> None:
        self.assertEqual(resolve_tz("UTC"), dt.timezone.utc)
        self.assertIsNotNone(resolve_tz("local"))
        self.assertIsNotNone(resolve_tz("+02:00"))
        self.assertIsNotNone(resolve_tz("Asia/Kolkata"))

    def test_invalid_timezone_identifiers_raise(self) -> None:
        with self.assertRaises(ValueError):
            resolve_tz("No/Such_Zone")
        with self.assertRaises(ValueError):
            resolve_tz("+25:00")

    def test_normalized_names(self) -> None:
        self.assertEqual(normalize_tz_name(None), "local")
        self.assertEqual(normalize_tz_name(" gmt "), "UTC")
        self.assertEqual(normalize_tz_name("Asia/Tokyo"), "Asia/Tokyo")
        self.assertTrue(same_tz("utc", "Z"))
        self.assertFalse(same_tz("UTC", "Etc/UTC"))

    def test_fixed_offset_rows_align(self) -> None:
        cfg = align("+05:30", "UTC", WINTER)
        self.assertEqual(cfg.base_time, dt.datetime(2024, 1, 15, 0, 0, tzinfo=UTC))
        self.assertEqual((cfg.start_hour, cfg.start_minute), (5, 30))
        self.assertEqual(
            resolve_local_time(2024, 1, 15, 0, 0, "+05:30"),
            dt.datetime(2024, 1, 14, 18, 30, tzinfo=UTC),
        )


class TestSystemTimezoneDetectionContract(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.localtime = root / "localtime"
        self.timezone_file = root / "timezone"
        self._patches = [
            patch.dict(os.environ, {"TZ": ""}),
            patch("tzboard.util.tz.LOCALTIME_PATH", str(self.localtime)),
            patch("tzboard.util.tz.TIMEZONE_FILE", str(self.timezone_file)),
        ]
        for p in self._patches:
            p.start()

    def tearDown(self) -> None:
        for p in reversed(self._patches):
            p.stop()
        self._tmp.cleanup()

    def test_tz_environment_variable_wins(self) -> None:
        self.timezone_file.write_text("Europe/Paris\n", encoding="utf-8")
        with patch.dict(os.environ, {"TZ": ":Europe/Berlin"}):
            self.assertEqual(system_timezone_key(), "Europe/Berlin")
        with patch.dict(os.environ, {"TZ": "/usr/share/zoneinfo/Asia/Tokyo"}):
            self.assertEqual(user_timezone(), "Asia/Tokyo")

    def test_unusable_tz_value_falls_through(self) -> None:
        self.timezone_file.write_text("Europe/Paris\n", encoding="utf-8")
        with patch.dict(os.environ, {"TZ": "Not/A_Zone"}):
            self.assertEqual(user_timezone(), "Europe/Paris")

    @unittest.skipUnless(hasattr(os, "symlink") and os.name == "posix", "needs posix symlinks")
    def test_localtime_symlink_target(self) -> None:
        os.symlink("../usr/share/zoneinfo/America/Sao_Paulo", self.localtime)
        self.timezone_file.write_text("Europe/Paris\n", encoding="utf-8")
        self.assertEqual(user_timezone(), "America/Sao_Paulo")

    def test_timezone_file(self) -> None:
        self.timezone_file.write_text("  Australia/Adelaide\n", encoding="utf-8")
        self.assertEqual(user_timezone(), "Australia/Adelaide")

    def test_undetermined_is_utc(self) -> None:
        self.assertIsNone(system_timezone_key())
        self.assertEqual(user_timezone(), "UTC")
        self.timezone_file.write_text("garbage\n", encoding="utf-8")
        self.assertEqual(user_timezone(), "UTC")


@unittest.skipUnless(hasattr(time, "tzset"), "needs time.tzset")
class TestLocalTimezoneRulesContract(unittest.TestCase):
    def setUp(self) -> None:
        self._env = patch.dict(os.environ, {"TZ": "America/New_York"})
        self._env.start()
        time.tzset()

    def tearDown(self) -> None:
        self._env.stop()
        time.tzset()

    def test_local_resolves_to_the_named_zone(self) -> None:
        self.assertEqual(getattr(resolve_tz("local"), "key", None), "America/New_York")
        self.assertEqual(getattr(resolve_tz(None), "key", None), "America/New_York")

    def test_local_offsets_follow_dst_at_the_instant(self) -> None:
        self.assertEqual(timezone_offset_hours("local", "UTC", WINTER), -5.0)
        self.assertEqual(timezone_offset_hours("local", "UTC", SUMMER), -4.0)

    def test_local_wall_times_resolve_per_season(self) -> None:
        self.assertEqual(resolve_local_time(2024, 1, 15, 9, 0, "local"), dt.datetime(2024, 1, 15, 14, 0, tzinfo=UTC))
        self.assertEqual(resolve_local_time(2024, 7, 1, 9, 0, "local"), dt.datetime(2024, 7, 1, 13, 0, tzinfo=UTC))

    def test_local_reference_and_local_row_align(self) -> None:
        cfg = align("Asia/Shanghai", "local", WINTER)
        self.assertEqual(cfg.base_time, dt.datetime(2024, 1, 15, 5, 0, tzinfo=UTC))
        self.assertEqual(cfg.start_hour, 13)

        row = align("local", "Asia/Shanghai", SUMMER)
        self.assertEqual(row.base_time, dt.datetime(2024, 6, 30, 16, 0, tzinfo=UTC))
        self.assertEqual(row.start_hour, 12)


if __name__ == "__main__":
    unittest.main(verbosity=2)
