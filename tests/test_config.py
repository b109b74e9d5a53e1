"""
Unit tests for config files.

Config contract:
- Missing/invalid file -> ConfigError
- Course codes are normalized (uppercase, spaces -> '-')
- Unknown keys are ignored, absent rules/buffers mean "no constraint"
"""

import json
import tempfile
import unittest
from datetime import date, time
from pathlib import Path

from schedulemaker.config import (
    ConfigError,
    config_from_args,
    config_from_dict,
    load_config,
    save_config,
)
from schedulemaker.model import Day

FULL = {
    "name": "fall",
    "startDate": "2024-08-26",
    "endDate": "12/13/2024",
    "courses": ["csci 243", "MATH-251"],
    "format": "full",
    "output": "out.txt",
    "somethingElse": 42,
    "rules": {
        "noClassOn": ["Friday"],
        "noClassBefore": "09:00",
        "noClassAfter": "6:00 PM",
        "allowOnline": False,
        "layover": 10,
    },
    "buffers": [{"name": "Lunch", "days": ["Monday", "Wednesday"], "startTime": "12:00", "endTime": "13:00"}],
}


class TestLoadConfig(unittest.TestCase):
    def test_load_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(ConfigError):
                load_config(Path(d) / "missing.json")

    def test_load_invalid_json_raises(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "broken.json"
            p.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(p)

    def test_full_config(self) -> None:
        cfg = config_from_dict(FULL)

        self.assertEqual(cfg.name, "fall")
        self.assertEqual(cfg.courses, ["CSCI-243", "MATH-251"])
        self.assertEqual(cfg.start_date, date(2024, 8, 26))
        self.assertEqual(cfg.end_date, date(2024, 12, 13))
        self.assertEqual(cfg.format, "full")
        self.assertEqual(cfg.output, "out.txt")

        assert cfg.rules is not None
        self.assertEqual(cfg.rules.no_class_on, [Day.FRIDAY])
        self.assertEqual(cfg.rules.no_class_before, time(9))
        self.assertEqual(cfg.rules.no_class_after, time(18))
        self.assertIs(cfg.rules.allow_online, False)
        self.assertEqual(cfg.rules.layover, 10)

        self.assertEqual(len(cfg.buffers), 1)
        self.assertEqual(cfg.buffers[0].days, [Day.MONDAY, Day.WEDNESDAY])
        self.assertEqual(cfg.buffers[0].start_time, time(12))

    def test_minimal_config_has_no_rules(self) -> None:
        cfg = config_from_dict({"courses": ["A-1"], "startDate": "2024-01-01", "endDate": "2024-05-01"})
        self.assertIsNone(cfg.rules)
        self.assertEqual(cfg.buffers, [])

    def test_courses_required(self) -> None:
        with self.assertRaises(ConfigError):
            config_from_dict({"startDate": "2024-01-01", "endDate": "2024-05-01"})
        with self.assertRaises(ConfigError):
            config_from_dict({"courses": [], "startDate": "2024-01-01", "endDate": "2024-05-01"})

    def test_bad_values_raise(self) -> None:
        base = {"courses": ["A-1"], "startDate": "2024-01-01", "endDate": "2024-05-01"}
        for bad in (
            {"startDate": "yesterday"},
            {"endDate": None},
            {"rules": {"noClassOn": ["Caturday"]}},
            {"rules": {"noClassBefore": "late"}},
            {"rules": {"layover": -5}},
            {"rules": {"layover": 2.5}},
            {"rules": {"layover": True}},
            {"rules": {"layover": "10"}},
            {"rules": {"allowOnline": "false"}},
            {"rules": {"allowOnline": 0}},
            {"buffers": [{"name": "x", "days": ["Monday"], "startTime": "14:00"}]},
            {"buffers": [{"name": "x", "days": ["Monday"], "startTime": "14:00", "endTime": "13:00"}]},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ConfigError):
                    config_from_dict({**base, **bad})

    def test_zero_layover_and_allow_online_kept(self) -> None:
        cfg = config_from_dict({
            "courses": ["A-1"], "startDate": "2024-01-01", "endDate": "2024-05-01",
            "rules": {"layover": 0, "allowOnline": True},
        })
        assert cfg.rules is not None
        self.assertEqual(cfg.rules.layover, 0)
        self.assertIs(cfg.rules.allow_online, True)

    def test_start_after_end_only_warns(self) -> None:
        with self.assertLogs("schedulemaker.config", level="WARNING"):
            cfg = config_from_dict({"courses": ["A-1"], "startDate": "2024-05-01", "endDate": "2024-01-01"})
        self.assertEqual(cfg.start_date, date(2024, 5, 1))

    def test_save_and_load_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "fall-config.json"
            save_config(config_from_dict(FULL), p)

            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data["courses"], ["CSCI-243", "MATH-251"])
            self.assertEqual(data["endDate"], "2024-12-13")
            self.assertEqual(data["rules"]["noClassAfter"], "18:00")

            loaded = load_config(p)
            self.assertEqual(loaded.rules, config_from_dict(FULL).rules)
            self.assertEqual(loaded.buffers, config_from_dict(FULL).buffers)


class TestConfigFromArgs(unittest.TestCase):
    def test_times_become_rules(self) -> None:
        cfg = config_from_args(["csci-243"], "08/26/2024", "12/13/2024", start_time="10:00", end_time="17:00")
        self.assertEqual(cfg.name, "cli")
        self.assertEqual(cfg.courses, ["CSCI-243"])
        assert cfg.rules is not None
        self.assertEqual(cfg.rules.no_class_before, time(10))
        self.assertEqual(cfg.rules.no_class_after, time(17))

    def test_no_times_no_rules(self) -> None:
        cfg = config_from_args(["A-1"], "2024-08-26", "2024-12-13")
        self.assertIsNone(cfg.rules)

    def test_bad_time_excludes_rule(self) -> None:
        with self.assertLogs("schedulemaker.config", level="ERROR"):
            cfg = config_from_args(["A-1"], "2024-08-26", "2024-12-13", start_time="soon", end_time="17:00")
        assert cfg.rules is not None
        self.assertIsNone(cfg.rules.no_class_before)
        self.assertEqual(cfg.rules.no_class_after, time(17))

    def test_bad_dates_raise(self) -> None:
        with self.assertRaises(ConfigError):
            config_from_args(["A-1"], "someday", "2024-12-13")


if __name__ == "__main__":
    unittest.main()
